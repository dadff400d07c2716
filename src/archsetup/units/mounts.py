# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/archsetup/units/mounts.py

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from ..config.models import MountConfig
from ..core.units import GuardState, ProvisioningUnit, satisfied_if
from ..system.files import ensure_line, read_or_empty
from ..system.fstab import LSBLK_COLUMNS, FstabEntry, fstab_has_uuid, parse_lsblk_pairs, select_mounts
from ..system.interface import System

log = logging.getLogger("archsetup")


def planned_mounts(system: System, cfg: MountConfig, user: str) -> List[FstabEntry]:
    """Query block devices now and decide which ones belong in fstab."""
    root_uuid = system.run(["findmnt", "-no", "UUID", "/"], check=False).stdout.strip() or None
    lsblk = system.run(["lsblk", "-P", "-o", LSBLK_COLUMNS])
    devices = parse_lsblk_pairs(lsblk.stdout)
    return select_mounts(
        devices,
        root_uuid=root_uuid,
        mount_base=system.user_home(user) / cfg.base_dir,
        ntfs_options=cfg.ntfs_options,
        linux_options=cfg.linux_options,
    )


def drive_mounts_unit(cfg: MountConfig, user: str) -> ProvisioningUnit:
    def guard(system: System) -> GuardState:
        entries = planned_mounts(system, cfg, user)
        fstab = read_or_empty(system, cfg.fstab)
        return satisfied_if(
            all(fstab_has_uuid(fstab, e.uuid) and system.is_dir(e.mountpoint) for e in entries)
        )

    def apply(system: System, _prompter) -> None:
        entries = planned_mounts(system, cfg, user)
        for entry in entries:
            mountpoint = Path(entry.mountpoint)
            if not system.is_dir(mountpoint):
                system.makedirs(mountpoint)
                system.chown(mountpoint.parent, user)
                system.chown(mountpoint, user)
            if fstab_has_uuid(read_or_empty(system, cfg.fstab), entry.uuid):
                log.warning("Entry for UUID=%s already exists in fstab", entry.uuid)
                continue
            ensure_line(system, cfg.fstab, entry.render())
            log.info("Added %s to fstab", entry.mountpoint)
        if entries:
            system.run(["mount", "-a"])

    return ProvisioningUnit(
        name="drive-mounts",
        description="Mount extra drives by UUID via fstab",
        guard=guard,
        apply=apply,
        interactive=True,
        prompt="Would you like to auto-mount detected drives?",
    )
