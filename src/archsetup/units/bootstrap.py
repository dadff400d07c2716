# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/archsetup/units/bootstrap.py

from __future__ import annotations

import logging
from typing import List

from ..config.models import AurConfig
from ..core.units import GuardState, ProvisioningUnit, satisfied_if
from ..system.files import ensure_file
from ..system.interface import System
from .common import pacman_install

log = logging.getLogger("archsetup")

AUR_BUILD_DIR = "/tmp/archsetup-aur-helper"


def system_update_unit() -> ProvisioningUnit:
    def guard(system: System) -> GuardState:
        if not system.which("checkupdates"):
            return GuardState.NEEDS_APPLY
        res = system.run(["checkupdates"], check=False)
        # checkupdates: 0 = updates pending, 2 = up to date, anything else = error
        if res.returncode == 2:
            return GuardState.SATISFIED
        if res.returncode == 0:
            return GuardState.NEEDS_APPLY
        raise RuntimeError(f"checkupdates failed ({res.returncode}): {res.output}")

    def apply(system: System, _prompter) -> None:
        system.run(["pacman", "-Syu", "--noconfirm"])

    return ProvisioningUnit(
        name="system-update",
        description="Update system and sync package databases",
        guard=guard,
        apply=apply,
    )


def aur_helper_unit(cfg: AurConfig) -> ProvisioningUnit:
    sudoers = f"/etc/sudoers.d/{cfg.build_user}"

    def guard(system: System) -> GuardState:
        return satisfied_if(system.which(cfg.helper) is not None)

    def apply(system: System, _prompter) -> None:
        pacman_install(system, ["git", "base-devel"])

        if not system.run(["id", cfg.build_user], check=False).ok:
            log.info("creating AUR build user %s", cfg.build_user)
            system.run(["useradd", "-m", cfg.build_user])
        ensure_file(system, sudoers, f"{cfg.build_user} ALL=(ALL) NOPASSWD: ALL\n", mode=0o440)

        system.run(["rm", "-rf", AUR_BUILD_DIR])
        system.run(["git", "clone", cfg.helper_repo, AUR_BUILD_DIR], as_user=cfg.build_user)
        system.run(["makepkg", "-si", "--noconfirm"], as_user=cfg.build_user, cwd=AUR_BUILD_DIR)

        if not system.which(cfg.helper):
            raise RuntimeError(f"{cfg.helper} is still not on PATH after the build")

    return ProvisioningUnit(
        name="aur-helper",
        description=f"Install the {cfg.helper} AUR helper",
        guard=guard,
        apply=apply,
    )


def build(aur: AurConfig) -> List[ProvisioningUnit]:
    return [system_update_unit(), aur_helper_unit(aur)]
