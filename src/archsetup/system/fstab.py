# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

LSBLK_COLUMNS = "NAME,FSTYPE,UUID,MOUNTPOINT,ROTA"
LINUX_FSTYPES = ("ext4", "xfs", "btrfs")


@dataclass(frozen=True)
class BlockDevice:
    name: str
    fstype: str
    uuid: str
    mountpoint: str = ""
    rotational: bool = True

    @property
    def solid_state(self) -> bool:
        return self.name.startswith("nvme") or "ssd" in self.name.lower() or not self.rotational


@dataclass(frozen=True)
class FstabEntry:
    uuid: str
    mountpoint: str
    fstype: str
    options: str = "defaults"
    dump: int = 0
    passno: int = 2

    def render(self) -> str:
        return f"UUID={self.uuid}    {self.mountpoint}    {self.fstype}    {self.options}    {self.dump}    {self.passno}"


def parse_lsblk_pairs(text: str) -> List[BlockDevice]:
    """
    Parse `lsblk -P -o NAME,FSTYPE,UUID,MOUNTPOINT,ROTA` output.
    Devices without a filesystem UUID are dropped.
    """
    devices: List[BlockDevice] = []
    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            continue
        fields: Dict[str, str] = {}
        for token in shlex.split(line):
            key, _, value = token.partition("=")
            fields[key] = value
        if not fields.get("UUID"):
            continue
        devices.append(
            BlockDevice(
                name=fields.get("NAME", ""),
                fstype=fields.get("FSTYPE", ""),
                uuid=fields["UUID"],
                mountpoint=fields.get("MOUNTPOINT", ""),
                rotational=fields.get("ROTA", "1") != "0",
            )
        )
    return devices


def fstab_uuids(text: str) -> List[str]:
    uuids = []
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        spec = line.split()[0]
        if spec.startswith("UUID="):
            uuids.append(spec[len("UUID="):])
    return uuids


def fstab_has_uuid(text: str, uuid: str) -> bool:
    return uuid in fstab_uuids(text)


def _first(devices: Iterable[BlockDevice]) -> Optional[BlockDevice]:
    return next(iter(devices), None)


def select_mounts(
    devices: List[BlockDevice],
    *,
    root_uuid: Optional[str],
    mount_base: Path,
    ntfs_options: str,
    linux_options: str,
) -> List[FstabEntry]:
    """
    Pick at most one Windows (NTFS), one SSD and one HDD partition to mount
    under `mount_base`. The root filesystem is never selected.
    """
    candidates = [d for d in devices if d.uuid != root_uuid]
    entries: List[FstabEntry] = []

    windows = _first(d for d in candidates if d.fstype == "ntfs")
    if windows:
        entries.append(
            FstabEntry(
                uuid=windows.uuid,
                mountpoint=str(mount_base / "Windows"),
                fstype="ntfs-3g",
                options=ntfs_options,
                passno=0,
            )
        )

    linux = [d for d in candidates if d.fstype in LINUX_FSTYPES]
    ssd = _first(d for d in linux if d.solid_state)
    if ssd:
        entries.append(
            FstabEntry(uuid=ssd.uuid, mountpoint=str(mount_base / "SSD"), fstype=ssd.fstype, options=linux_options)
        )
    hdd = _first(d for d in linux if not d.solid_state)
    if hdd:
        entries.append(
            FstabEntry(uuid=hdd.uuid, mountpoint=str(mount_base / "HDD"), fstype=hdd.fstype, options=linux_options)
        )
    return entries
