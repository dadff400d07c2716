# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/archsetup/units/common.py
"""
Package-manager and service queries shared by the unit builders.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional

from ..system.interface import System

log = logging.getLogger("archsetup")

PACMAN_INSTALL = ["pacman", "-S", "--needed", "--noconfirm"]


def missing_packages(system: System, packages: Iterable[str]) -> List[str]:
    """`pacman -T` prints the dependencies that are not satisfied locally."""
    pkgs = list(packages)
    if not pkgs:
        return []
    res = system.run(["pacman", "-T", *pkgs], check=False)
    if res.returncode == 0:
        return []
    if res.returncode != 127:
        raise RuntimeError(f"pacman -T failed ({res.returncode}): {res.output}")
    return [line.strip() for line in res.stdout.splitlines() if line.strip()]


def packages_installed(system: System, packages: Iterable[str]) -> bool:
    return not missing_packages(system, packages)


def is_installed(system: System, package: str) -> bool:
    return system.run(["pacman", "-Q", package], check=False).ok


def pacman_install(system: System, packages: Iterable[str]) -> None:
    system.run([*PACMAN_INSTALL, *packages])


def service_enabled(system: System, unit: str) -> bool:
    return system.run(["systemctl", "is-enabled", "--quiet", unit], check=False).ok


def service_active(system: System, unit: str) -> bool:
    return system.run(["systemctl", "is-active", "--quiet", unit], check=False).ok


def ensure_user_dir(system: System, user: str, home: Path, relative: str) -> Path:
    """
    Create home/relative one component at a time, handing every directory
    it creates to `user`.
    """
    current = home
    for part in Path(relative).parts:
        current = current / part
        if not system.exists(current):
            system.makedirs(current)
            system.chown(current, user)
    return current


def resolve_user(configured: Optional[str] = None) -> str:
    """
    The desktop user being provisioned: config, then SUDO_USER, then the
    login name of the controlling terminal. Runs no commands.
    """
    if configured:
        return configured
    sudo_user = os.environ.get("SUDO_USER")
    if sudo_user and sudo_user != "root":
        return sudo_user
    try:
        name = os.getlogin()
    except OSError:
        name = ""
    if name:
        return name
    log.warning("could not determine the invoking user, provisioning root's environment")
    return "root"
