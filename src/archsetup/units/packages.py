# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/archsetup/units/packages.py

from __future__ import annotations

from typing import List

from ..config.models import AurConfig, FlatpakApp, FlatpakConfig, PackageGroup
from ..core.units import GuardState, ProvisioningUnit, satisfied_if, validate_packages
from ..system.interface import System
from .common import pacman_install, packages_installed


def package_group_unit(group: PackageGroup) -> ProvisioningUnit:
    name = f"packages:{group.name}"
    packages = validate_packages(name, group.packages)
    label = group.description or group.name

    def guard(system: System) -> GuardState:
        return satisfied_if(packages_installed(system, packages))

    def apply(system: System, _prompter) -> None:
        pacman_install(system, packages)

    return ProvisioningUnit(
        name=name,
        description=f"Install {label}",
        guard=guard,
        apply=apply,
        interactive=group.interactive,
        prompt=f"Install {label}?",
    )


def aur_packages_unit(cfg: AurConfig, user: str) -> ProvisioningUnit:
    packages = validate_packages("aur-packages", cfg.packages)

    def guard(system: System) -> GuardState:
        return satisfied_if(packages_installed(system, packages))

    def apply(system: System, _prompter) -> None:
        # AUR helpers refuse to run as root
        system.run([cfg.helper, "-S", "--needed", "--noconfirm", *packages], as_user=user)

    return ProvisioningUnit(
        name="aur-packages",
        description="Install AUR packages",
        guard=guard,
        apply=apply,
        interactive=True,
        prompt="Install AUR packages?",
        requires=("aur-helper",),
    )


def flatpak_remote_unit(cfg: FlatpakConfig) -> ProvisioningUnit:
    def guard(system: System) -> GuardState:
        if not system.which("flatpak"):
            return GuardState.NEEDS_APPLY
        res = system.run(["flatpak", "remotes", "--columns=name"], check=False)
        names = {line.strip() for line in res.stdout.splitlines()}
        return satisfied_if(res.ok and cfg.remote_name in names)

    def apply(system: System, _prompter) -> None:
        pacman_install(system, ["flatpak"])
        system.run(["flatpak", "remote-add", "--if-not-exists", cfg.remote_name, cfg.remote_url])

    return ProvisioningUnit(
        name="flatpak-remote",
        description=f"Add the {cfg.remote_name} Flatpak remote",
        guard=guard,
        apply=apply,
    )


def flatpak_app_unit(app: FlatpakApp, remote: str) -> ProvisioningUnit:
    def guard(system: System) -> GuardState:
        return satisfied_if(system.run(["flatpak", "info", app.app_id], check=False).ok)

    def apply(system: System, _prompter) -> None:
        system.run(["flatpak", "install", "-y", "--noninteractive", remote, app.app_id])

    return ProvisioningUnit(
        name=f"flatpak:{app.name}",
        description=f"Install {app.title} (Flatpak)",
        guard=guard,
        apply=apply,
        interactive=True,
        prompt=f"Install {app.title}?",
        requires=("flatpak-remote",),
    )


def build(groups: List[PackageGroup], aur: AurConfig, flatpak: FlatpakConfig, user: str) -> List[ProvisioningUnit]:
    units = [package_group_unit(g) for g in groups]
    if aur.packages:
        units.append(aur_packages_unit(aur, user))
    units.append(flatpak_remote_unit(flatpak))
    units.extend(flatpak_app_unit(app, flatpak.remote_name) for app in flatpak.apps)
    return units
