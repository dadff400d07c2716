# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/archsetup/units/registry.py


from __future__ import annotations
from typing import List, Optional

from archsetup.config.models import ProvisionConfig
from archsetup.core.units import ProvisioningUnit
from archsetup.system.render import TemplateRenderer
from archsetup.units import bootstrap, devenv, graphics, packages, tuning
from archsetup.units.boot import grub_unit
from archsetup.units.hooks import pacman_hooks_unit
from archsetup.units.mounts import drive_mounts_unit
from archsetup.units.services import services_unit
from archsetup.units.shell import zsh_unit


def build_units(
    cfg: ProvisionConfig,
    *,
    user: str,
    renderer: Optional[TemplateRenderer] = None,
) -> List[ProvisioningUnit]:
    """
    The full provisioning run, in the order it must execute:

    system update -> AUR helper -> package groups -> graphics drivers ->
    bootloader -> drive mounts -> services -> shell -> dev environment ->
    pacman hooks -> performance tuning -> security hardening
    """
    renderer = renderer or TemplateRenderer()
    units: List[ProvisioningUnit] = []

    units.extend(bootstrap.build(cfg.aur))
    units.extend(packages.build(cfg.package_groups, cfg.aur, cfg.flatpak, user))
    units.extend(graphics.build(cfg.graphics, cfg.grub, renderer))
    units.append(grub_unit(cfg.grub))
    units.append(drive_mounts_unit(cfg.mounts, user))
    if cfg.services:
        units.append(services_unit(cfg.services))
    units.append(zsh_unit(cfg.zsh, user, renderer))
    units.extend(devenv.build(cfg.git, cfg.tmux, cfg.neovim, user, renderer))
    if cfg.pacman_hooks.hooks:
        units.append(pacman_hooks_unit(cfg.pacman_hooks, renderer))
    units.extend(tuning.build(cfg.performance, cfg.security, renderer))

    return units
