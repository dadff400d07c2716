# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from ..config.models import GrubConfig
from ..core.units import GuardState, ProvisioningUnit, satisfied_if
from ..system.files import ensure_line, has_line
from ..system.interface import System

OS_PROBER_LINE = "GRUB_DISABLE_OS_PROBER=false"


def grub_unit(cfg: GrubConfig) -> ProvisioningUnit:
    """
    Enable os-prober and regenerate grub.cfg whenever /etc/default/grub is
    newer than the generated config.
    """

    def guard(system: System) -> GuardState:
        if cfg.os_prober and not has_line(system, cfg.default_file, OS_PROBER_LINE):
            return GuardState.NEEDS_APPLY
        if not system.exists(cfg.cfg_path):
            return GuardState.NEEDS_APPLY
        if not system.exists(cfg.default_file):
            return GuardState.SATISFIED
        return satisfied_if(system.mtime(cfg.cfg_path) >= system.mtime(cfg.default_file))

    def apply(system: System, _prompter) -> None:
        if cfg.os_prober:
            ensure_line(system, cfg.default_file, OS_PROBER_LINE)
        system.run(["grub-mkconfig", "-o", cfg.cfg_path])

    return ProvisioningUnit(
        name="grub",
        description="Configure the GRUB bootloader",
        guard=guard,
        apply=apply,
        interactive=True,
        prompt="Configure GRUB bootloader?",
    )
