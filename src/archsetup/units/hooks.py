# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from pathlib import Path
from typing import Dict

from ..config.models import PacmanHooksConfig
from ..core.units import GuardState, ProvisioningUnit, satisfied_if
from ..system.files import ensure_file, file_matches
from ..system.interface import System
from ..system.render import TemplateRenderer


def render_hooks(cfg: PacmanHooksConfig, renderer: TemplateRenderer) -> Dict[Path, str]:
    rendered = {}
    for hook in cfg.hooks:
        rendered[Path(cfg.dir) / f"{hook.name}.hook"] = renderer.render(
            "pacman.hook.j2",
            {
                "operations": hook.operations,
                "targets": hook.targets,
                "description": hook.description,
                "depends": hook.depends,
                "exec": hook.exec,
            },
        )
    return rendered


def pacman_hooks_unit(cfg: PacmanHooksConfig, renderer: TemplateRenderer) -> ProvisioningUnit:
    hooks = render_hooks(cfg, renderer)

    def guard(system: System) -> GuardState:
        return satisfied_if(all(file_matches(system, path, body) for path, body in hooks.items()))

    def apply(system: System, _prompter) -> None:
        system.makedirs(cfg.dir)
        for path, body in hooks.items():
            ensure_file(system, path, body)

    return ProvisioningUnit(
        name="pacman-hooks",
        description="Install pacman hooks (GRUB, NVIDIA initcpio, cache cleanup)",
        guard=guard,
        apply=apply,
    )
