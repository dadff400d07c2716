# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/archsetup/units/shell.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from ..config.models import ZshConfig
from ..core.units import GuardState, ProvisioningUnit, satisfied_if
from ..system.files import contains, ensure_block, ensure_line, has_line, replace_line
from ..system.interface import System
from ..system.render import TemplateRenderer
from .common import pacman_install

log = logging.getLogger("archsetup")

INSTALLER_PATH = "/tmp/archsetup-ohmyzsh-install.sh"


@dataclass(frozen=True)
class ZshPaths:
    home: Path

    @property
    def omz(self) -> Path:
        return self.home / ".oh-my-zsh"

    @property
    def custom(self) -> Path:
        return self.omz / "custom"

    @property
    def zshrc(self) -> Path:
        return self.home / ".zshrc"

    def theme_dir(self, theme: str) -> Path:
        return self.custom / "themes" / theme.split("/")[0]

    def plugin_dir(self, plugin: str) -> Path:
        return self.custom / "plugins" / plugin


def zsh_unit(cfg: ZshConfig, user: str, renderer: TemplateRenderer) -> ProvisioningUnit:
    theme_line = f'ZSH_THEME="{cfg.theme}"'
    plugins_line = f"plugins=({' '.join(cfg.plugins)})"

    def source_block(paths: ZshPaths) -> str:
        return renderer.render(
            "zshrc-plugins.j2",
            {"custom_dir": str(paths.custom), "sourced": cfg.source_plugins},
        )

    def guard(system: System) -> GuardState:
        paths = ZshPaths(system.user_home(user))
        if not system.which("zsh") or not system.is_dir(paths.omz):
            return GuardState.NEEDS_APPLY
        if not system.is_dir(paths.theme_dir(cfg.theme)):
            return GuardState.NEEDS_APPLY
        if any(not system.is_dir(paths.plugin_dir(p)) for p in cfg.plugin_repos):
            return GuardState.NEEDS_APPLY
        if not (has_line(system, paths.zshrc, theme_line) and has_line(system, paths.zshrc, plugins_line)):
            return GuardState.NEEDS_APPLY
        if cfg.source_plugins and not contains(system, paths.zshrc, source_block(paths).strip("\n")):
            return GuardState.NEEDS_APPLY
        return satisfied_if(system.login_shell(user).endswith("/zsh"))

    def apply(system: System, _prompter) -> None:
        paths = ZshPaths(system.user_home(user))
        pacman_install(system, ["zsh", "git"])

        if not system.is_dir(paths.omz):
            log.info("installing Oh-My-Zsh for %s", user)
            system.write_text(INSTALLER_PATH, system.fetch(cfg.installer_url), mode=0o755)
            system.run(["sh", INSTALLER_PATH, "--unattended"], as_user=user)

        theme_dir = paths.theme_dir(cfg.theme)
        if not system.is_dir(theme_dir):
            system.run(["git", "clone", "--depth=1", cfg.theme_repo, str(theme_dir)], as_user=user)

        for plugin, repo in cfg.plugin_repos.items():
            plugin_dir = paths.plugin_dir(plugin)
            if not system.is_dir(plugin_dir):
                system.run(["git", "clone", repo, str(plugin_dir)], as_user=user)

        if not replace_line(system, paths.zshrc, r"^ZSH_THEME=.*$", theme_line):
            ensure_line(system, paths.zshrc, theme_line)
        if not replace_line(system, paths.zshrc, r"^plugins=\(.*\)$", plugins_line):
            ensure_line(system, paths.zshrc, plugins_line)
        if cfg.source_plugins:
            ensure_block(system, paths.zshrc, source_block(paths))
        system.chown(paths.zshrc, user)

        if not system.login_shell(user).endswith("/zsh"):
            zsh = system.which("zsh") or "/usr/bin/zsh"
            system.run(["chsh", "-s", zsh, user])

    return ProvisioningUnit(
        name="zsh",
        description="Set up ZSH with Oh-My-Zsh, theme and plugins",
        guard=guard,
        apply=apply,
    )
