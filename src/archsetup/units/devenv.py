# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/archsetup/units/devenv.py

from __future__ import annotations

from typing import List

from ..config.models import GitConfig, NeovimConfig, TmuxConfig
from ..core.units import GuardState, ProvisioningUnit, satisfied_if
from ..system.files import ensure_file
from ..system.interface import System
from ..system.render import TemplateRenderer
from .common import ensure_user_dir, pacman_install

PLUG_VIM = ".local/share/nvim/site/autoload/plug.vim"
NVIM_CONFIG_DIR = ".config/nvim"
PLUGGED_DIR = ".local/share/nvim/plugged"


def _git_get(system: System, user: str, key: str) -> str:
    res = system.run(["git", "config", "--global", key], as_user=user, check=False)
    return res.stdout.strip() if res.ok else ""


def git_config_unit(cfg: GitConfig, user: str) -> ProvisioningUnit:
    def guard(system: System) -> GuardState:
        return satisfied_if(bool(_git_get(system, user, "user.name") and _git_get(system, user, "user.email")))

    def apply(system: System, prompter) -> None:
        name = cfg.name or prompter.ask("Enter your git username")
        email = cfg.email or prompter.ask("Enter your git email")
        settings = {
            "user.name": name,
            "user.email": email,
            "core.editor": cfg.editor,
            "init.defaultBranch": cfg.default_branch,
        }
        for key, value in settings.items():
            system.run(["git", "config", "--global", key, value], as_user=user)

    return ProvisioningUnit(
        name="git-config",
        description="Configure git identity and defaults",
        guard=guard,
        apply=apply,
        interactive=True,
        prompt="Would you like to configure git?",
    )


def tmux_unit(cfg: TmuxConfig, user: str, renderer: TemplateRenderer) -> ProvisioningUnit:
    content = renderer.render(
        "tmux.conf.j2",
        {"prefix_key": cfg.prefix_key, "mouse": cfg.mouse, "history_limit": cfg.history_limit},
    )

    def guard(system: System) -> GuardState:
        return satisfied_if(system.exists(system.user_home(user) / ".tmux.conf"))

    def apply(system: System, _prompter) -> None:
        path = system.user_home(user) / ".tmux.conf"
        # an existing file belongs to the user; never overwrite it
        if not system.exists(path):
            ensure_file(system, path, content, owner=user)

    return ProvisioningUnit(
        name="tmux",
        description="Write a default tmux configuration",
        guard=guard,
        apply=apply,
    )


def neovim_unit(cfg: NeovimConfig, user: str, renderer: TemplateRenderer) -> ProvisioningUnit:
    init_vim = renderer.render("init.vim.j2", {"plugins": cfg.plugins, "colorscheme": cfg.colorscheme})

    def plugins_missing(system: System, home) -> bool:
        return bool(cfg.plugins) and not system.is_dir(home / PLUGGED_DIR)

    def guard(system: System) -> GuardState:
        home = system.user_home(user)
        return satisfied_if(
            system.which("nvim") is not None
            and system.exists(home / PLUG_VIM)
            and system.exists(home / NVIM_CONFIG_DIR / "init.vim")
            and not plugins_missing(system, home)
        )

    def apply(system: System, _prompter) -> None:
        home = system.user_home(user)
        pacman_install(system, ["neovim", "git"])

        plug = home / PLUG_VIM
        if not system.exists(plug):
            ensure_user_dir(system, user, home, str(plug.parent.relative_to(home)))
            ensure_file(system, plug, system.fetch(cfg.plug_url), owner=user)

        config_dir = ensure_user_dir(system, user, home, NVIM_CONFIG_DIR)
        init_path = config_dir / "init.vim"
        # an existing init.vim belongs to the user; never overwrite it
        if not system.exists(init_path):
            ensure_file(system, init_path, init_vim, owner=user)
        if plugins_missing(system, home):
            system.run(["nvim", "--headless", "+PlugInstall", "+qall"], as_user=user)

    return ProvisioningUnit(
        name="neovim",
        description="Set up Neovim with vim-plug and a starter init.vim",
        guard=guard,
        apply=apply,
    )


def build(git: GitConfig, tmux: TmuxConfig, neovim: NeovimConfig, user: str, renderer: TemplateRenderer) -> List[ProvisioningUnit]:
    return [
        git_config_unit(git, user),
        tmux_unit(tmux, user, renderer),
        neovim_unit(neovim, user, renderer),
    ]
