# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/archsetup/units/graphics.py

from __future__ import annotations

import re
from typing import List

from ..config.models import GraphicsConfig, GrubConfig
from ..core.units import GuardState, ProvisioningUnit, satisfied_if, validate_packages
from ..system.files import contains, ensure_file, replace_line
from ..system.interface import System
from ..system.render import TemplateRenderer
from .common import pacman_install, packages_installed

DISPLAY_CLASSES = ("VGA compatible controller", "3D controller", "Display controller")

VENDOR_PATTERNS = {
    "nvidia": re.compile(r"nvidia", re.IGNORECASE),
    "amd": re.compile(r"\bamd\b|\bati\b|radeon", re.IGNORECASE),
    "intel": re.compile(r"intel", re.IGNORECASE),
}


def gpu_present(system: System, vendor: str) -> bool:
    """True when `lspci` lists a display controller from `vendor`."""
    res = system.run(["lspci"], check=False)
    if not res.ok:
        raise RuntimeError(f"lspci failed ({res.returncode}): {res.output}")
    pattern = VENDOR_PATTERNS[vendor]
    for line in res.stdout.splitlines():
        if any(cls in line for cls in DISPLAY_CLASSES) and pattern.search(line):
            return True
    return False


def driver_unit(vendor: str, title: str, packages: List[str]) -> ProvisioningUnit:
    name = f"graphics:{vendor}"
    pkgs = validate_packages(name, packages)

    def guard(system: System) -> GuardState:
        if not gpu_present(system, vendor):
            return GuardState.SATISFIED
        return satisfied_if(packages_installed(system, pkgs))

    def apply(system: System, _prompter) -> None:
        pacman_install(system, pkgs)

    return ProvisioningUnit(
        name=name,
        description=f"Install {title} graphics drivers",
        guard=guard,
        apply=apply,
        interactive=True,
        prompt=f"{title} GPU detected. Install {title} drivers?",
    )


def nvidia_unit(cfg: GraphicsConfig, renderer: TemplateRenderer) -> ProvisioningUnit:
    pkgs = validate_packages("graphics:nvidia", cfg.nvidia_packages)
    xorg_conf = renderer.render("nvidia-xorg.conf.j2")

    def guard(system: System) -> GuardState:
        if not gpu_present(system, "nvidia"):
            return GuardState.SATISFIED
        return satisfied_if(
            packages_installed(system, pkgs)
            and system.exists(cfg.nvidia_xorg_conf)
            and system.read_text(cfg.nvidia_xorg_conf) == xorg_conf
        )

    def apply(system: System, _prompter) -> None:
        pacman_install(system, pkgs)
        ensure_file(system, cfg.nvidia_xorg_conf, xorg_conf)

    return ProvisioningUnit(
        name="graphics:nvidia",
        description="Install NVIDIA drivers and Xorg device config",
        guard=guard,
        apply=apply,
        interactive=True,
        prompt="NVIDIA GPU detected. Install NVIDIA drivers?",
    )


def nvidia_drm_unit(cfg: GraphicsConfig, grub: GrubConfig) -> ProvisioningUnit:
    param = cfg.nvidia_kernel_param
    pattern = r'^GRUB_CMDLINE_LINUX_DEFAULT="(?!.*' + re.escape(param) + ")"

    def guard(system: System) -> GuardState:
        if not gpu_present(system, "nvidia"):
            return GuardState.SATISFIED
        return satisfied_if(contains(system, grub.default_file, param))

    def apply(system: System, _prompter) -> None:
        changed = replace_line(system, grub.default_file, pattern, f'GRUB_CMDLINE_LINUX_DEFAULT="{param} ')
        if not changed and not contains(system, grub.default_file, param):
            raise RuntimeError(f"No GRUB_CMDLINE_LINUX_DEFAULT line in {grub.default_file}")

    return ProvisioningUnit(
        name="graphics:nvidia-drm",
        description=f"Add {param} to the kernel command line",
        guard=guard,
        apply=apply,
        interactive=True,
        prompt="Enable NVIDIA DRM modeset in GRUB?",
        requires=("graphics:nvidia",),
    )


def video_acceleration_unit(cfg: GraphicsConfig) -> ProvisioningUnit:
    pkgs = validate_packages("graphics:video-acceleration", cfg.video_acceleration_packages)

    def guard(system: System) -> GuardState:
        return satisfied_if(packages_installed(system, pkgs))

    def apply(system: System, _prompter) -> None:
        pacman_install(system, pkgs)

    return ProvisioningUnit(
        name="graphics:video-acceleration",
        description="Install video acceleration utilities",
        guard=guard,
        apply=apply,
        interactive=True,
        prompt="Install video acceleration packages?",
    )


def build(cfg: GraphicsConfig, grub: GrubConfig, renderer: TemplateRenderer) -> List[ProvisioningUnit]:
    units: List[ProvisioningUnit] = []
    if cfg.nvidia_packages:
        units.append(nvidia_unit(cfg, renderer))
        units.append(nvidia_drm_unit(cfg, grub))
    if cfg.amd_packages:
        units.append(driver_unit("amd", "AMD", cfg.amd_packages))
    if cfg.intel_packages:
        units.append(driver_unit("intel", "Intel", cfg.intel_packages))
    if cfg.video_acceleration_packages:
        units.append(video_acceleration_unit(cfg))
    return units
