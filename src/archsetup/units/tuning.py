# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/archsetup/units/tuning.py

from __future__ import annotations

import logging
from typing import List

from ..config.models import PerformanceConfig, SecurityConfig
from ..core.units import GuardState, ProvisioningUnit, satisfied_if, validate_packages
from ..system.files import ensure_file, file_matches
from ..system.interface import System
from ..system.render import TemplateRenderer
from .common import is_installed, pacman_install, packages_installed, service_enabled

log = logging.getLogger("archsetup")


def performance_unit(cfg: PerformanceConfig, renderer: TemplateRenderer) -> ProvisioningUnit:
    sysctl = renderer.render("sysctl-swappiness.conf.j2", {"swappiness": cfg.swappiness})
    udev = renderer.render(
        "udev-ioscheduler.rules.j2",
        {
            "nvme": cfg.schedulers.get("nvme", "none"),
            "ssd": cfg.schedulers.get("ssd", "mq-deadline"),
            "hdd": cfg.schedulers.get("hdd", "bfq"),
        },
    )

    def guard(system: System) -> GuardState:
        return satisfied_if(
            file_matches(system, cfg.sysctl_file, sysctl)
            and file_matches(system, cfg.udev_file, udev)
            and service_enabled(system, "fstrim.timer")
        )

    def apply(system: System, _prompter) -> None:
        if ensure_file(system, cfg.sysctl_file, sysctl):
            system.run(["sysctl", "-p", cfg.sysctl_file])
        ensure_file(system, cfg.udev_file, udev)
        system.run(["systemctl", "enable", "fstrim.timer"])

    return ProvisioningUnit(
        name="performance",
        description="Tune swappiness, I/O schedulers and periodic TRIM",
        guard=guard,
        apply=apply,
        interactive=True,
        prompt="Apply system performance optimizations?",
    )


def _ufw_active(system: System) -> bool:
    res = system.run(["ufw", "status"], check=False)
    return res.ok and "Status: active" in res.stdout


def security_unit(cfg: SecurityConfig, renderer: TemplateRenderer) -> ProvisioningUnit:
    pkgs = validate_packages("security", cfg.packages)
    jail = renderer.render(
        "jail.local.j2",
        {"bantime": cfg.bantime, "findtime": cfg.findtime, "maxretry": cfg.maxretry},
    )

    def guard(system: System) -> GuardState:
        return satisfied_if(
            packages_installed(system, pkgs)
            and _ufw_active(system)
            and service_enabled(system, "fail2ban")
            and file_matches(system, cfg.jail_file, jail)
        )

    def apply(system: System, _prompter) -> None:
        pacman_install(system, pkgs)

        system.run(["systemctl", "enable", "--now", "ufw"])
        rules = list(cfg.ufw_rules)
        if is_installed(system, "plasma-desktop"):
            log.info("KDE Plasma detected, opening KDE Connect ports")
            rules.extend(cfg.kde_connect_rules)
        for rule in rules:
            system.run(["ufw", *rule])
        system.run(["ufw", "--force", "enable"])

        system.run(["systemctl", "enable", "--now", "fail2ban"])
        ensure_file(system, cfg.jail_file, jail)
        system.run(["systemctl", "restart", "fail2ban"])

    return ProvisioningUnit(
        name="security",
        description="Configure firewall (ufw) and fail2ban",
        guard=guard,
        apply=apply,
        interactive=True,
        prompt="Configure system security (firewall, fail2ban)?",
    )


def build(performance: PerformanceConfig, security: SecurityConfig, renderer: TemplateRenderer) -> List[ProvisioningUnit]:
    units = [performance_unit(performance, renderer)]
    if security.packages:
        units.append(security_unit(security, renderer))
    return units
