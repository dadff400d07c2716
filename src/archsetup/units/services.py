# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from typing import List

from ..config.models import ServiceSpec
from ..core.units import GuardState, ProvisioningUnit, satisfied_if
from ..system.interface import System
from .common import is_installed, service_active, service_enabled

log = logging.getLogger("archsetup")


def pending_services(system: System, services: List[ServiceSpec]) -> List[str]:
    """Installed services that are not yet enabled and running."""
    pending = []
    for spec in services:
        if spec.package and not is_installed(system, spec.package):
            log.debug("skipping %s: package %s not installed", spec.unit, spec.package)
            continue
        if not (service_enabled(system, spec.unit) and service_active(system, spec.unit)):
            pending.append(spec.unit)
    return pending


def services_unit(services: List[ServiceSpec]) -> ProvisioningUnit:
    def guard(system: System) -> GuardState:
        return satisfied_if(not pending_services(system, services))

    def apply(system: System, _prompter) -> None:
        for unit in pending_services(system, services):
            system.run(["systemctl", "enable", "--now", unit])

    return ProvisioningUnit(
        name="services",
        description="Enable essential services",
        guard=guard,
        apply=apply,
    )
