# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/archsetup/core/errors.py
from __future__ import annotations

from typing import Optional


class ArchSetupError(RuntimeError):
    """Base class for provisioning failures."""


class PrecheckError(ArchSetupError):
    """Raised when a run-wide precondition fails (e.g. not running as root)."""


class GuardEvaluationError(ArchSetupError):
    """Raised when a unit guard cannot decide; the unit is then applied."""


class ApplyError(ArchSetupError):
    """Unit-scoped failure carrying the captured command output."""

    def __init__(self, unit: str, message: str, output: Optional[str] = None):
        super().__init__(f"{unit}: {message}")
        self.unit = unit
        self.output = output


class UnitDefinitionError(ValueError):
    """Raised when a provisioning unit is malformed."""


class UnknownDependencyError(UnitDefinitionError):
    pass


class OrderingError(UnitDefinitionError):
    pass


class CyclicDependencyError(UnitDefinitionError):
    pass


class UnknownUnitError(UnitDefinitionError):
    pass


class ConfigError(ValueError):
    """Raised when the provisioning config cannot be loaded or validated."""


class PromptUnavailableError(ArchSetupError):
    """Raised when input is required but no interactive terminal is available."""
