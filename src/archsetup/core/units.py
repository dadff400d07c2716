# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/archsetup/core/units.py

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional, Tuple

from .errors import UnitDefinitionError

if TYPE_CHECKING:
    from ..system.interface import System
    from .prompt import Prompter


UNIT_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9:._-]*$")
PACKAGE_NAME_RE = re.compile(r"^[a-z0-9@._+][a-z0-9@._+-]*$")


class GuardState(str, Enum):
    SATISFIED = "satisfied"
    NEEDS_APPLY = "needs-apply"


def satisfied_if(condition: bool) -> GuardState:
    return GuardState.SATISFIED if condition else GuardState.NEEDS_APPLY


Guard = Callable[["System"], GuardState]
Apply = Callable[["System", "Prompter"], None]


@dataclass(frozen=True)
class ProvisioningUnit:
    """
    One idempotent, guarded step of machine setup.

    `guard` inspects the live system and never mutates it. `apply` must be
    safe to call even when the guard would report SATISFIED.
    """

    name: str
    guard: Guard
    apply: Apply
    description: str = ""
    interactive: bool = False
    prompt: Optional[str] = None
    requires: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.name or not UNIT_NAME_RE.match(self.name):
            raise UnitDefinitionError(f"Invalid unit name: {self.name!r}")
        if not callable(self.guard):
            raise UnitDefinitionError(f"Unit '{self.name}' has a non-callable guard")
        if not callable(self.apply):
            raise UnitDefinitionError(f"Unit '{self.name}' has a non-callable apply")
        if self.name in self.requires:
            raise UnitDefinitionError(f"Unit '{self.name}' requires itself")
        # callers may pass a list
        object.__setattr__(self, "requires", tuple(self.requires))

    @property
    def confirmation(self) -> str:
        return self.prompt or f"Apply {self.description or self.name}?"


def validate_packages(unit_name: str, packages: Iterable[str]) -> List[str]:
    """
    Return the package list, rejecting anything that is not a plain package name.
    """
    pkgs = list(packages)
    if not pkgs:
        raise UnitDefinitionError(f"Unit '{unit_name}' has an empty package list")
    bad = [p for p in pkgs if not isinstance(p, str) or not PACKAGE_NAME_RE.match(p)]
    if bad:
        raise UnitDefinitionError(
            f"Unit '{unit_name}' has invalid package names: {', '.join(map(repr, bad))}"
        )
    return pkgs
