# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/archsetup/core/planner.py

from __future__ import annotations

import fnmatch
from collections import deque
from typing import Dict, Iterable, List, Optional, Sequence, Set

from .errors import (
    CyclicDependencyError,
    OrderingError,
    UnitDefinitionError,
    UnknownDependencyError,
    UnknownUnitError,
)
from .units import ProvisioningUnit


def _validate_names(units: Sequence[ProvisioningUnit]) -> Set[str]:
    names: Set[str] = set()
    for u in units:
        if u.name in names:
            raise UnitDefinitionError(f"Duplicate unit name '{u.name}'")
        names.add(u.name)
    for u in units:
        for d in u.requires:
            if d not in names:
                raise UnknownDependencyError(f"Unit '{u.name}' depends on unknown unit '{d}'")
    return names


def validate_order(units: Sequence[ProvisioningUnit]) -> None:
    """
    Fail fast unless every unit comes after all the units it requires.
    """
    _validate_names(units)
    seen: Set[str] = set()
    for u in units:
        for d in u.requires:
            if d not in seen:
                raise OrderingError(f"Unit '{u.name}' is declared before its prerequisite '{d}'")
        seen.add(u.name)


def plan(units: Sequence[ProvisioningUnit]) -> List[ProvisioningUnit]:
    """
    Stable topological sort on 'requires'. Ties keep declaration order, so a
    correctly declared list comes back unchanged.
    """
    _validate_names(units)

    position: Dict[str, int] = {u.name: i for i, u in enumerate(units)}
    by_name: Dict[str, ProvisioningUnit] = {u.name: u for u in units}
    indeg: Dict[str, int] = {u.name: len(set(u.requires)) for u in units}

    queue = deque(u.name for u in units if indeg[u.name] == 0)
    order: List[ProvisioningUnit] = []

    while queue:
        n = queue.popleft()
        order.append(by_name[n])
        for u in units:
            if n in u.requires:
                indeg[u.name] -= 1
                if indeg[u.name] == 0:
                    queue.append(u.name)
                    queue = deque(sorted(queue, key=position.__getitem__))

    if len(order) != len(units):
        stuck = sorted(n for n, deg in indeg.items() if deg > 0)
        raise CyclicDependencyError(f"Cyclic dependency among units: {', '.join(stuck)}")
    return order


def parse_unit_flag(value: Optional[str]) -> Optional[Set[str]]:
    """
    Parse --only / --skip.

    --only zsh
    --only zsh,tmux,flatpak:*
    --only all  -> None (everything)
    """
    if value is None or value.strip() in ("", "all"):
        return None
    return {p.strip().lower() for p in value.split(",") if p.strip()}


def _expand(patterns: Iterable[str], names: List[str]) -> Set[str]:
    matched: Set[str] = set()
    for pattern in patterns:
        hits = fnmatch.filter(names, pattern)
        if not hits:
            raise UnknownUnitError(
                f"No unit matches '{pattern}'. Valid units: {', '.join(names)}"
            )
        matched.update(hits)
    return matched


def select(
    units: Sequence[ProvisioningUnit],
    only: Optional[Iterable[str]] = None,
    skip: Optional[Iterable[str]] = None,
) -> Set[str]:
    """
    Resolve --only/--skip patterns into the set of unit names that should run.
    """
    names = [u.name for u in units]
    selected = _expand(only, names) if only else set(names)
    if skip:
        selected -= _expand(skip, names)
    return selected
