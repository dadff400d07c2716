# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/archsetup/core/orchestrator.py

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Set

from ..observers.dispatcher import EventBus
from ..observers.events import (
    GuardFailed,
    PrecheckFailed,
    RunFinished,
    RunStarted,
    UnitApplied,
    UnitFailed,
    UnitSkipped,
    UnitStarted,
    new_ctx,
)
from ..system.interface import CommandError, System
from .errors import ApplyError, GuardEvaluationError, PrecheckError
from .planner import select, validate_order
from .prompt import AutoPrompter, Prompter
from .results import ExecutionResult, Outcome, RunStatus, RunSummary, SkipReason
from .units import GuardState, ProvisioningUnit

log = logging.getLogger("archsetup")

Precheck = Callable[[System], None]


@dataclass
class RunOptions:
    assume_yes: bool = False
    dry_run: bool = False
    continue_on_error: bool = True
    only: Optional[Set[str]] = None
    skip: Set[str] = field(default_factory=set)


# ------------------------------------------------------------------------------
# Prechecks
# ------------------------------------------------------------------------------

def require_root(system: System) -> None:
    if not system.is_root():
        raise PrecheckError("Please run as root (use sudo)")


def require_command(name: str) -> Precheck:
    def _check(system: System) -> None:
        if not system.which(name):
            raise PrecheckError(f"Required command '{name}' not found; is this an Arch Linux system?")
    _check.__name__ = f"require_{name}"
    return _check


DEFAULT_PRECHECKS: Sequence[Precheck] = (require_root,)


# ------------------------------------------------------------------------------
# Unit steps
# ------------------------------------------------------------------------------

def _evaluate_guard(unit: ProvisioningUnit, system: System) -> GuardState:
    try:
        state = unit.guard(system)
    except Exception as e:
        raise GuardEvaluationError(f"{unit.name}: {e}") from e
    if not isinstance(state, GuardState):
        raise GuardEvaluationError(f"{unit.name}: guard returned {state!r}")
    return state


def _apply(unit: ProvisioningUnit, system: System, prompter: Prompter) -> None:
    try:
        unit.apply(system, prompter)
    except ApplyError:
        raise
    except CommandError as e:
        raise ApplyError(unit.name, str(e), output=e.result.output) from e
    except Exception as e:
        raise ApplyError(unit.name, str(e)) from e


def _final_status(summary: RunSummary, aborted: bool) -> RunStatus:
    if aborted:
        return RunStatus.PARTIAL
    if summary.declined:
        return RunStatus.USER_LIMITED
    return RunStatus.COMPLETE


def run(
    units: Sequence[ProvisioningUnit],
    system: System,
    *,
    options: Optional[RunOptions] = None,
    prompter: Optional[Prompter] = None,
    observers: Optional[List] = None,
    prechecks: Optional[Sequence[Precheck]] = None,
    run_id: Optional[str] = None,
) -> RunSummary:
    """
    Run units in declared order: skip what is already in place, confirm
    interactive units, apply the rest, and collect one result per unit.
    """
    options = options or RunOptions()
    prompter = prompter or AutoPrompter(answer=options.assume_yes)
    prechecks = DEFAULT_PRECHECKS if prechecks is None else prechecks
    bus = EventBus(observers or [])
    ctx = new_ctx(run_id)
    summary = RunSummary()

    # definition errors raise before any precheck or unit runs
    validate_order(units)
    selected = select(units, options.only, options.skip)

    # 1) Prechecks
    for check in prechecks:
        try:
            check(system)
        except PrecheckError as e:
            log.error("precheck %s failed: %s", getattr(check, "__name__", check), e)
            summary.status = RunStatus.PRECHECK_FAILED
            summary.precheck_error = str(e)
            bus.emit(PrecheckFailed(error=str(e), **ctx))
            return summary

    bus.emit(
        RunStarted(
            units=[u.name for u in units if u.name in selected],
            assume_yes=options.assume_yes,
            dry_run=options.dry_run,
            continue_on_error=options.continue_on_error,
            **ctx,
        )
    )

    # 2) Units, strictly in order
    aborted = False
    for unit in units:
        if unit.name not in selected:
            summary.add(ExecutionResult(unit=unit.name, outcome=Outcome.SKIPPED, reason=SkipReason.FILTERED))
            bus.emit(UnitSkipped(name=unit.name, reason=SkipReason.FILTERED.value, **ctx))
            continue

        bus.emit(UnitStarted(name=unit.name, description=unit.description, **ctx))

        try:
            state = _evaluate_guard(unit, system)
        except GuardEvaluationError as e:
            log.warning("guard failed, treating %s as needs-apply: %s", unit.name, e)
            bus.emit(GuardFailed(name=unit.name, error=str(e), **ctx))
            state = GuardState.NEEDS_APPLY

        if state == GuardState.SATISFIED:
            log.info("%s: already satisfied", unit.name)
            summary.add(ExecutionResult(unit=unit.name, outcome=Outcome.SKIPPED, reason=SkipReason.SATISFIED))
            bus.emit(UnitSkipped(name=unit.name, reason=SkipReason.SATISFIED.value, **ctx))
            continue

        if options.dry_run:
            log.info("%s: would apply", unit.name)
            summary.add(ExecutionResult(unit=unit.name, outcome=Outcome.SKIPPED, reason=SkipReason.DRY_RUN))
            bus.emit(UnitSkipped(name=unit.name, reason=SkipReason.DRY_RUN.value, **ctx))
            continue

        if unit.interactive and not options.assume_yes and not prompter.confirm(unit.confirmation):
            log.info("%s: declined by user", unit.name)
            summary.add(ExecutionResult(unit=unit.name, outcome=Outcome.SKIPPED, reason=SkipReason.DECLINED))
            bus.emit(UnitSkipped(name=unit.name, reason=SkipReason.DECLINED.value, **ctx))
            continue

        t0 = time.time()
        try:
            log.info("%s: applying", unit.name)
            _apply(unit, system, prompter)
        except ApplyError as e:
            duration_ms = int((time.time() - t0) * 1000)
            log.error("%s: failed: %s", unit.name, e)
            summary.add(
                ExecutionResult(
                    unit=unit.name,
                    outcome=Outcome.FAILED,
                    error=str(e),
                    output=e.output,
                    duration_ms=duration_ms,
                )
            )
            bus.emit(UnitFailed(name=unit.name, error=str(e), output=e.output, **ctx))
            if not options.continue_on_error:
                log.error("stopping after %s (continue_on_error is off)", unit.name)
                aborted = True
                break
            continue

        duration_ms = int((time.time() - t0) * 1000)
        summary.add(ExecutionResult(unit=unit.name, outcome=Outcome.APPLIED, duration_ms=duration_ms))
        bus.emit(UnitApplied(name=unit.name, duration_ms=duration_ms, **ctx))

    # 3) Summary
    summary.status = _final_status(summary, aborted)
    bus.emit(
        RunFinished(
            status=summary.status.value,
            applied=summary.applied,
            skipped=summary.skipped,
            failed=summary.failed,
            declined=summary.declined,
            **ctx,
        )
    )
    log.info(summary.summary())
    return summary
