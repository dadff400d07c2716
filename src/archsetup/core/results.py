# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class Outcome(str, Enum):
    SKIPPED = "skipped"
    APPLIED = "applied"
    FAILED = "failed"


class SkipReason(str, Enum):
    SATISFIED = "satisfied"
    DECLINED = "declined"
    DRY_RUN = "dry-run"
    FILTERED = "filtered"


class RunStatus(str, Enum):
    COMPLETE = "complete"
    PARTIAL = "partial"                  # aborted after a failure
    USER_LIMITED = "user-limited"        # at least one unit declined
    PRECHECK_FAILED = "precheck-failed"


@dataclass
class ExecutionResult:
    unit: str
    outcome: Outcome
    reason: Optional[SkipReason] = None
    error: Optional[str] = None
    output: Optional[str] = None
    duration_ms: int = 0


@dataclass
class RunSummary:
    results: List[ExecutionResult] = field(default_factory=list)
    status: RunStatus = RunStatus.COMPLETE
    precheck_error: Optional[str] = None

    def add(self, result: ExecutionResult) -> None:
        self.results.append(result)

    def _count(self, outcome: Outcome) -> int:
        return sum(1 for r in self.results if r.outcome == outcome)

    @property
    def applied(self) -> int:
        return self._count(Outcome.APPLIED)

    @property
    def skipped(self) -> int:
        return self._count(Outcome.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(Outcome.FAILED)

    @property
    def declined(self) -> int:
        return sum(1 for r in self.results if r.reason == SkipReason.DECLINED)

    def names(self) -> List[str]:
        return [r.unit for r in self.results]

    def by_name(self) -> dict:
        return {r.unit: r for r in self.results}

    def summary(self) -> str:
        return (
            f"APPLIED={self.applied} SKIPPED={self.skipped} "
            f"FAILED={self.failed} DECLINED={self.declined} STATUS={self.status.value}"
        )

    @property
    def exit_code(self) -> int:
        if self.status == RunStatus.PRECHECK_FAILED:
            return 2
        if self.status == RunStatus.PARTIAL:
            return 1
        return 0
