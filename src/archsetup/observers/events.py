# src/archsetup/observers/events.py

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import List, Dict, Any, Optional
from datetime import datetime, timezone
import uuid


# ---------------------------------------------------------------------
# Base context and helper
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class BaseEvent:
    ts: str           # ISO timestamp
    run_id: str       # correlates all events of one orchestrator run

    def dict(self) -> Dict[str, Any]:
        return asdict(self)


def now_ts() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def new_ctx(run_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "ts": now_ts(),
        "run_id": run_id or str(uuid.uuid4()),
    }


# ---------------------------------------------------------------------
# Run lifecycle
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class RunStarted(BaseEvent):
    units: List[str]
    assume_yes: bool
    dry_run: bool
    continue_on_error: bool

@dataclass(frozen=True)
class PrecheckFailed(BaseEvent):
    error: str

@dataclass(frozen=True)
class RunFinished(BaseEvent):
    status: str
    applied: int
    skipped: int
    failed: int
    declined: int


# ---------------------------------------------------------------------
# Unit lifecycle
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class UnitStarted(BaseEvent):
    name: str
    description: str

@dataclass(frozen=True)
class GuardFailed(BaseEvent):
    name: str
    error: str

@dataclass(frozen=True)
class UnitSkipped(BaseEvent):
    name: str
    reason: str       # "satisfied" | "declined" | "dry-run" | "filtered"

@dataclass(frozen=True)
class UnitApplied(BaseEvent):
    name: str
    duration_ms: int

@dataclass(frozen=True)
class UnitFailed(BaseEvent):
    name: str
    error: str
    output: Optional[str] = None
