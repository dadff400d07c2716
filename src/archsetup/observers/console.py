# src/archsetup/observers/console.py
from __future__ import annotations

import typer

from .events import (
    BaseEvent,
    GuardFailed,
    PrecheckFailed,
    RunFinished,
    RunStarted,
    UnitApplied,
    UnitFailed,
    UnitSkipped,
    UnitStarted,
)

_SKIP_TEXT = {
    "satisfied": "already configured",
    "declined": "declined",
    "dry-run": "would apply (dry run)",
    "filtered": "not selected",
}


def _line(tag: str, color: str, message: str, err: bool = False) -> None:
    typer.echo(typer.style(f"[{tag}]", fg=color) + f" {message}", err=err)


class ConsoleObserver:
    """
    Human readable progress: one coloured line per unit outcome.
    """

    def __init__(self, show_filtered: bool = False):
        self.show_filtered = show_filtered

    def notify(self, event: BaseEvent) -> None:
        if isinstance(event, RunStarted):
            mode = " (dry run)" if event.dry_run else ""
            _line("INFO", typer.colors.BLUE, f"Provisioning {len(event.units)} units{mode}")
        elif isinstance(event, PrecheckFailed):
            _line("ERROR", typer.colors.RED, event.error, err=True)
        elif isinstance(event, UnitStarted):
            _line("INFO", typer.colors.BLUE, f"{event.name}: {event.description}")
        elif isinstance(event, GuardFailed):
            _line("WARNING", typer.colors.YELLOW, f"{event.name}: could not check current state ({event.error}), applying")
        elif isinstance(event, UnitSkipped):
            if event.reason == "filtered" and not self.show_filtered:
                return
            color = typer.colors.YELLOW if event.reason == "dry-run" else typer.colors.BLUE
            _line("SKIP", color, f"{event.name}: {_SKIP_TEXT.get(event.reason, event.reason)}")
        elif isinstance(event, UnitApplied):
            _line("SUCCESS", typer.colors.GREEN, f"{event.name} ({event.duration_ms} ms)")
        elif isinstance(event, UnitFailed):
            _line("ERROR", typer.colors.RED, f"{event.name}: {event.error}", err=True)
            if event.output:
                for out in event.output.splitlines():
                    typer.echo(f"    {out}", err=True)
        elif isinstance(event, RunFinished):
            color = typer.colors.GREEN if event.failed == 0 else typer.colors.RED
            _line(
                "DONE",
                color,
                f"status={event.status} applied={event.applied} skipped={event.skipped} "
                f"failed={event.failed} declined={event.declined}",
            )
