# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/archsetup/cli/app.py
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from archsetup.config.loader import load_config
from archsetup.core.errors import ConfigError, UnitDefinitionError
from archsetup.core.orchestrator import RunOptions, require_command, require_root, run as run_units
from archsetup.core.planner import parse_unit_flag, plan
from archsetup.core.prompt import AutoPrompter, ConsolePrompter
from archsetup.core.results import Outcome, RunSummary
from archsetup.logging.log import init_logging
from archsetup.observers.console import ConsoleObserver
from archsetup.observers.jsonfile import JsonFileObserver
from archsetup.observers.logger import LoggerObserver
from archsetup.system.host import HostSystem
from archsetup.units.common import resolve_user
from archsetup.units.registry import build_units


# ------------------------------------------------------------------------------
# CLI setup
# ------------------------------------------------------------------------------

app = typer.Typer(help="Idempotent Arch Linux workstation provisioning", add_completion=False)

_OUTCOME_COLORS = {
    Outcome.APPLIED: typer.colors.GREEN,
    Outcome.SKIPPED: typer.colors.BLUE,
    Outcome.FAILED: typer.colors.RED,
}


def _fail(message: str, code: int = 2) -> None:
    typer.secho(f"[ERROR] {message}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code)


def print_unit_list(units) -> None:
    for unit in plan(units):
        flags = "interactive" if unit.interactive else "automatic"
        requires = f"  (after: {', '.join(unit.requires)})" if unit.requires else ""
        typer.echo(f"{unit.name:<32} {flags:<12} {unit.description}{requires}")


def print_summary(summary: RunSummary, log_path: Path) -> None:
    typer.echo("")
    typer.secho("Summary", bold=True)
    for r in summary.results:
        detail = f" ({r.reason.value})" if r.reason else ""
        if r.error:
            detail = f" {r.error}"
        typer.echo(
            f"  {r.unit:<32} "
            + typer.style(f"{r.outcome.value:<8}", fg=_OUTCOME_COLORS[r.outcome])
            + detail
        )
    typer.echo(summary.summary())
    if summary.failed:
        typer.secho(
            "Fix the failures above and re-run; units already in place will be skipped.",
            fg=typer.colors.YELLOW,
        )
    typer.echo(f"Full log: {log_path}")


@app.command()
def provision(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML file overriding the shipped defaults"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Apply every unit without asking"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Check guards and report what would be applied"),
    continue_on_error: bool = typer.Option(
        True, "--continue-on-error/--stop-on-error", help="Keep going after a unit fails"
    ),
    only: Optional[str] = typer.Option(None, "--only", help="Comma separated unit names or patterns (e.g. zsh,flatpak:*)"),
    skip: Optional[str] = typer.Option(None, "--skip", help="Comma separated unit names or patterns to leave out"),
    list_units: bool = typer.Option(False, "--list", help="List units in execution order and exit"),
    user: Optional[str] = typer.Option(None, "--user", "-u", help="Desktop user to provision (default: the sudo caller)"),
    json_log: Optional[Path] = typer.Option(None, "--json-log", help="Also write events as JSON lines to this file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging on the console"),
):
    """
    Provision this machine. Safe to re-run: finished units are skipped.
    """
    try:
        cfg = load_config(config)
    except ConfigError as e:
        _fail(f"Invalid configuration: {e}")
    if skip is not None and skip.strip().lower() == "all":
        _fail("--skip all would leave nothing to run; use --list to see unit names")

    system = HostSystem()
    target_user = resolve_user(user or cfg.user)

    try:
        units = build_units(cfg, user=target_user)
        if list_units:
            print_unit_list(units)
            raise typer.Exit(0)
    except UnitDefinitionError as e:
        _fail(f"Invalid unit definitions: {e}")

    logger, run_id, log_path = init_logging(
        base_dir=Path(cfg.log_dir) if cfg.log_dir else None,
        verbose=verbose,
    )
    logger.info(f"provisioning user={target_user} units={len(units)}")

    observers = [ConsoleObserver(), LoggerObserver(logger)]
    if json_log:
        observers.append(JsonFileObserver(json_log))

    options = RunOptions(
        assume_yes=yes,
        dry_run=dry_run,
        continue_on_error=continue_on_error,
        only=parse_unit_flag(only),
        skip=parse_unit_flag(skip) or set(),
    )
    prompter = AutoPrompter(answer=True) if yes else ConsolePrompter()

    try:
        summary = run_units(
            units,
            system,
            options=options,
            prompter=prompter,
            observers=observers,
            prechecks=[require_root, require_command("pacman")],
            run_id=run_id,
        )
    except UnitDefinitionError as e:
        _fail(str(e))

    if summary.precheck_error is None:
        print_summary(summary, log_path)
    raise typer.Exit(summary.exit_code)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
