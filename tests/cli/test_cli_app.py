import logging
import os

import pytest
from typer.testing import CliRunner

from archsetup.cli import app as cli_app

runner = CliRunner()


@pytest.fixture
def host(monkeypatch, make_system, isolated_config):
    """Swap the live machine for a FakeSystem inside the CLI."""
    def install(**kw):
        system = make_system(**kw)
        monkeypatch.setattr(cli_app, "HostSystem", lambda: system)
        return system

    yield install

    # init_logging binds handlers to the runner's streams; drop them
    logger = logging.getLogger("archsetup")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True


def test_list_units(host):
    host()
    result = runner.invoke(cli_app.app, ["--list", "--user", "alice"])
    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0].startswith("system-update")
    assert any(line.startswith("aur-packages") and "after: aur-helper" in line for line in lines)


def test_not_root_exits_2(host):
    system = host(root=False, binaries=["pacman"])
    result = runner.invoke(cli_app.app, ["--yes", "--user", "alice"])
    assert result.exit_code == 2
    assert "run as root" in result.output
    assert system.calls == []


def test_missing_config_file_exits_2(host, isolated_config):
    host()
    result = runner.invoke(cli_app.app, ["--config", str(isolated_config / "nope.yaml"), "--list"])
    assert result.exit_code == 2
    assert "Config file not found" in result.output


def test_unknown_only_pattern_exits_2(host):
    host(binaries=["pacman"])
    result = runner.invoke(cli_app.app, ["--only", "fish", "--user", "alice", "--yes"])
    assert result.exit_code == 2
    assert "No unit matches 'fish'" in result.output


def test_dry_run_changes_nothing(host, tmp_path):
    system = host(binaries=["pacman"])
    json_log = tmp_path / "events.jsonl"
    result = runner.invoke(
        cli_app.app,
        ["--dry-run", "--yes", "--user", "alice", "--json-log", str(json_log)],
    )
    assert result.exit_code == 0, result.output
    assert "would apply (dry run)" in result.output
    assert "STATUS=complete" in result.output
    assert system.writes == []
    assert '"type": "RunFinished"' in json_log.read_text()


def test_only_selected_units_run(host):
    system = host(binaries=["pacman"])
    result = runner.invoke(cli_app.app, ["--only", "tmux", "--user", "alice"])
    assert result.exit_code == 0, result.output
    assert "/home/alice/.tmux.conf" in system.files
    assert "APPLIED=1" in result.output


def test_closed_stdin_declines_and_run_finishes(host):
    system = host(binaries=["pacman"])
    result = runner.invoke(cli_app.app, ["--only", "performance,tmux", "--user", "alice"], input="")
    assert result.exit_code == 0, result.output
    assert "Summary" in result.output
    assert "Apply system performance optimizations? (y/n)" in result.output
    assert "DECLINED=1" in result.output
    assert "/home/alice/.tmux.conf" in system.files
    assert not system.ran("systemctl", "enable", "fstrim.timer")


def test_skip_all_rejected(host):
    system = host(binaries=["pacman"])
    result = runner.invoke(cli_app.app, ["--skip", "all", "--user", "alice", "--yes"])
    assert result.exit_code == 2
    assert "--skip all" in result.output
    assert system.calls == []


def test_no_command_runs_before_root_check(host, monkeypatch):
    monkeypatch.delenv("SUDO_USER", raising=False)
    monkeypatch.setattr(os, "getlogin", lambda: "alice")
    system = host(root=False, binaries=["pacman"])
    result = runner.invoke(cli_app.app, ["--yes"])
    assert result.exit_code == 2
    assert system.calls == []
