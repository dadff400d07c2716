from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Union

import pytest

from archsetup.system.interface import CommandError, CommandResult

Response = Union[int, CommandResult, Callable[[List[str]], CommandResult]]


class FakeSystem:
    """
    In-memory stand-in for the live machine.

    Files and directories live in dicts, commands return canned results
    registered with `on()`, and every command is recorded in `calls`.
    Unregistered commands succeed with empty output.
    """

    def __init__(self, root: bool = True, binaries: Sequence[str] = (), users: Optional[Dict[str, dict]] = None):
        self.root = root
        self.binaries = set(binaries)
        self.users = users or {"alice": {"home": "/home/alice", "shell": "/bin/bash"}}
        self.files: Dict[str, str] = {}
        self.dirs = set()
        self.modes: Dict[str, int] = {}
        self.owners: Dict[str, str] = {}
        self.mtimes: Dict[str, float] = {}
        self.urls: Dict[str, str] = {}
        self.calls: List[List[str]] = []
        self.users_for: List[Optional[str]] = []
        self.writes: List[str] = []
        self._handlers: List[tuple] = []
        self._clock = 0.0

    # ------------------ test helpers ------------------

    def on(self, *prefix: str, result: Response = 0, effect: Optional[Callable[[List[str]], None]] = None):
        self._handlers.append((list(prefix), result, effect))
        return self

    def add_file(self, path, content: str) -> None:
        self.write_text(path, content)

    def ran(self, *prefix: str) -> bool:
        return any(c[: len(prefix)] == list(prefix) for c in self.calls)

    def calls_matching(self, *prefix: str) -> List[List[str]]:
        return [c for c in self.calls if c[: len(prefix)] == list(prefix)]

    def _tick(self) -> float:
        self._clock += 1.0
        return self._clock

    # ------------------ System ------------------

    def run(self, argv, *, check=True, as_user=None, input_text=None, cwd=None) -> CommandResult:
        cmd = [str(a) for a in argv]
        self.calls.append(cmd)
        self.users_for.append(as_user)

        result = CommandResult(argv=cmd, returncode=0)
        for prefix, response, effect in reversed(self._handlers):
            if cmd[: len(prefix)] != prefix:
                continue
            if callable(response):
                result = response(cmd)
            elif isinstance(response, CommandResult):
                result = CommandResult(argv=cmd, returncode=response.returncode, stdout=response.stdout, stderr=response.stderr)
            else:
                result = CommandResult(argv=cmd, returncode=int(response))
            if effect:
                effect(cmd)
            break

        if check and result.returncode != 0:
            raise CommandError(result)
        return result

    def which(self, name: str) -> Optional[str]:
        return f"/usr/bin/{name}" if name in self.binaries else None

    def exists(self, path) -> bool:
        return str(path) in self.files or self.is_dir(path)

    def is_dir(self, path) -> bool:
        p = str(path)
        return p in self.dirs or any(f.startswith(p.rstrip("/") + "/") for f in self.files)

    def read_text(self, path) -> str:
        try:
            return self.files[str(path)]
        except KeyError:
            raise FileNotFoundError(str(path))

    def write_text(self, path, content: str, mode: Optional[int] = None) -> None:
        p = str(path)
        self.makedirs(Path(p).parent)
        self.files[p] = content
        self.mtimes[p] = self._tick()
        self.writes.append(p)
        if mode is not None:
            self.modes[p] = mode

    def makedirs(self, path) -> None:
        p = Path(str(path))
        for d in [p, *p.parents]:
            self.dirs.add(str(d))

    def chown(self, path, user: str, recursive: bool = False) -> None:
        self.owners[str(path)] = user

    def mtime(self, path) -> float:
        try:
            return self.mtimes[str(path)]
        except KeyError:
            raise FileNotFoundError(str(path))

    def is_root(self) -> bool:
        return self.root

    def user_home(self, user: str) -> Path:
        return Path(self.users[user]["home"])

    def login_shell(self, user: str) -> str:
        return self.users[user]["shell"]

    def fetch(self, url: str) -> str:
        if url not in self.urls:
            raise RuntimeError(f"unexpected download: {url}")
        return self.urls[url]


class Capture:
    def __init__(self): self.events = []
    def notify(self, ev): self.events.append(ev)


@pytest.fixture
def fake_system():
    return FakeSystem()


@pytest.fixture
def capture():
    return Capture()


@pytest.fixture
def make_system():
    """Factory for FakeSystem variants (non-root, extra binaries, users)."""
    return FakeSystem


@pytest.fixture
def isolated_config(monkeypatch, tmp_path):
    """Keep the host's /etc/archsetup and environment out of config loading."""
    from archsetup.config import loader

    monkeypatch.delenv("ARCHSETUP_CONFIG", raising=False)
    monkeypatch.setattr(loader, "SYSTEM_CONFIG_PATH", tmp_path / "no-such-config.yaml")
    monkeypatch.setenv("ARCHSETUP_LOG_DIR", str(tmp_path / "logs"))
    return tmp_path
