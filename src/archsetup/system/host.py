# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/archsetup/system/host.py

from __future__ import annotations

import logging
import os
import pwd
import shutil
import stat
import tempfile
from pathlib import Path
from typing import Optional, Sequence

import requests

from ..utils.retry import retry
from .interface import CommandResult, PathLike
from .runner import CommandRunner

log = logging.getLogger("archsetup")

FETCH_TIMEOUT_S = 30
DEFAULT_FILE_MODE = 0o644


class HostSystem:
    """
    The live machine: subprocess for commands, the local filesystem for files.
    """

    def __init__(self, runner: Optional[CommandRunner] = None):
        self.runner = runner or CommandRunner(label="host")

    # ------------------ commands ------------------

    def run(
        self,
        argv: Sequence[str],
        *,
        check: bool = True,
        as_user: Optional[str] = None,
        input_text: Optional[str] = None,
        cwd: Optional[PathLike] = None,
    ) -> CommandResult:
        cmd = list(argv)
        if as_user:
            cmd = ["sudo", "-u", as_user, "-H", *cmd]
        return self.runner.run(
            cmd, check=check, input_text=input_text, cwd=str(cwd) if cwd else None
        )

    def which(self, name: str) -> Optional[str]:
        return shutil.which(name)

    # ------------------ files ------------------

    def exists(self, path: PathLike) -> bool:
        return Path(path).exists()

    def is_dir(self, path: PathLike) -> bool:
        return Path(path).is_dir()

    def read_text(self, path: PathLike) -> str:
        return Path(path).read_text(encoding="utf-8")

    def write_text(self, path: PathLike, content: str, mode: Optional[int] = None) -> None:
        p = Path(path)
        if p.is_symlink():
            p = p.resolve()
        p.parent.mkdir(parents=True, exist_ok=True)
        current = p.stat() if p.exists() else None
        if mode is None:
            mode = stat.S_IMODE(current.st_mode) if current else DEFAULT_FILE_MODE

        # the target is swapped in by rename, never truncated in place
        fd, tmp = tempfile.mkstemp(dir=p.parent, prefix=f".{p.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp, mode)
            if current:
                os.chown(tmp, current.st_uid, current.st_gid)
            os.replace(tmp, p)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
        log.debug("wrote %s (%d bytes)", p, len(content))

    def makedirs(self, path: PathLike) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def chown(self, path: PathLike, user: str, recursive: bool = False) -> None:
        targets = [Path(path)]
        if recursive and Path(path).is_dir():
            targets.extend(Path(path).rglob("*"))
        for target in targets:
            shutil.chown(target, user=user, group=user)

    def mtime(self, path: PathLike) -> float:
        return Path(path).stat().st_mtime

    # ------------------ identity ------------------

    def is_root(self) -> bool:
        return os.geteuid() == 0

    def user_home(self, user: str) -> Path:
        return Path(pwd.getpwnam(user).pw_dir)

    def login_shell(self, user: str) -> str:
        return pwd.getpwnam(user).pw_shell

    # ------------------ network ------------------

    @retry(attempts=3, delay=2.0, retry_on=(requests.RequestException,))
    def fetch(self, url: str) -> str:
        log.debug("GET %s", url)
        r = requests.get(url, timeout=FETCH_TIMEOUT_S)
        r.raise_for_status()
        return r.text
