# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Union

PathLike = Union[str, Path]


@dataclass(frozen=True)
class CommandResult:
    argv: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        parts = [p.rstrip() for p in (self.stdout, self.stderr) if p and p.strip()]
        return "\n".join(parts)


class CommandError(RuntimeError):
    def __init__(self, result: CommandResult):
        cmd = " ".join(shlex.quote(a) for a in result.argv)
        super().__init__(f"Command failed ({result.returncode}): {cmd}")
        self.result = result


class System(Protocol):
    """
    Everything a provisioning unit may touch on the machine.
    """

    def run(
        self,
        argv: Sequence[str],
        *,
        check: bool = True,
        as_user: Optional[str] = None,
        input_text: Optional[str] = None,
        cwd: Optional[PathLike] = None,
    ) -> CommandResult: ...

    def which(self, name: str) -> Optional[str]: ...

    def exists(self, path: PathLike) -> bool: ...

    def is_dir(self, path: PathLike) -> bool: ...

    def read_text(self, path: PathLike) -> str: ...

    def write_text(self, path: PathLike, content: str, mode: Optional[int] = None) -> None: ...

    def makedirs(self, path: PathLike) -> None: ...

    def chown(self, path: PathLike, user: str, recursive: bool = False) -> None: ...

    def mtime(self, path: PathLike) -> float: ...

    def is_root(self) -> bool: ...

    def user_home(self, user: str) -> Path: ...

    def login_shell(self, user: str) -> str: ...

    def fetch(self, url: str) -> str: ...
