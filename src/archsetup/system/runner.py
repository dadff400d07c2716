# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/archsetup/system/runner.py

from __future__ import annotations

import logging
import shlex
import subprocess
import time
from dataclasses import dataclass
from typing import Optional, Sequence

from .interface import CommandError, CommandResult

log = logging.getLogger("archsetup")


@dataclass
class CommandRunner:
    label: Optional[str] = None

    def run(
        self,
        cmd: Sequence[str],
        *,
        check: bool = True,
        input_text: Optional[str] = None,
        cwd: Optional[str] = None,
    ) -> CommandResult:
        label = self.label or "cmd"
        argv = [str(c) for c in cmd]
        log.debug("[%s] $ %s", label, " ".join(shlex.quote(a) for a in argv))

        start = time.time()
        try:
            proc = subprocess.run(
                argv,
                input=input_text,
                capture_output=True,
                text=True,
                cwd=cwd,
            )
        except FileNotFoundError:
            # missing binary behaves like the shell's "command not found"
            result = CommandResult(argv=argv, returncode=127, stdout="", stderr=f"{argv[0]}: command not found")
            log.debug("[%s][exit 127] %s not found", label, argv[0])
            if check:
                raise CommandError(result)
            return result

        duration = time.time() - start

        if proc.stdout:
            log.debug("[%s][stdout]\n%s", label, proc.stdout.rstrip())
        if proc.stderr:
            log.debug("[%s][stderr]\n%s", label, proc.stderr.rstrip())
        log.debug("[%s][exit %s] (%.2fs)", label, proc.returncode, duration)

        result = CommandResult(
            argv=argv,
            returncode=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
        )
        if check and proc.returncode != 0:
            raise CommandError(result)
        return result
