# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/archsetup/system/files.py
"""
Idempotent edits to plain-text configuration files.

Every helper returns True when it changed the file and False when the file
already had the wanted content, so callers can log what actually happened.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from .interface import PathLike, System

log = logging.getLogger("archsetup")


def read_or_empty(system: System, path: PathLike) -> str:
    if not system.exists(path):
        return ""
    return system.read_text(path)


def has_line(system: System, path: PathLike, line: str) -> bool:
    return line in read_or_empty(system, path).splitlines()


def contains(system: System, path: PathLike, needle: str) -> bool:
    return needle in read_or_empty(system, path)


def ensure_line(system: System, path: PathLike, line: str) -> bool:
    """Append `line` to `path` unless an identical line is already there."""
    text = read_or_empty(system, path)
    if line in text.splitlines():
        return False
    if text and not text.endswith("\n"):
        text += "\n"
    system.write_text(path, text + line + "\n")
    log.debug("appended %r to %s", line, path)
    return True


def ensure_block(system: System, path: PathLike, block: str) -> bool:
    """Append a multi-line block unless its exact text is already present."""
    text = read_or_empty(system, path)
    body = block.strip("\n")
    if body in text:
        return False
    if text and not text.endswith("\n"):
        text += "\n"
    system.write_text(path, text + "\n" + body + "\n")
    return True


def replace_line(system: System, path: PathLike, pattern: str, replacement: str) -> bool:
    """
    Substitute `replacement` for every match of `pattern` (MULTILINE, so ^ and $
    anchor at line boundaries).
    Does nothing when the file is missing or no line changes.
    """
    if not system.exists(path):
        return False
    text = system.read_text(path)
    new_text = re.sub(pattern, lambda _m: replacement, text, flags=re.MULTILINE)
    if new_text == text:
        return False
    system.write_text(path, new_text)
    log.debug("rewrote lines matching %r in %s", pattern, path)
    return True


def file_matches(system: System, path: PathLike, content: str) -> bool:
    return system.exists(path) and system.read_text(path) == content


def ensure_file(
    system: System,
    path: PathLike,
    content: str,
    *,
    mode: Optional[int] = None,
    owner: Optional[str] = None,
) -> bool:
    """Write `content` to `path` only when it differs from what is on disk."""
    if file_matches(system, path, content):
        return False
    system.write_text(path, content, mode=mode)
    if owner:
        system.chown(path, owner)
    return True
