# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

#src/archsetup/logging/log.py

from __future__ import annotations

import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path

DEFAULT_LOG_DIR = Path("/var/log/archsetup")


def _writable_dir(base_dir: Path) -> Path:
    try:
        base_dir.mkdir(parents=True, exist_ok=True)
        if os.access(base_dir, os.W_OK):
            return base_dir
    except OSError:
        pass
    fallback = Path.home() / ".archsetup" / "logs"
    fallback.mkdir(parents=True, exist_ok=True)
    return fallback


def init_logging(
    *,
    base_dir: Path | None = None,
    name: str = "archsetup",
    verbose: bool = False,
) -> tuple[logging.Logger, str, Path]:
    """
    Initializes:
      - full DEBUG trace in a per-run log file (every command and its output)
      - console output at WARNING, or DEBUG with --verbose
      - ARCHSETUP_LOG_DIR wins over base_dir
      - returns run_id so observers can reuse it
    """
    run_id = str(uuid.uuid4())

    base_dir = Path(os.environ.get("ARCHSETUP_LOG_DIR") or base_dir or DEFAULT_LOG_DIR)
    base_dir = _writable_dir(base_dir)

    ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    log_path = base_dir / f"{name}-{ts}-{run_id}.log"

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()
    logger.propagate = False

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-7s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # File = FULL TRACE
    fh = logging.FileHandler(log_path, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(formatter)

    # Console stays quiet unless --verbose; the console observer reports progress
    ch = logging.StreamHandler()
    ch.setLevel(logging.DEBUG if verbose else logging.WARNING)
    ch.setFormatter(formatter)

    logger.addHandler(fh)
    logger.addHandler(ch)

    logger.info("=== archsetup run started ===")
    logger.info(f"run_id={run_id}")
    logger.info(f"log_file={log_path}")

    return logger, run_id, log_path
