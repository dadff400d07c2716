# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/archsetup/config/loader.py

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from ..core.errors import ConfigError
from .models import ProvisionConfig

log = logging.getLogger("archsetup")

DEFAULTS_PATH = Path(__file__).resolve().parent / "defaults.yaml"
SYSTEM_CONFIG_PATH = Path("/etc/archsetup/config.yaml")


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Recursively merge *override* into *base* (mutates base).
    Dicts merge, everything else (lists included) replaces.
    Empty override values (None, "") leave the base untouched.
    """
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        elif value not in (None, ""):
            base[key] = value
    return base


def _find_override_file(path: str | Path | None) -> Path | None:
    """
    Locate the user's override file using this priority:

    1. explicit path (--config); must exist
    2. ARCHSETUP_CONFIG environment variable
    3. /etc/archsetup/config.yaml
    """
    if path is not None:
        p = Path(path)
        if not p.is_file():
            raise ConfigError(f"Config file not found: {p}")
        return p

    env = os.environ.get("ARCHSETUP_CONFIG")
    if env:
        p = Path(env)
        if p.is_file():
            return p
        log.warning("ARCHSETUP_CONFIG=%s does not exist, ignoring it", env)
        return None

    if SYSTEM_CONFIG_PATH.is_file():
        return SYSTEM_CONFIG_PATH
    return None


def _load_yaml(path: Path) -> dict:
    """Load a YAML file, expanding ${ENV_VAR} references."""
    raw = path.read_text(encoding="utf-8")
    expanded = os.path.expandvars(raw)
    try:
        data = yaml.safe_load(expanded) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data


def load_config(path: str | Path | None = None) -> ProvisionConfig:
    """
    Load the shipped defaults, merge the user's override file on top and
    validate the result.
    """
    data = _load_yaml(DEFAULTS_PATH)

    override_path = _find_override_file(path)
    if override_path:
        log.debug("Merging config overrides from %s", override_path)
        _deep_merge(data, _load_yaml(override_path))
    else:
        log.debug("No override config found, using defaults")

    try:
        return ProvisionConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(str(e)) from e
