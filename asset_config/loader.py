"""
Configuration Loader (``asset_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into a ``LedgerConfig``,
then applies environment overrides.  Runtime callers go through
``asset_config.get_active_config()`` rather than this module.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown keys or wrongly-typed values  -> ``ValueError``.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from asset_config.schema import LedgerConfig

ENV_DATABASE_URL = "ASSET_LEDGER_DATABASE_URL"
ENV_LOG_LEVEL = "ASSET_LEDGER_LOG_LEVEL"

_BOOL_FIELDS = ("echo", "atomic_init")
_INT_FIELDS = ("pool_size", "max_overflow")
_STR_FIELDS = ("database_url", "namespace", "channel_id", "log_level")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping, got {type(data).__name__}")
    return data


def parse_config(data: Mapping[str, Any]) -> LedgerConfig:
    """
    Parse a ``LedgerConfig`` from a dict, filling defaults for absent keys.

    Raises:
        ValueError: on unknown keys, wrongly-typed values, or an unknown
            log level.
    """
    unknown = set(data) - LedgerConfig.field_names()
    if unknown:
        raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")

    for name in _BOOL_FIELDS:
        if name in data and not isinstance(data[name], bool):
            raise ValueError(f"{name} must be a boolean, got {data[name]!r}")
    for name in _INT_FIELDS:
        value = data.get(name)
        if name in data and (isinstance(value, bool) or not isinstance(value, int)):
            raise ValueError(f"{name} must be an integer, got {value!r}")
    for name in _STR_FIELDS:
        if name in data and not isinstance(data[name], str):
            raise ValueError(f"{name} must be a string, got {data[name]!r}")

    config = LedgerConfig(**data)
    config = replace(config, log_level=config.log_level.upper())
    _check_log_level(config.log_level)
    return config


def apply_env_overrides(config: LedgerConfig, env: Mapping[str, str]) -> LedgerConfig:
    """Return ``config`` with environment overrides applied."""
    overrides: dict[str, Any] = {}
    if env.get(ENV_DATABASE_URL):
        overrides["database_url"] = env[ENV_DATABASE_URL]
    if env.get(ENV_LOG_LEVEL):
        overrides["log_level"] = env[ENV_LOG_LEVEL].upper()
        _check_log_level(overrides["log_level"])
    return replace(config, **overrides) if overrides else config


def _check_log_level(level: str) -> None:
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"Unknown log level: {level!r}")
