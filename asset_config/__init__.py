"""
asset_config -- single public entrypoint for asset ledger configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Other components receive a ``LedgerConfig``
    rather than reading files or environment variables themselves.

Architecture position:
    Configuration -- sits beside ``asset_ledger``.  Kernel services, stores
    and the contract MUST NEVER import from ``asset_config``; only the CLI
    entry point (``asset_ledger.cli``) reads it and passes values in.

Resolution order:
    1. Explicit ``path`` argument.
    2. ``ASSET_LEDGER_CONFIG`` environment variable.
    3. Packaged ``sets/default.yaml``.
    Then ``ASSET_LEDGER_DATABASE_URL`` / ``ASSET_LEDGER_LOG_LEVEL``
    override individual values.

Failure modes:
    - ``FileNotFoundError`` -- the selected file does not exist.
    - ``ValueError`` -- unknown keys or invalid values.
    - ``yaml.YAMLError`` -- malformed YAML.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping

from asset_config.loader import apply_env_overrides, load_yaml_file, parse_config
from asset_config.schema import DEFAULT_DATABASE_URL, LedgerConfig

_logger = logging.getLogger("asset_ledger.config")

ENV_CONFIG_PATH = "ASSET_LEDGER_CONFIG"

_DEFAULT_CONFIG_FILE = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(
    path: Path | str | None = None,
    env: Mapping[str, str] | None = None,
) -> LedgerConfig:
    """
    Load the active configuration.

    Args:
        path: YAML file to load.  Defaults to ``$ASSET_LEDGER_CONFIG`` or the
            packaged defaults.
        env: Environment mapping.  Defaults to ``os.environ``.
    """
    env = os.environ if env is None else env
    if path is None:
        path = env.get(ENV_CONFIG_PATH) or _DEFAULT_CONFIG_FILE
    path = Path(path)

    config = apply_env_overrides(parse_config(load_yaml_file(path)), env)

    _logger.info(
        "ASSET_LEDGER_CONFIG_TRACE",
        extra={
            "config_path": str(path),
            "namespace": config.namespace,
            "channel_id": config.channel_id,
            "atomic_init": config.atomic_init,
        },
    )
    return config


__all__ = [
    "DEFAULT_DATABASE_URL",
    "LedgerConfig",
    "get_active_config",
]
