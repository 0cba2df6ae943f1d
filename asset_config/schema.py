"""
LedgerConfig schema.

The typed, frozen form of the asset ledger's runtime configuration.  YAML
files are parsed into this type by the loader.
"""

from __future__ import annotations

from dataclasses import dataclass, fields

DEFAULT_DATABASE_URL = "sqlite+pysqlite:///asset_ledger.db"


@dataclass(frozen=True)
class LedgerConfig:
    """Runtime configuration for the contract and its world-state store."""

    database_url: str = DEFAULT_DATABASE_URL
    echo: bool = False
    pool_size: int = 5
    max_overflow: int = 10
    namespace: str = "fabcar"
    channel_id: str = "mychannel"
    log_level: str = "INFO"
    atomic_init: bool = False

    @classmethod
    def field_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls))
