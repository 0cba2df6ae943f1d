"""LedgerStore contract and adapters over the external world state."""

from asset_ledger.store.base import KV, EmittedEvent, LedgerStore, StateIterator
from asset_ledger.store.memory import InMemoryLedgerStore
from asset_ledger.store.sql import SqlLedgerStore

__all__ = [
    "KV",
    "EmittedEvent",
    "InMemoryLedgerStore",
    "LedgerStore",
    "SqlLedgerStore",
    "StateIterator",
]
