"""
BaseService -- abstract base for contract services.

Responsibility:
    Provides the common constructor contract for every service: a
    ``LedgerStore`` handle supplied by the caller for one invocation.

Architecture position:
    Kernel > Services -- imperative shell.  Services depend on the
    ``LedgerStore`` ABC, never on a concrete adapter.

Invariants enforced:
    - Statelessness per invocation: a service keeps no state between calls
      beyond the store handle it was given.  All operation state lives on
      the call stack, so concurrent invocations share nothing mutable.
    - Transaction boundaries belong to the caller; services never commit.
"""

from abc import ABC

from asset_ledger.store.base import LedgerStore


class BaseService(ABC):
    """Abstract base class for all contract services."""

    def __init__(self, store: LedgerStore):
        """
        Initialize the service.

        Args:
            store: World-state store scoped to the current transaction.
        """
        self.store = store
