"""
Module: asset_ledger.store.base
Responsibility: The LedgerStore contract -- the boundary between contract
    logic and the external world-state key-value store.  Point get/put by
    key, ordered range scans, and event emission.
Architecture position: Kernel > Store.  May import from exceptions.py only.
    Services depend on this ABC, never on a concrete adapter.

Invariants enforced:
    - Range scans yield entries in ascending key order.  ``start`` is
      inclusive, ``end`` exclusive; an empty string leaves that side
      unbounded, so ``("", "")`` scans the whole namespace.
    - A StateIterator is single-pass and released exactly once, whether
      iteration completes, raises, or is abandoned.  ``open_iterators``
      counts unreleased cursors so leaks are observable.
    - ``put_state`` upserts silently; it never checks prior existence.

Failure modes:
    - LedgerStoreError from any adapter operation whose underlying engine
      fails, and from iterating an already-closed StateIterator.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import Callable, Iterator

from asset_ledger.exceptions import LedgerStoreError


@dataclass(frozen=True)
class KV:
    """One world-state entry produced by a range scan."""

    key: str
    value: bytes


@dataclass(frozen=True)
class EmittedEvent:
    """An event handed to the store for off-chain listeners."""

    name: str
    payload: bytes


def key_in_range(key: str, start: str, end: str) -> bool:
    """Check ``key`` against a half-open range with empty-string open bounds."""
    if start and key < start:
        return False
    if end and key >= end:
        return False
    return True


class StateIterator(ABC):
    """
    Single-pass cursor over a range of world-state entries.

    Contract:
        Yields ``KV`` pairs in ascending key order.  Usable as a context
        manager; ``close()`` releases the underlying cursor and is
        idempotent, so the release happens exactly once.

    Guarantees:
        - Iterating after ``close()`` raises LedgerStoreError.
        - The store's release callback fires once per iterator.
    """

    def __init__(self, on_release: Callable[[], None] | None = None):
        self._closed = False
        self._on_release = on_release

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> Iterator[KV]:
        return self

    def __next__(self) -> KV:
        if self._closed:
            raise LedgerStoreError("iterate", "state iterator is closed")
        return self._next_kv()

    @abstractmethod
    def _next_kv(self) -> KV:
        """Return the next entry or raise StopIteration when exhausted."""
        ...

    @abstractmethod
    def _release(self) -> None:
        """Release the underlying cursor."""
        ...

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._release()
        finally:
            if self._on_release is not None:
                self._on_release()

    def __enter__(self) -> "StateIterator":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class LedgerStore(ABC):
    """
    Abstract world-state store owned by one contract namespace.

    Contract:
        Adapters implement point reads and writes, range cursors, event
        emission, and an all-or-nothing ``atomic()`` scope.  The store
        exclusively owns persisted bytes; callers hold decoded values only
        for the duration of one operation.

    Non-goals:
        - Does NOT order or commit transactions; the caller's transaction
          context does.
        - Does NOT retry failed operations.
    """

    def __init__(self, namespace: str):
        self.namespace = namespace
        self._open_iterators = 0

    @property
    def open_iterators(self) -> int:
        """Number of range-scan cursors acquired and not yet released."""
        return self._open_iterators

    @abstractmethod
    def get_state(self, key: str) -> bytes | None:
        """Return the value stored at ``key``, or None if absent."""
        ...

    @abstractmethod
    def put_state(self, key: str, value: bytes) -> None:
        """Upsert ``value`` at ``key``."""
        ...

    @abstractmethod
    def set_event(self, name: str, payload: bytes) -> None:
        """Emit a named event alongside the current transaction."""
        ...

    @abstractmethod
    def emitted_events(self) -> list[EmittedEvent]:
        """Events emitted through this store, oldest first."""
        ...

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Scope in which writes all persist or none do."""
        ...

    @abstractmethod
    def _open_range(
        self, start: str, end: str, on_release: Callable[[], None]
    ) -> StateIterator:
        ...

    def get_state_by_range(self, start: str, end: str) -> StateIterator:
        """
        Open a cursor over keys in ``[start, end)``.

        The caller must release the returned iterator, preferably with
        ``with store.get_state_by_range("", "") as it:``.
        """
        iterator = self._open_range(start, end, self._release_iterator)
        self._open_iterators += 1
        return iterator

    def _release_iterator(self) -> None:
        self._open_iterators -= 1

    @staticmethod
    def _check_key(operation: str, key: str) -> None:
        if not isinstance(key, str) or key == "":
            raise LedgerStoreError(operation, "key must not be an empty string", key=key)
