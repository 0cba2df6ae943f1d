"""
InMemoryLedgerStore -- dict-backed world state.

Responsibility:
    A process-local LedgerStore for tests, demos and local runs.  Keeps the
    world state in a dict and emitted events in a list, and exposes
    failure-injection switches so callers can exercise every error path of
    the contract.

Architecture position:
    Kernel > Store -- adapter.  Implements ``LedgerStore``.

Failure modes (injected):
    - ``fail_on_put``: keys whose ``put_state`` raises LedgerStoreError.
    - ``fail_on_event``: ``set_event`` raises LedgerStoreError.
    - ``fail_on_range``: ``get_state_by_range`` raises before opening.
    - ``fail_iteration_at``: the cursor raises when asked for that index.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Iterator

from asset_ledger.exceptions import LedgerStoreError
from asset_ledger.logging_config import get_logger
from asset_ledger.store.base import (
    KV,
    EmittedEvent,
    LedgerStore,
    StateIterator,
    key_in_range,
)

logger = get_logger("store.memory")


class _SnapshotIterator(StateIterator):
    """Iterates a sorted snapshot of matching entries taken at open time."""

    def __init__(
        self,
        entries: list[KV],
        on_release: Callable[[], None],
        fail_at: int | None = None,
    ):
        super().__init__(on_release)
        self._entries = entries
        self._index = 0
        self._fail_at = fail_at

    def _next_kv(self) -> KV:
        if self._fail_at is not None and self._index == self._fail_at:
            raise LedgerStoreError(
                "iterate", f"injected cursor failure at index {self._index}"
            )
        if self._index >= len(self._entries):
            raise StopIteration
        kv = self._entries[self._index]
        self._index += 1
        return kv

    def _release(self) -> None:
        self._entries = []


class InMemoryLedgerStore(LedgerStore):
    """Dict-backed LedgerStore with failure injection."""

    def __init__(self, namespace: str = "fabcar"):
        super().__init__(namespace)
        self._state: dict[str, bytes] = {}
        self._events: list[EmittedEvent] = []
        self.fail_on_put: set[str] = set()
        self.fail_on_event = False
        self.fail_on_range = False
        self.fail_iteration_at: int | None = None

    def __len__(self) -> int:
        return len(self._state)

    def keys(self) -> list[str]:
        return sorted(self._state)

    def emitted_events(self) -> list[EmittedEvent]:
        return list(self._events)

    def get_state(self, key: str) -> bytes | None:
        self._check_key("get_state", key)
        return self._state.get(key)

    def put_state(self, key: str, value: bytes) -> None:
        self._check_key("put_state", key)
        if key in self.fail_on_put:
            raise LedgerStoreError("put_state", "injected write failure", key=key)
        self._state[key] = bytes(value)
        logger.debug("state_put", extra={"key": key, "size": len(value)})

    def set_event(self, name: str, payload: bytes) -> None:
        if self.fail_on_event:
            raise LedgerStoreError("set_event", "injected event failure")
        self._events.append(EmittedEvent(name=name, payload=bytes(payload)))

    @contextmanager
    def atomic(self) -> Iterator[None]:
        snapshot = dict(self._state)
        events_before = len(self._events)
        try:
            yield
        except Exception:
            self._state = snapshot
            del self._events[events_before:]
            logger.warning("atomic_scope_rolled_back", extra={"restored_keys": len(snapshot)})
            raise

    def _open_range(
        self, start: str, end: str, on_release: Callable[[], None]
    ) -> StateIterator:
        if self.fail_on_range:
            raise LedgerStoreError("get_state_by_range", "injected range failure")
        entries = [
            KV(key, self._state[key])
            for key in sorted(self._state)
            if key_in_range(key, start, end)
        ]
        return _SnapshotIterator(entries, on_release, self.fail_iteration_at)
