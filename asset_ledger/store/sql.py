"""
SqlLedgerStore -- world state persisted through SQLAlchemy.

Responsibility:
    Implements the LedgerStore contract on the ``world_state`` and
    ``chaincode_events`` tables, within a caller-supplied Session.

Architecture position:
    Kernel > Store -- adapter.  Imports models/ and db/ only.

Invariants enforced:
    - Flush-only: the store flushes within the caller's transaction and
      never commits or rolls back the session itself.  The caller
      (``session_scope()``, the CLI, or a test harness) owns the boundary.
    - Range scans stream rows from a SQLAlchemy Result in code-point key
      order regardless of the column collation; the Result is closed when
      the iterator is released.
    - ``atomic()`` wraps its body in a SAVEPOINT, and so does each event
      insert, so a failed event never poisons the caller's transaction.
    - Events carry a per-namespace ``sequence``; ``emitted_events()`` is
      ordered by it.

Failure modes:
    - LedgerStoreError wrapping any SQLAlchemyError, with the original
      chained as ``__cause__``.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Iterator

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.engine import Result
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from asset_ledger.domain.clock import Clock, SystemClock
from asset_ledger.exceptions import LedgerStoreError
from asset_ledger.logging_config import get_logger
from asset_ledger.models.chaincode_event import ChaincodeEventRecord
from asset_ledger.models.world_state import WorldStateEntry
from asset_ledger.store.base import KV, EmittedEvent, LedgerStore, StateIterator

logger = get_logger("store.sql")


def ordered_key(dialect_name: str) -> ColumnElement[str]:
    """
    The key column as compared and sorted in range scans.

    Keys order by code point.  SQLite's default BINARY collation already
    does; PostgreSQL columns usually carry a locale collation that folds
    case, so comparisons there are forced to the "C" collation.
    """
    if dialect_name == "postgresql":
        return WorldStateEntry.key.collate("C")
    return WorldStateEntry.key


class _ResultIterator(StateIterator):
    """Streams (key, value) rows from an open Result."""

    def __init__(self, result: Result, on_release: Callable[[], None]):
        super().__init__(on_release)
        self._result = result

    def _next_kv(self) -> KV:
        try:
            row = self._result.fetchone()
        except SQLAlchemyError as exc:
            raise LedgerStoreError("iterate", str(exc)) from exc
        if row is None:
            raise StopIteration
        return KV(row.key, bytes(row.value))

    def _release(self) -> None:
        self._result.close()


class SqlLedgerStore(LedgerStore):
    """
    LedgerStore over a SQLAlchemy Session.

    Args:
        session: Open session; the caller controls commit/rollback.
        namespace: Contract namespace isolating this store's keys.
        clock: Clock for row timestamps. Defaults to SystemClock.
        tx_id: Transaction id recorded on written rows and events.
    """

    def __init__(
        self,
        session: Session,
        namespace: str = "fabcar",
        clock: Clock | None = None,
        tx_id: str | None = None,
    ):
        super().__init__(namespace)
        self.session = session
        self._clock = clock or SystemClock()
        self.tx_id = tx_id

    def _entry(self, key: str) -> WorldStateEntry | None:
        return self.session.execute(
            select(WorldStateEntry).where(
                WorldStateEntry.namespace == self.namespace,
                WorldStateEntry.key == key,
            )
        ).scalar_one_or_none()

    def get_state(self, key: str) -> bytes | None:
        self._check_key("get_state", key)
        try:
            entry = self._entry(key)
        except SQLAlchemyError as exc:
            raise LedgerStoreError("get_state", str(exc), key=key) from exc
        return None if entry is None else bytes(entry.value)

    def put_state(self, key: str, value: bytes) -> None:
        self._check_key("put_state", key)
        now = self._clock.now()
        try:
            entry = self._entry(key)
            if entry is None:
                self.session.add(
                    WorldStateEntry(
                        namespace=self.namespace,
                        key=key,
                        value=bytes(value),
                        version=1,
                        updated_at=now,
                        updated_tx_id=self.tx_id,
                    )
                )
            else:
                entry.value = bytes(value)
                entry.version += 1
                entry.updated_at = now
                entry.updated_tx_id = self.tx_id
            self.session.flush()
        except SQLAlchemyError as exc:
            raise LedgerStoreError("put_state", str(exc), key=key) from exc

        logger.debug("state_put", extra={"key": key, "size": len(value)})

    def set_event(self, name: str, payload: bytes) -> None:
        # A rejected insert rolls back to this savepoint only, so state
        # written earlier in the transaction still commits.
        try:
            with self.session.begin_nested():
                self.session.add(
                    ChaincodeEventRecord(
                        namespace=self.namespace,
                        tx_id=self.tx_id,
                        sequence=self._next_event_sequence(),
                        event_name=name,
                        payload=bytes(payload),
                        created_at=self._clock.now(),
                    )
                )
                self.session.flush()
        except SQLAlchemyError as exc:
            raise LedgerStoreError("set_event", str(exc)) from exc

    @contextmanager
    def atomic(self) -> Iterator[None]:
        try:
            savepoint = self.session.begin_nested()
        except SQLAlchemyError as exc:
            raise LedgerStoreError("atomic", str(exc)) from exc
        try:
            yield
        except Exception:
            savepoint.rollback()
            logger.warning("atomic_scope_rolled_back")
            raise
        savepoint.commit()

    def _next_event_sequence(self) -> int:
        last = self.session.execute(
            select(func.coalesce(func.max(ChaincodeEventRecord.sequence), 0)).where(
                ChaincodeEventRecord.namespace == self.namespace
            )
        ).scalar_one()
        return last + 1

    def _open_range(
        self, start: str, end: str, on_release: Callable[[], None]
    ) -> StateIterator:
        key = ordered_key(self.session.get_bind().dialect.name)
        stmt = select(WorldStateEntry.key, WorldStateEntry.value).where(
            WorldStateEntry.namespace == self.namespace
        )
        if start:
            stmt = stmt.where(key >= start)
        if end:
            stmt = stmt.where(key < end)
        stmt = stmt.order_by(key)

        try:
            result = self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise LedgerStoreError("get_state_by_range", str(exc)) from exc
        return _ResultIterator(result, on_release)

    def emitted_events(self) -> list[EmittedEvent]:
        rows = self.session.execute(
            select(ChaincodeEventRecord)
            .where(ChaincodeEventRecord.namespace == self.namespace)
            .order_by(ChaincodeEventRecord.sequence)
        ).scalars()
        return [EmittedEvent(name=r.event_name, payload=bytes(r.payload)) for r in rows]
