"""
Tests for SqlLedgerStore.

Covers:
- Row versioning and transaction stamping
- Namespace isolation
- Flush-only behaviour (no commit)
- SQLAlchemy failures wrapped as LedgerStoreError
- Result cursor closed on release, including after a mid-scan failure
- Rejected event inserts leave earlier writes committable
- Event sequence numbers and code-point key collation
"""

import pytest
from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, OperationalError

from asset_ledger.exceptions import LedgerStoreError
from asset_ledger.models.chaincode_event import ChaincodeEventRecord
from asset_ledger.models.world_state import WorldStateEntry
from asset_ledger.store.sql import SqlLedgerStore, ordered_key


def _row(session, key, namespace="fabcar") -> WorldStateEntry:
    return session.execute(
        select(WorldStateEntry).where(
            WorldStateEntry.namespace == namespace, WorldStateEntry.key == key
        )
    ).scalar_one()


def _db_error() -> OperationalError:
    return OperationalError("SELECT 1", {}, Exception("database is locked"))


class _FailingResult:
    """Stand-in Result whose fetch fails; records close calls."""

    def __init__(self):
        self.close_calls = 0

    def fetchone(self):
        raise _db_error()

    def close(self):
        self.close_calls += 1


class TestWorldStateRows:
    """Rows written by put_state."""

    def test_insert_sets_version_and_tx(self, session, sql_store):
        sql_store.put_state("CAR0", b"v1")

        row = _row(session, "CAR0")
        assert row.version == 1
        assert row.updated_tx_id == sql_store.tx_id
        assert row.value == b"v1"

    def test_overwrite_bumps_version(self, session, sql_store, clock):
        sql_store.put_state("CAR0", b"v1")
        clock.advance(5)
        sql_store.put_state("CAR0", b"v2")

        row = _row(session, "CAR0")
        assert row.version == 2
        assert row.value == b"v2"
        assert session.query(WorldStateEntry).count() == 1

    def test_event_row_stamped(self, session, sql_store):
        sql_store.set_event("CarCreated", b"CAR1")

        row = session.execute(select(ChaincodeEventRecord)).scalar_one()
        assert row.event_name == "CarCreated"
        assert row.payload == b"CAR1"
        assert row.tx_id == sql_store.tx_id

    def test_store_never_commits(self, session, sql_store, monkeypatch):
        def _no_commit():
            raise AssertionError("store must not commit")

        monkeypatch.setattr(session, "commit", _no_commit)
        sql_store.put_state("CAR0", b"v")
        sql_store.set_event("CarCreated", b"CAR0")
        with sql_store.get_state_by_range("", "") as it:
            list(it)


class TestNamespaceIsolation:
    """Stores in different namespaces share tables but not keys."""

    def test_scan_sees_own_namespace_only(self, session, sql_store):
        other = SqlLedgerStore(session, namespace="marbles")
        sql_store.put_state("CAR0", b"car")
        other.put_state("CAR0", b"marble")
        other.put_state("M1", b"marble")

        with sql_store.get_state_by_range("", "") as it:
            assert [(kv.key, kv.value) for kv in it] == [("CAR0", b"car")]
        assert other.get_state("CAR0") == b"marble"

    def test_events_scoped_to_namespace(self, session, sql_store):
        other = SqlLedgerStore(session, namespace="marbles")
        other.set_event("MarbleCreated", b"M1")

        assert sql_store.emitted_events() == []


class TestFailureWrapping:
    """SQLAlchemy errors become LedgerStoreError with the cause chained."""

    def test_put_failure_wrapped(self, session, sql_store, monkeypatch):
        def _boom(*args, **kwargs):
            raise _db_error()

        monkeypatch.setattr(session, "execute", _boom)

        with pytest.raises(LedgerStoreError) as exc_info:
            sql_store.put_state("CAR0", b"v")

        assert exc_info.value.operation == "put_state"
        assert exc_info.value.key == "CAR0"
        assert isinstance(exc_info.value.__cause__, OperationalError)

    def test_get_failure_wrapped(self, session, sql_store, monkeypatch):
        def _boom(*args, **kwargs):
            raise _db_error()

        monkeypatch.setattr(session, "execute", _boom)

        with pytest.raises(LedgerStoreError) as exc_info:
            sql_store.get_state("CAR0")

        assert exc_info.value.operation == "get_state"

    def test_range_open_failure_acquires_nothing(self, session, sql_store, monkeypatch):
        def _boom(*args, **kwargs):
            raise _db_error()

        monkeypatch.setattr(session, "execute", _boom)

        with pytest.raises(LedgerStoreError) as exc_info:
            sql_store.get_state_by_range("", "")

        assert exc_info.value.operation == "get_state_by_range"
        assert sql_store.open_iterators == 0

    def test_mid_scan_failure_closes_result_once(self, sql_store):
        sql_store.put_state("CAR0", b"v")
        it = sql_store.get_state_by_range("", "")
        real_result = it._result
        failing = _FailingResult()
        it._result = failing

        with pytest.raises(LedgerStoreError) as exc_info:
            with it:
                next(it)

        real_result.close()
        assert exc_info.value.operation == "iterate"
        assert failing.close_calls == 1
        assert sql_store.open_iterators == 0


class TestSavepoint:
    """atomic() nests inside the caller's transaction."""

    def test_outer_writes_survive_inner_rollback(self, sql_store):
        sql_store.put_state("CAR0", b"outer")

        with pytest.raises(RuntimeError):
            with sql_store.atomic():
                sql_store.put_state("CAR1", b"inner")
                raise RuntimeError("abort")

        assert sql_store.get_state("CAR0") == b"outer"
        assert sql_store.get_state("CAR1") is None


class TestEventInsertRejected:
    """A refused event insert rolls back only its own savepoint."""

    def test_put_survives_and_session_stays_usable(
        self, session, sql_store, reject_event_inserts
    ):
        sql_store.put_state("CAR0", b"v")

        with pytest.raises(LedgerStoreError) as exc_info:
            sql_store.set_event("CarCreated", b"CAR0")

        assert exc_info.value.operation == "set_event"
        assert isinstance(exc_info.value.__cause__, IntegrityError)

        session.commit()
        assert sql_store.get_state("CAR0") == b"v"
        assert session.execute(select(ChaincodeEventRecord)).all() == []


class TestEventSequence:
    """Events keep emission order even with identical timestamps."""

    def test_sequence_numbers_per_namespace(self, session, sql_store):
        other = SqlLedgerStore(session, namespace="marbles")
        sql_store.set_event("First", b"")
        other.set_event("MarbleCreated", b"M1")
        sql_store.set_event("Second", b"")

        rows = session.execute(
            select(ChaincodeEventRecord.namespace, ChaincodeEventRecord.sequence)
            .order_by(ChaincodeEventRecord.namespace, ChaincodeEventRecord.sequence)
        ).all()
        assert [tuple(r) for r in rows] == [("fabcar", 1), ("fabcar", 2), ("marbles", 1)]

    def test_same_timestamp_keeps_emission_order(self, sql_store):
        for name in ("Zeta", "Alpha", "Mid"):
            sql_store.set_event(name, b"")

        assert [e.name for e in sql_store.emitted_events()] == ["Zeta", "Alpha", "Mid"]


class TestKeyCollation:
    """Range scans compare keys by code point on every backend."""

    def test_postgres_forces_c_collation(self):
        compiled = str(ordered_key("postgresql").compile(dialect=postgresql.dialect()))
        assert 'COLLATE "C"' in compiled

    def test_sqlite_uses_column_as_is(self):
        compiled = str(ordered_key("sqlite").compile(dialect=sqlite.dialect()))
        assert "COLLATE" not in compiled
