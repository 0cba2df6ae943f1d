"""
Pytest fixtures for the asset ledger test suite.

Provides:
- Structured logging configuration and log capture
- An in-memory LedgerStore
- A SQLite-backed Session (per-test rollback) and SqlLedgerStore
- A ``store`` fixture parametrized over both adapters
"""

import json
import logging
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy import text
from sqlalchemy.orm import Session

from asset_ledger.db.engine import build_engine, create_tables, drop_tables
from asset_ledger.domain.clock import DeterministicClock
from asset_ledger.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from asset_ledger.services.asset_service import AssetService
from asset_ledger.store.memory import InMemoryLedgerStore
from asset_ledger.store.sql import SqlLedgerStore

TEST_TX_ID = "tx-test-0001"

REJECT_EVENTS_TRIGGER = (
    "CREATE TRIGGER reject_chaincode_events BEFORE INSERT ON chaincode_events "
    "BEGIN SELECT RAISE(ABORT, 'event hub unavailable'); END"
)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture asset_ledger logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, service):
            service.query_all_cars()
            logs = captured_logs()
            assert any(r["message"] == "query_all_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("asset_ledger")
    previous_level = root.level
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Clock
# =============================================================================


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock()


# =============================================================================
# Stores
# =============================================================================


@pytest.fixture
def memory_store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore()


@pytest.fixture(scope="session")
def db_engine():
    """Single in-memory SQLite engine with tables for the whole session."""
    eng = build_engine("sqlite+pysqlite:///:memory:")
    create_tables(eng)
    yield eng
    drop_tables(eng)
    eng.dispose()


@pytest.fixture
def session(db_engine) -> Generator[Session, None, None]:
    """Provide a database session for testing.

    The session joins an outer transaction that is rolled back at teardown,
    so every test starts from empty tables.  ``session.commit()`` inside a
    test releases a savepoint only.
    """
    conn = db_engine.connect()
    trans = conn.begin()
    sess = Session(bind=conn, join_transaction_mode="create_savepoint", expire_on_commit=False)
    yield sess
    try:
        sess.close()
    finally:
        try:
            trans.rollback()
        finally:
            conn.close()


@pytest.fixture
def sql_store(session, clock) -> SqlLedgerStore:
    return SqlLedgerStore(session, clock=clock, tx_id=TEST_TX_ID)


@pytest.fixture
def reject_event_inserts(session):
    """Make the database itself refuse chaincode_events inserts.

    The trigger lives in the per-test transaction and is rolled back with it.
    """
    session.execute(text(REJECT_EVENTS_TRIGGER))


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Each test using this fixture runs once per LedgerStore adapter."""
    if request.param == "memory":
        return request.getfixturevalue("memory_store")
    return request.getfixturevalue("sql_store")


@pytest.fixture
def service(store) -> AssetService:
    return AssetService(store)
