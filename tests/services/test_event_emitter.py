"""Tests for EventEmitter."""

import pytest

from asset_ledger.exceptions import EmitError, LedgerStoreError
from asset_ledger.services.event_emitter import EventEmitter
from asset_ledger.store.base import EmittedEvent


class TestEventEmitter:
    """Emission through the store's event channel."""

    def test_emit_passes_payload_unchanged(self, store):
        EventEmitter(store).emit("CarCreated", b"CAR7", operation="CreateCar", key="CAR7")

        assert store.emitted_events() == [EmittedEvent("CarCreated", b"CAR7")]

    def test_failure_raises_emit_error(self, memory_store):
        memory_store.fail_on_event = True

        with pytest.raises(EmitError) as exc_info:
            EventEmitter(memory_store).emit(
                "CarCreated", b"CAR7", operation="CreateCar", key="CAR7"
            )

        err = exc_info.value
        assert err.code == "EMIT_ERROR"
        assert err.operation == "CreateCar"
        assert err.event_name == "CarCreated"
        assert err.key == "CAR7"
        assert isinstance(err.__cause__, LedgerStoreError)

    def test_failure_is_logged(self, memory_store, captured_logs):
        memory_store.fail_on_event = True

        with pytest.raises(EmitError):
            EventEmitter(memory_store).emit("CarCreated", b"X", operation="CreateCar", key="X")

        failed = [r for r in captured_logs() if r["message"] == "event_emit_failed"]
        assert failed[0]["event_name"] == "CarCreated"

    def test_success_is_logged(self, memory_store, captured_logs):
        EventEmitter(memory_store).emit("CarCreated", b"CAR7", operation="CreateCar")

        emitted = [r for r in captured_logs() if r["message"] == "event_emitted"]
        assert emitted[0]["payload_size"] == 4
