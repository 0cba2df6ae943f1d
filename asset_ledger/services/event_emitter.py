"""
EventEmitter -- fire-and-forget notifications after a committed write.

Responsibility:
    Hands a named event and its payload to the store's event channel and
    reports failure as ``EmitError``.  Decoupled from persistence: a
    failed emission never undoes the write it follows.

Architecture position:
    Kernel > Services.  Called by AssetService after a successful
    ``put_state``.

Failure modes:
    - EmitError wrapping the store's LedgerStoreError, carrying the
      operation name, event name and the key of the already-written record.
"""

from asset_ledger.exceptions import EmitError, LedgerStoreError
from asset_ledger.logging_config import get_logger
from asset_ledger.services.base import BaseService

logger = get_logger("services.event_emitter")


class EventEmitter(BaseService):
    """Emits events through the store; no retries, no buffering."""

    def emit(
        self,
        event_name: str,
        payload: bytes,
        *,
        operation: str,
        key: str | None = None,
    ) -> None:
        """
        Emit ``event_name`` with ``payload``.

        Args:
            event_name: Event name seen by off-chain listeners.
            payload: Raw event payload, sent without an envelope.
            operation: Contract operation emitting the event, for errors.
            key: World-state key the event refers to, for errors.

        Raises:
            EmitError: if the store rejects the event.
        """
        try:
            self.store.set_event(event_name, payload)
        except LedgerStoreError as exc:
            logger.error(
                "event_emit_failed",
                extra={"event_name": event_name, "key": key},
            )
            raise EmitError(operation, event_name, exc.reason, key=key) from exc

        logger.info(
            "event_emitted",
            extra={"event_name": event_name, "payload_size": len(payload)},
        )
