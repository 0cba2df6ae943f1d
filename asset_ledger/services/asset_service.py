"""
AssetService -- seed, create and query car assets in world state.

Responsibility:
    Orchestrates the three contract operations over a LedgerStore:
    InitLedger (write the fixed seed set), CreateCar (validate, encode,
    write, notify) and QueryAllCars (scan, decode, collect), plus the
    QueryCar point read.

Architecture position:
    Kernel > Services -- imperative shell.  Depends on the record codec
    (domain/codec.py), the LedgerStore ABC and EventEmitter.

Invariants enforced:
    - Upsert on create: an existing record at the same asset ID is
      overwritten without an existence check.
    - Empty asset IDs are rejected before anything is written.
    - InitLedger stops at the first failed write.  Writes before it
      survive unless ``atomic=True``, in which case the whole seed set is
      written inside ``store.atomic()`` and a failure leaves none of it.
    - QueryAllCars is fail-fast: the first undecodable entry aborts the
      query.  The range cursor is released on every exit path.
    - CarCreated is emitted only after the write succeeded; an emission
      failure does not undo the write.

Failure modes:
    - InvalidAssetIDError -- empty or non-string asset ID.
    - EncodeError -- a field is not a representable string.
    - PersistenceError -- put/get/range scan rejected by the store.
    - EmitError -- CarCreated could not be emitted (record IS persisted).
    - DecodeError -- a stored value is not a valid record.
    - AssetNotFoundError -- QueryCar found no record.
"""

from __future__ import annotations

from asset_ledger.domain.asset import SEED_CARS, AssetRecord, validate_asset_id
from asset_ledger.domain.codec import decode_asset, encode_asset
from asset_ledger.exceptions import (
    AssetNotFoundError,
    DecodeError,
    LedgerStoreError,
    PersistenceError,
)
from asset_ledger.logging_config import LogContext, get_logger
from asset_ledger.services.base import BaseService
from asset_ledger.services.event_emitter import EventEmitter
from asset_ledger.store.base import LedgerStore

logger = get_logger("services.asset")

CAR_CREATED_EVENT = "CarCreated"


class AssetService(BaseService):
    """
    Contract logic for car assets.

    Contract:
        Each method is one synchronous unit of work against the store it
        was constructed with.  Nothing is cached between calls.

    Non-goals:
        - Does NOT commit; the caller's transaction context does.
        - Does NOT retry; every failure propagates immediately.
        - Does NOT delete assets or update them partially.
    """

    def __init__(self, store: LedgerStore, emitter: EventEmitter | None = None):
        super().__init__(store)
        self._emitter = emitter or EventEmitter(store)

    # ------------------------------------------------------------------
    # InitLedger
    # ------------------------------------------------------------------

    def init_ledger(self, atomic: bool = False) -> None:
        """
        Write the six seed cars (CAR0..CAR5) to world state.

        Re-running against an unmodified store rewrites identical bytes,
        so the net effect is idempotent.

        Args:
            atomic: If True, write the seed set all-or-nothing.

        Raises:
            PersistenceError: naming the asset ID whose write failed.
        """
        if not atomic:
            self._write_seed()
            return

        try:
            with self.store.atomic():
                self._write_seed()
        except LedgerStoreError as exc:
            raise PersistenceError("InitLedger", exc.reason, key=exc.key) from exc

    def _write_seed(self) -> None:
        for car in SEED_CARS:
            data = encode_asset(car)
            try:
                self.store.put_state(car.asset_id, data)
            except LedgerStoreError as exc:
                logger.error(
                    "ledger_seed_failed", extra={"key": car.asset_id}
                )
                raise PersistenceError(
                    "InitLedger", exc.reason, key=car.asset_id
                ) from exc

        logger.info("ledger_seeded", extra={"record_count": len(SEED_CARS)})

    # ------------------------------------------------------------------
    # CreateCar
    # ------------------------------------------------------------------

    def create_car(
        self,
        asset_id: str,
        make: str,
        model: str,
        color: str,
        owner: str,
    ) -> AssetRecord:
        """
        Create (or overwrite) the car at ``asset_id`` and emit CarCreated.

        The event payload is the raw UTF-8 asset ID with no envelope.

        Returns:
            The record as written.

        Raises:
            InvalidAssetIDError: if ``asset_id`` is empty.
            EncodeError: if a field cannot be encoded.
            PersistenceError: if the write failed (nothing persisted).
            EmitError: if the event failed (record persisted).
        """
        validate_asset_id(asset_id)
        record = AssetRecord(asset_id, make, model, color, owner)

        with LogContext.bind(asset_id=asset_id):
            data = encode_asset(record)
            try:
                self.store.put_state(asset_id, data)
            except LedgerStoreError as exc:
                logger.error("asset_write_failed", extra={"key": asset_id})
                raise PersistenceError("CreateCar", exc.reason, key=asset_id) from exc

            logger.info("asset_created", extra={"make": make, "model": model})

            self._emitter.emit(
                CAR_CREATED_EVENT,
                asset_id.encode("utf-8"),
                operation="CreateCar",
                key=asset_id,
            )

        return record

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def query_all_cars(self) -> list[AssetRecord]:
        """
        Return every car in the namespace in ascending asset ID order.

        An empty store yields an empty list.

        Raises:
            PersistenceError: if the scan cannot be opened or iterated.
            DecodeError: on the first entry that is not a valid record.
        """
        logger.info("query_all_started")

        try:
            iterator = self.store.get_state_by_range("", "")
        except LedgerStoreError as exc:
            logger.error("query_all_open_failed")
            raise PersistenceError("QueryAllCars", exc.reason) from exc

        cars: list[AssetRecord] = []
        with iterator:
            try:
                for kv in iterator:
                    car = decode_asset(kv.value, key=kv.key)
                    logger.debug("asset_found", extra={"key": kv.key})
                    cars.append(car)
            except LedgerStoreError as exc:
                logger.error("query_all_iteration_failed")
                raise PersistenceError("QueryAllCars", exc.reason, key=exc.key) from exc
            except DecodeError as exc:
                logger.error("asset_decode_failed", extra={"key": exc.key})
                raise

        logger.info("query_all_completed", extra={"record_count": len(cars)})
        return cars

    def query_car(self, asset_id: str) -> AssetRecord:
        """
        Return the car stored at ``asset_id``.

        Raises:
            InvalidAssetIDError: if ``asset_id`` is empty.
            AssetNotFoundError: if no record exists at ``asset_id``.
            PersistenceError: if the read failed.
            DecodeError: if the stored value is not a valid record.
        """
        validate_asset_id(asset_id)

        try:
            data = self.store.get_state(asset_id)
        except LedgerStoreError as exc:
            raise PersistenceError("QueryCar", exc.reason, key=asset_id) from exc

        if data is None:
            raise AssetNotFoundError(asset_id)
        return decode_asset(data, key=asset_id)
