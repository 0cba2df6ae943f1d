"""Contract services: asset orchestration and event emission."""

from asset_ledger.services.asset_service import CAR_CREATED_EVENT, AssetService
from asset_ledger.services.event_emitter import EventEmitter

__all__ = [
    "CAR_CREATED_EVENT",
    "AssetService",
    "EventEmitter",
]
