"""ORM rows backing the SQL world-state adapter."""

from asset_ledger.models.chaincode_event import ChaincodeEventRecord
from asset_ledger.models.world_state import WorldStateEntry

__all__ = [
    "ChaincodeEventRecord",
    "WorldStateEntry",
]
