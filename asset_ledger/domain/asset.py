"""
AssetRecord -- the sole world-state entity.

Responsibility:
    Defines the immutable in-memory form of a car asset and the fixed seed
    set written by InitLedger.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - At most one record per ``asset_id`` in the store (the key IS the
      asset_id; a second write overwrites).
    - Records are never partially updated; a change is a full overwrite.
"""

from __future__ import annotations

from dataclasses import dataclass

from asset_ledger.exceptions import InvalidAssetIDError


@dataclass(frozen=True)
class AssetRecord:
    """A car asset as held in world state under ``asset_id``."""

    asset_id: str
    make: str
    model: str
    color: str
    owner: str

    def to_dict(self) -> dict[str, str]:
        """Return the record keyed by its wire field names."""
        return {
            "assetID": self.asset_id,
            "make": self.make,
            "model": self.model,
            "color": self.color,
            "owner": self.owner,
        }


def validate_asset_id(asset_id: object) -> str:
    """
    Check that ``asset_id`` can address a world-state entry.

    Raises:
        InvalidAssetIDError: if ``asset_id`` is not a non-empty string.
    """
    if not isinstance(asset_id, str) or asset_id == "":
        raise InvalidAssetIDError(asset_id)
    return asset_id


SEED_CARS: tuple[AssetRecord, ...] = (
    AssetRecord("CAR0", "Toyota", "Prius", "blue", "Tomoko"),
    AssetRecord("CAR1", "Ford", "Mustang", "red", "Brad"),
    AssetRecord("CAR2", "Hyundai", "Tucson", "green", "Jin Soo"),
    AssetRecord("CAR3", "Volkswagen", "Passat", "yellow", "Max"),
    AssetRecord("CAR4", "Tesla", "Model S", "black", "Adriana"),
    AssetRecord("CAR5", "Peugeot", "208", "purple", "Michel"),
)
