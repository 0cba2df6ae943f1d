"""
Module: asset_ledger.models.world_state
Responsibility: ORM persistence for world-state entries -- the current value
    stored under each key of a contract namespace.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - (namespace, key) is unique: at most one value per key (uq_world_state_key).
    - ``version`` starts at 1 and increments on every overwrite.

Failure modes:
    - IntegrityError on a concurrent insert of the same (namespace, key).
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from asset_ledger.db.base import Base


class WorldStateEntry(Base):
    """
    Current value of one world-state key.

    Non-goals:
        - Does NOT interpret ``value``; it is opaque bytes to the store.
        - Does NOT keep history; an overwrite replaces the value in place.
    """

    __tablename__ = "world_state"

    __table_args__ = (
        UniqueConstraint("namespace", "key", name="uq_world_state_key"),
        Index("idx_world_state_namespace_key", "namespace", "key"),
    )

    # Contract namespace owning the key (e.g., "fabcar")
    namespace: Mapped[str] = mapped_column(String(64), nullable=False)

    key: Mapped[str] = mapped_column(String(255), nullable=False)

    value: Mapped[bytes] = mapped_column(nullable=False)

    version: Mapped[int] = mapped_column(nullable=False, default=1)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    # Transaction that last wrote the key
    updated_tx_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    def __repr__(self) -> str:
        return f"<WorldStateEntry {self.namespace}:{self.key} v{self.version}>"
