"""
Module: asset_ledger.models.chaincode_event
Responsibility: Append-only record of events emitted alongside world-state
    writes, read by off-chain listeners.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from asset_ledger.db.base import Base


class ChaincodeEventRecord(Base):
    """One emitted event.  Rows are inserted, never updated."""

    __tablename__ = "chaincode_events"

    __table_args__ = (
        UniqueConstraint("namespace", "sequence", name="uq_chaincode_event_sequence"),
        Index("idx_chaincode_event_name", "namespace", "event_name"),
    )

    namespace: Mapped[str] = mapped_column(String(64), nullable=False)

    tx_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # Emission order within the namespace, starting at 1
    sequence: Mapped[int] = mapped_column(nullable=False)

    event_name: Mapped[str] = mapped_column(String(100), nullable=False)

    payload: Mapped[bytes] = mapped_column(nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<ChaincodeEventRecord {self.namespace}:{self.event_name}>"
