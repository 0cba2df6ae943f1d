"""
Module: asset_ledger.db.base
Responsibility: Declarative base class for the ORM rows that back the SQL
    LedgerStore adapter.  Provides the UUID primary key convention and the
    type annotation map for consistent column types.
Architecture position: Kernel > DB.  Lowest-level import target within the
    kernel; MUST NOT import from models/, store/, services/ or outer layers.

Invariants enforced:
    - UUID primary keys: every row carries a uuid4-generated surrogate key.
      Business keys (namespace + world-state key) are separate unique
      columns.
    - datetime maps to DateTime(timezone=True); bytes maps to LargeBinary.
"""

from datetime import datetime
from typing import ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import BigInteger, DateTime, LargeBinary, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """
    UUID type stored as String(36) for cross-database portability.

    Converts between Python UUID objects and their 36-character string
    representation.
    """

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return None

    def process_result_value(self, value, dialect):
        if value is not None:
            return PyUUID(value)
        return None


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Guarantees:
        - id is always a uuid4-generated UUID stored as String(36).
        - datetime maps to DateTime(timezone=True).
        - int maps to BigInteger -- safe for monotonic versions.
        - bytes maps to LargeBinary -- opaque world-state values.
    """

    type_annotation_map: ClassVar[dict] = {
        datetime: DateTime(timezone=True),
        PyUUID: UUIDString(),
        int: BigInteger,
        bytes: LargeBinary,
    }

    id: Mapped[PyUUID] = mapped_column(
        UUIDString(),
        primary_key=True,
        default=uuid4,
    )
