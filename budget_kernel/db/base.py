"""
Module: budget_kernel.db.base
Responsibility: Declarative base for the ORM models behind the SQL Data
    Port, plus the two column types every table relies on: UUIDs stored as
    text and datetimes pinned to UTC.
Architecture position: Kernel > DB.  Imported by models/ and ports/sql.py;
    imports nothing from the rest of the kernel.

Invariants enforced:
    - Primary keys are uuid4 values stored as String(36), so SQLite and
      PostgreSQL hold identical keys.
    - Money columns are Numeric(38, 9).  Never float.
    - Datetimes are written in UTC and read back timezone-aware, including
      on SQLite which stores them without an offset.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import ClassVar
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


def as_utc(value: datetime | None) -> datetime | None:
    """
    Normalize to an aware UTC datetime.

    Naive values are taken to be UTC already (that is how they are stored).
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UUIDString(TypeDecorator):
    """uuid.UUID <-> 36-character string."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else UUID(value)


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime, stored and returned in UTC."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return as_utc(value)

    def process_result_value(self, value, dialect):
        return as_utc(value)


class Base(DeclarativeBase):
    """
    Declarative base for the budget tables.

    ``Mapped[Decimal]`` becomes Numeric(38, 9), ``Mapped[datetime]`` a
    UTCDateTime and ``Mapped[UUID]`` a UUIDString without per-column
    arguments.
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(38, 9),
        datetime: UTCDateTime(),
        UUID: UUIDString(),
    }

    id: Mapped[UUID] = mapped_column(UUIDString(), primary_key=True, default=uuid4)


class TrackedBase(Base):
    """Adds created_at / updated_at, defaulted by the database."""

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), server_default=func.now(), nullable=False
    )

    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), server_default=func.now(), onupdate=func.now(), nullable=False
    )
