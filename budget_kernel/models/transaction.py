"""
Module: budget_kernel.models.transaction
Responsibility: ORM persistence for income, expense and transfer rows,
    including the ones materialized by recurring series.
Architecture position: Kernel > Models.

Invariants enforced:
    - ``date`` is stored timezone-aware; rows read back from backends that
      drop the offset (SQLite) are re-tagged as UTC.
    - ``recurring_series_id`` links a generated row to its series.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from budget_kernel.db.base import TrackedBase, UUIDString, as_utc
from budget_kernel.domain.dtos import Transaction, TransactionType


class TransactionModel(TrackedBase):
    """A persisted transaction."""

    __tablename__ = "transactions"

    __table_args__ = (
        Index("idx_transaction_user_date", "user_id", "date"),
        Index("idx_transaction_series", "recurring_series_id"),
    )

    user_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    account_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    type: Mapped[str] = mapped_column(String(20), nullable=False)

    # Non-negative magnitude; direction comes from type
    amount: Mapped[Decimal] = mapped_column(nullable=False)

    category: Mapped[str] = mapped_column(String(100), nullable=False)

    date: Mapped[datetime] = mapped_column(nullable=False)

    description: Mapped[str] = mapped_column(String(500), default="", nullable=False)

    to_account_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    recurring_series_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    def __repr__(self) -> str:
        return f"<Transaction {self.type} {self.amount} {self.category} @ {self.date}>"

    def to_dto(self) -> Transaction:
        return Transaction(
            id=self.id,
            user_id=self.user_id,
            account_id=self.account_id,
            type=TransactionType(self.type),
            amount=self.amount,
            category=self.category,
            date=as_utc(self.date),
            description=self.description,
            to_account_id=self.to_account_id,
            recurring_series_id=self.recurring_series_id,
        )

    @classmethod
    def from_dto(cls, dto: Transaction) -> "TransactionModel":
        return cls(
            id=dto.id,
            user_id=dto.user_id,
            account_id=dto.account_id,
            type=dto.type.value if hasattr(dto.type, "value") else dto.type,
            amount=dto.amount,
            category=dto.category,
            date=as_utc(dto.date),
            description=dto.description,
            to_account_id=dto.to_account_id,
            recurring_series_id=dto.recurring_series_id,
        )
