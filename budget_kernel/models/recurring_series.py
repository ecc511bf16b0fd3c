"""
Module: budget_kernel.models.recurring_series
Responsibility: ORM persistence for recurring transaction templates and
    their execution bookkeeping.
Architecture position: Kernel > Models.

Invariants enforced:
    - total_executions == len(transaction_ids) after every successful fire;
      both are written in the same UPDATE by the SQL Data Port.
    - due_date only moves forward.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import JSON, Boolean, Date, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from budget_kernel.db.base import TrackedBase, UUIDString, as_utc
from budget_kernel.domain.dtos import Frequency, RecurringSeries, TransactionType


class RecurringSeriesModel(TrackedBase):
    """A recurring income or expense template."""

    __tablename__ = "recurring_series"

    __table_args__ = (
        Index("idx_recurring_active_due", "is_active", "due_date"),
        Index("idx_recurring_user", "user_id"),
    )

    user_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    account_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    description: Mapped[str] = mapped_column(String(200), nullable=False)

    amount: Mapped[Decimal] = mapped_column(nullable=False)

    type: Mapped[str] = mapped_column(String(20), nullable=False)

    category: Mapped[str] = mapped_column(String(100), nullable=False)

    frequency: Mapped[str] = mapped_column(String(20), nullable=False)

    # Next occurrence that should fire
    due_date: Mapped[date] = mapped_column(Date, nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    is_paused: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    auto_execute: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    total_executions: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Generated transaction ids, oldest first
    transaction_ids: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    failed_executions: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    last_executed_at: Mapped[datetime | None] = mapped_column(nullable=True)

    def __repr__(self) -> str:
        return f"<RecurringSeries {self.description}: {self.frequency} due {self.due_date}>"

    def to_dto(self) -> RecurringSeries:
        try:
            frequency: Frequency | str = Frequency(self.frequency)
        except ValueError:
            # Unknown values are surfaced to the engine, which reports them per series
            frequency = self.frequency
        return RecurringSeries(
            id=self.id,
            user_id=self.user_id,
            account_id=self.account_id,
            description=self.description,
            amount=self.amount,
            type=TransactionType(self.type),
            category=self.category,
            frequency=frequency,
            due_date=self.due_date,
            is_active=self.is_active,
            is_paused=self.is_paused,
            auto_execute=self.auto_execute,
            total_executions=self.total_executions,
            transaction_ids=tuple(UUID(t) for t in self.transaction_ids or ()),
            failed_executions=self.failed_executions,
            last_executed_at=as_utc(self.last_executed_at),
        )

    @classmethod
    def from_dto(cls, dto: RecurringSeries) -> "RecurringSeriesModel":
        return cls(
            id=dto.id,
            user_id=dto.user_id,
            account_id=dto.account_id,
            description=dto.description,
            amount=dto.amount,
            type=dto.type.value if hasattr(dto.type, "value") else dto.type,
            category=dto.category,
            frequency=dto.frequency.value if hasattr(dto.frequency, "value") else dto.frequency,
            due_date=dto.due_date,
            is_active=dto.is_active,
            is_paused=dto.is_paused,
            auto_execute=dto.auto_execute,
            total_executions=dto.total_executions,
            transaction_ids=[str(t) for t in dto.transaction_ids],
            failed_executions=dto.failed_executions,
            last_executed_at=as_utc(dto.last_executed_at),
        )
