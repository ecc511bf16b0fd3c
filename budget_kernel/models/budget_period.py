"""
Module: budget_kernel.models.budget_period
Responsibility: ORM persistence for the budget period lifecycle.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/ only.

Invariants enforced:
    - At most one active period per user: partial unique index
      ``uq_budget_period_active_user`` on (user_id) WHERE is_active.
    - A closed period has is_active False and a non-null end_date; totals
      are written in the same UPDATE.

Failure modes:
    - IntegrityError if a second active period is inserted for a user
      (surfaces as PersistenceError through the SQL Data Port).
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import JSON, Boolean, Date, Index, text
from sqlalchemy.orm import Mapped, mapped_column

from budget_kernel.db.base import TrackedBase, UUIDString, as_utc
from budget_kernel.domain.dtos import BudgetPeriod


class BudgetPeriodModel(TrackedBase):
    """
    A user's budget period.

    Contract:
        Opened by PeriodService.start_period and closed exactly once by
        PeriodService.close_period.  Closed rows are not modified again.
    """

    __tablename__ = "budget_periods"

    __table_args__ = (
        Index("idx_budget_period_user", "user_id", "start_date"),
        Index(
            "uq_budget_period_active_user",
            "user_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

    user_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    start_date: Mapped[date] = mapped_column(Date, nullable=False)

    # Inclusive last day; null while open
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    total_spent: Mapped[Decimal | None] = mapped_column(nullable=True)

    total_saved: Mapped[Decimal | None] = mapped_column(nullable=True)

    # {category: "amount"} -- amounts stored as strings to keep Decimal exact
    category_spending: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)

    def __repr__(self) -> str:
        state = "active" if self.is_active else f"closed {self.end_date}"
        return f"<BudgetPeriod {self.user_id} {self.start_date}: {state}>"

    def to_dto(self) -> BudgetPeriod:
        return BudgetPeriod(
            id=self.id,
            user_id=self.user_id,
            start_date=self.start_date,
            end_date=self.end_date,
            is_active=self.is_active,
            total_spent=self.total_spent,
            total_saved=self.total_saved,
            category_spending={
                k: Decimal(v) for k, v in (self.category_spending or {}).items()
            },
            created_at=as_utc(self.created_at),
            updated_at=as_utc(self.updated_at),
        )

    @classmethod
    def from_dto(cls, dto: BudgetPeriod) -> "BudgetPeriodModel":
        return cls(
            id=dto.id,
            user_id=dto.user_id,
            start_date=dto.start_date,
            end_date=dto.end_date,
            is_active=dto.is_active,
            total_spent=dto.total_spent,
            total_saved=dto.total_saved,
            category_spending=encode_amounts(dto.category_spending),
        )


def encode_amounts(amounts: dict[str, Decimal]) -> dict[str, str]:
    """Decimal map -> JSON-safe string map."""
    return {k: str(v) for k, v in amounts.items()}
