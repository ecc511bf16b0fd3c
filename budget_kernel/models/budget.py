"""ORM persistence for budgets (read-only to the core)."""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import JSON, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from budget_kernel.db.base import TrackedBase, UUIDString
from budget_kernel.domain.dtos import Budget, BudgetType


class BudgetModel(TrackedBase):
    """A spending envelope over a list of categories."""

    __tablename__ = "budgets"

    __table_args__ = (Index("idx_budget_user", "user_id"),)

    user_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    description: Mapped[str] = mapped_column(String(200), nullable=False)

    amount: Mapped[Decimal] = mapped_column(nullable=False)

    categories: Mapped[list] = mapped_column(JSON, nullable=False)

    type: Mapped[str] = mapped_column(
        String(20), default=BudgetType.MONTHLY.value, nullable=False
    )

    group_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    def __repr__(self) -> str:
        return f"<Budget {self.description}: {self.amount}>"

    def to_dto(self) -> Budget:
        return Budget(
            id=self.id,
            user_id=self.user_id,
            description=self.description,
            amount=self.amount,
            categories=frozenset(self.categories),
            type=BudgetType(self.type),
            group_id=self.group_id,
        )

    @classmethod
    def from_dto(cls, dto: Budget) -> "BudgetModel":
        return cls(
            id=dto.id,
            user_id=dto.user_id,
            description=dto.description,
            amount=dto.amount,
            categories=sorted(dto.categories),
            type=dto.type.value if hasattr(dto.type, "value") else dto.type,
            group_id=dto.group_id,
        )
