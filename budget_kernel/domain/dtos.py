"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Defines the immutable snapshots the core reads (Budget, Transaction,
    BudgetPeriod, RecurringSeries) and the mutation commands it emits
    (TransactionDraft, SeriesUpdate, PeriodDraft, PeriodUpdate).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Free of ORM dependencies.  The Data Port converts to and from its own
    storage representation at the boundary.

Invariants enforced:
    - All DTOs are frozen dataclasses.
    - All monetary fields are Decimal (never float).
    - Transaction amounts are non-negative magnitudes; direction comes from
      ``type``.
    - ``SeriesUpdate`` / ``PeriodUpdate`` only carry fields that change;
      ``None`` means "leave as is".

Failure modes:
    - ValueError on negative transaction amounts.
    - ValueError on a budget with no categories.

Data flow:
    RecurringSeries -> TransactionDraft -> Transaction (persisted by port)
    RecurringSeries -> SeriesUpdate (applied by port)
    BudgetPeriod    -> PeriodUpdate / PeriodDraft (applied by port)
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

# =============================================================================
# Enums
# =============================================================================


class TransactionType(str, Enum):
    """Direction of a transaction."""

    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


class BudgetType(str, Enum):
    """Budget envelope cadence."""

    MONTHLY = "monthly"
    ANNUALLY = "annually"


class Frequency(str, Enum):
    """Recurrence frequency of a recurring series."""

    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


# =============================================================================
# Snapshots
# =============================================================================


@dataclass(frozen=True)
class DateRange:
    """Inclusive date window."""

    start: date | datetime
    end: date | datetime


@dataclass(frozen=True)
class Budget:
    """A spending envelope over a set of categories (read-only input)."""

    id: UUID
    user_id: UUID
    description: str
    amount: Decimal
    categories: frozenset[str]
    type: BudgetType = BudgetType.MONTHLY
    group_id: UUID | None = None

    def __post_init__(self) -> None:
        if not self.categories:
            raise ValueError(f"Budget {self.id} must have at least one category")
        if not isinstance(self.categories, frozenset):
            object.__setattr__(self, "categories", frozenset(self.categories))


@dataclass(frozen=True)
class Transaction:
    """A persisted income, expense or transfer."""

    id: UUID
    user_id: UUID
    account_id: UUID
    type: TransactionType
    amount: Decimal
    category: str
    date: datetime
    description: str = ""
    to_account_id: UUID | None = None
    recurring_series_id: UUID | None = None

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError(
                f"Transaction {self.id} amount must be a non-negative magnitude, got {self.amount}"
            )


@dataclass(frozen=True)
class BudgetPeriod:
    """
    One accounting window of a user's budgets.

    ``end_date`` is None while the period is open.  Totals are only
    populated by a close.
    """

    id: UUID
    user_id: UUID
    start_date: date
    end_date: date | None = None
    is_active: bool = True
    total_spent: Decimal | None = None
    total_saved: Decimal | None = None
    category_spending: dict[str, Decimal] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_open(self) -> bool:
        """Active and without an end date."""
        return self.is_active and self.end_date is None

    @property
    def is_closed(self) -> bool:
        return not self.is_active and self.end_date is not None


@dataclass(frozen=True)
class RecurringSeries:
    """Template that periodically materializes transactions."""

    id: UUID
    user_id: UUID
    account_id: UUID
    description: str
    amount: Decimal
    type: TransactionType
    category: str
    frequency: Frequency | str
    due_date: date
    is_active: bool = True
    is_paused: bool = False
    # Fired by scheduled runs; other series only on a forced run
    auto_execute: bool = False
    total_executions: int = 0
    transaction_ids: tuple[UUID, ...] = ()
    failed_executions: int = 0
    last_executed_at: datetime | None = None


# =============================================================================
# Mutation commands
# =============================================================================


@dataclass(frozen=True)
class TransactionDraft:
    """Payload for a transaction the host must persist."""

    user_id: UUID
    account_id: UUID
    type: TransactionType
    amount: Decimal
    category: str
    date: datetime
    description: str = ""
    recurring_series_id: UUID | None = None
    to_account_id: UUID | None = None

    def to_transaction(self, transaction_id: UUID) -> Transaction:
        """Materialize with the id assigned by the store."""
        return Transaction(
            id=transaction_id,
            user_id=self.user_id,
            account_id=self.account_id,
            type=self.type,
            amount=self.amount,
            category=self.category,
            date=self.date,
            description=self.description,
            to_account_id=self.to_account_id,
            recurring_series_id=self.recurring_series_id,
        )


@dataclass(frozen=True)
class SeriesUpdate:
    """Patch for a recurring series after a fire (or a failed fire)."""

    series_id: UUID
    total_executions: int | None = None
    due_date: date | None = None
    transaction_ids: tuple[UUID, ...] | None = None
    last_executed_at: datetime | None = None
    failed_executions: int | None = None

    def apply_to(self, series: RecurringSeries) -> RecurringSeries:
        """Return ``series`` with the non-None fields of this patch applied."""
        return dataclasses.replace(series, **_changes(self, exclude=("series_id",)))


@dataclass(frozen=True)
class PeriodDraft:
    """Payload for a newly opened budget period."""

    user_id: UUID
    start_date: date
    created_at: datetime | None = None


@dataclass(frozen=True)
class PeriodUpdate:
    """Patch closing a budget period."""

    period_id: UUID
    is_active: bool | None = None
    end_date: date | None = None
    total_spent: Decimal | None = None
    total_saved: Decimal | None = None
    category_spending: dict[str, Decimal] | None = None
    updated_at: datetime | None = None

    def apply_to(self, period: BudgetPeriod) -> BudgetPeriod:
        """Return ``period`` with the non-None fields of this patch applied."""
        return dataclasses.replace(period, **_changes(self, exclude=("period_id",)))


def _changes(patch: object, exclude: tuple[str, ...]) -> dict[str, object]:
    return {
        f.name: getattr(patch, f.name)
        for f in dataclasses.fields(patch)
        if f.name not in exclude and getattr(patch, f.name) is not None
    }
