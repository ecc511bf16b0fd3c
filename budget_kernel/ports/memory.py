"""
InMemoryDataPort -- dict-backed DataPort for tests and diagnostics.

Mirrors the guarantees of the SQL adapter that the services rely on:
one active period per user, not-found errors on updates of unknown ids,
and ``atomic()`` rollback of every write made inside the block.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import date
from uuid import UUID, uuid4

from budget_kernel.domain.dtos import (
    Budget,
    BudgetPeriod,
    DateRange,
    PeriodDraft,
    PeriodUpdate,
    RecurringSeries,
    SeriesUpdate,
    Transaction,
    TransactionDraft,
)
from budget_kernel.domain.values import within_range
from budget_kernel.exceptions import (
    PeriodNotFoundError,
    PersistenceError,
    SeriesNotFoundError,
)


class InMemoryDataPort:
    """Holds every entity in plain dicts keyed by id."""

    def __init__(
        self,
        *,
        budgets: Iterable[Budget] = (),
        transactions: Iterable[Transaction] = (),
        series: Iterable[RecurringSeries] = (),
        periods: Iterable[BudgetPeriod] = (),
    ):
        self.budgets: dict[UUID, Budget] = {b.id: b for b in budgets}
        self.transactions: dict[UUID, Transaction] = {t.id: t for t in transactions}
        self.series: dict[UUID, RecurringSeries] = {s.id: s for s in series}
        self.periods: dict[UUID, BudgetPeriod] = {p.id: p for p in periods}

    # -- seeding -------------------------------------------------------------

    def add_budget(self, budget: Budget) -> Budget:
        self.budgets[budget.id] = budget
        return budget

    def add_transaction(self, transaction: Transaction) -> Transaction:
        self.transactions[transaction.id] = transaction
        return transaction

    def add_series(self, series: RecurringSeries) -> RecurringSeries:
        self.series[series.id] = series
        return series

    def add_period(self, period: BudgetPeriod) -> BudgetPeriod:
        self.periods[period.id] = period
        return period

    # -- reads ---------------------------------------------------------------

    def load_active_series(self) -> list[RecurringSeries]:
        active = [s for s in self.series.values() if s.is_active]
        return sorted(active, key=lambda s: s.due_date)

    def load_series(self, series_id: UUID) -> RecurringSeries | None:
        return self.series.get(series_id)

    def load_transactions_by_user(
        self, user_id: UUID, date_range: DateRange | None = None
    ) -> list[Transaction]:
        rows = [t for t in self.transactions.values() if t.user_id == user_id]
        if date_range is not None:
            rows = [t for t in rows if within_range(t.date, date_range.start, date_range.end)]
        return sorted(rows, key=lambda t: t.date)

    def load_transactions_by_series(self, series_id: UUID) -> list[Transaction]:
        rows = [t for t in self.transactions.values() if t.recurring_series_id == series_id]
        return sorted(rows, key=lambda t: t.date)

    def load_budgets_by_user(self, user_id: UUID) -> list[Budget]:
        return [b for b in self.budgets.values() if b.user_id == user_id]

    def load_periods_by_user(self, user_id: UUID) -> list[BudgetPeriod]:
        rows = [p for p in self.periods.values() if p.user_id == user_id]
        return sorted(rows, key=lambda p: p.start_date, reverse=True)

    def load_active_period(
        self, user_id: UUID, *, for_update: bool = False
    ) -> BudgetPeriod | None:
        for period in self.periods.values():
            if period.user_id == user_id and period.is_active:
                return period
        return None

    def find_closed_period(self, user_id: UUID, end_date: date) -> BudgetPeriod | None:
        for period in self.periods.values():
            if period.user_id == user_id and not period.is_active and period.end_date == end_date:
                return period
        return None

    # -- writes --------------------------------------------------------------

    def create_transaction(self, draft: TransactionDraft) -> Transaction:
        transaction = draft.to_transaction(uuid4())
        self.transactions[transaction.id] = transaction
        return transaction

    def update_series(self, series_id: UUID, update: SeriesUpdate) -> RecurringSeries:
        current = self.series.get(series_id)
        if current is None:
            raise SeriesNotFoundError(series_id)
        updated = update.apply_to(current)
        self.series[series_id] = updated
        return updated

    def update_period(self, period_id: UUID, update: PeriodUpdate) -> BudgetPeriod:
        current = self.periods.get(period_id)
        if current is None:
            raise PeriodNotFoundError(period_id)
        updated = update.apply_to(current)
        self.periods[period_id] = updated
        return updated

    def create_period(self, draft: PeriodDraft) -> BudgetPeriod:
        if self.load_active_period(draft.user_id) is not None:
            raise PersistenceError(
                "create_period", f"user {draft.user_id} already has an active period"
            )
        period = BudgetPeriod(
            id=uuid4(),
            user_id=draft.user_id,
            start_date=draft.start_date,
            created_at=draft.created_at,
            updated_at=draft.created_at,
        )
        self.periods[period.id] = period
        return period

    @contextmanager
    def atomic(self) -> Iterator[None]:
        snapshot = (
            dict(self.budgets),
            dict(self.transactions),
            dict(self.series),
            dict(self.periods),
        )
        try:
            yield
        except BaseException:
            self.budgets, self.transactions, self.series, self.periods = snapshot
            raise
