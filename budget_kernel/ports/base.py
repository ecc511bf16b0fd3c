"""
DataPort protocol -- the narrow persistence seam of the budget core.

Contract:
    The core never owns storage.  Services receive a ``DataPort`` and only
    read entity snapshots from it or hand it mutation commands
    (``TransactionDraft``, ``SeriesUpdate``, ``PeriodDraft``,
    ``PeriodUpdate``).  The host decides when to commit.

Architecture:
    budget_kernel/ports.  Imports only from budget_kernel.domain.

Invariants enforced:
    - Every method returns frozen DTOs, never ORM rows.
    - ``atomic()`` groups the writes of one unit (one recurring fire, one
      period close) so they land together or not at all.
    - Adapters wrap storage failures as ``PersistenceError``; an unreachable
      store is ``PortUnavailableError``.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from datetime import date
from typing import Protocol, runtime_checkable
from uuid import UUID

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


@runtime_checkable
class DataPort(Protocol):
    """Protocol every storage adapter implements.

    Non-goals:
        - Does NOT commit -- the caller owns the outer transaction.
        - Does NOT validate business rules -- services do.
    """

    # -- reads ---------------------------------------------------------------

    def load_active_series(self) -> list[RecurringSeries]:
        """All series with ``is_active`` set, ordered by due date."""
        ...

    def load_series(self, series_id: UUID) -> RecurringSeries | None:
        ...

    def load_transactions_by_user(
        self, user_id: UUID, date_range: DateRange | None = None
    ) -> list[Transaction]:
        """A user's transactions, optionally restricted to an inclusive window."""
        ...

    def load_transactions_by_series(self, series_id: UUID) -> list[Transaction]:
        ...

    def load_budgets_by_user(self, user_id: UUID) -> list[Budget]:
        ...

    def load_periods_by_user(self, user_id: UUID) -> list[BudgetPeriod]:
        """A user's periods, newest start date first."""
        ...

    def load_active_period(
        self, user_id: UUID, *, for_update: bool = False
    ) -> BudgetPeriod | None:
        """The user's open period; ``for_update`` row-locks it where supported."""
        ...

    def find_closed_period(self, user_id: UUID, end_date: date) -> BudgetPeriod | None:
        """A closed period of the user ending on ``end_date``, if any."""
        ...

    # -- writes --------------------------------------------------------------

    def create_transaction(self, draft: TransactionDraft) -> Transaction:
        ...

    def update_series(self, series_id: UUID, update: SeriesUpdate) -> RecurringSeries:
        ...

    def update_period(self, period_id: UUID, update: PeriodUpdate) -> BudgetPeriod:
        ...

    def create_period(self, draft: PeriodDraft) -> BudgetPeriod:
        ...

    def atomic(self) -> AbstractContextManager[None]:
        """Nested unit of work: rolled back if the block raises."""
        ...
