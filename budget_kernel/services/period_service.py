"""
PeriodService -- budget period lifecycle.

Responsibility:
    Opens, closes and chains a user's budget periods
    (NO_PERIOD -> ACTIVE -> CLOSED -> next ACTIVE) and computes the spend
    and savings of the window being closed.

Architecture position:
    Kernel > Services -- imperative shell.
    Called by the BudgetCore facade on explicit user action.  Reads and
    writes only through a DataPort; totals come from the pure
    TransactionAggregator.

Invariants enforced:
    - At most one active period per user: start_period refuses while one
      is open, and the SQL adapter backs this with a partial unique index.
    - A close is applied once.  Closing again with the same end date
      replays the stored result without re-aggregating, unless a period
      opened on or before that date is still active.
    - Totals only count the user's own budgets and transactions.
    - total_saved is never negative.
    - Closing window is [start_of_day(start_date), end_of_day(end_date)]
      in the configured timezone.
    - Flush-only through the port: never commits.

Failure modes:
    - ActivePeriodExistsError: start_period while a period is open.
    - ActivePeriodNotFoundError: close_period with nothing open.
    - InvalidRangeError: end before start, or a start inside closed history.
    - The chained start of the next period may fail after a successful
      close.  That failure is logged (``next_period_start_failed``) and
      the close stands with ``next_period=None``.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, tzinfo
from uuid import UUID

from budget_kernel.domain.aggregation import (
    DEFAULT_TRANSFER_CATEGORY,
    PeriodTotals,
    TransactionAggregator,
)
from budget_kernel.domain.clock import Clock, SystemClock
from budget_kernel.domain.dtos import (
    Budget,
    BudgetPeriod,
    DateRange,
    PeriodDraft,
    PeriodUpdate,
    Transaction,
)
from budget_kernel.domain.values import (
    UTC,
    end_of_day,
    next_day,
    start_of_day,
)
from budget_kernel.exceptions import (
    ActivePeriodExistsError,
    ActivePeriodNotFoundError,
    InvalidRangeError,
)
from budget_kernel.logging_config import LogContext, get_logger
from budget_kernel.ports.base import DataPort

logger = get_logger("services.period")


@dataclass(frozen=True)
class ClosePeriodResult:
    """Outcome of close_period.

    ``replayed`` is True when the period had already been closed with the
    same end date and nothing was recomputed.
    """

    period: BudgetPeriod
    next_period: BudgetPeriod | None = None
    replayed: bool = False


class PeriodService:
    """
    Service for the budget period lifecycle.

    Contract:
        Accepts user ids and calendar dates, returns frozen
        ``BudgetPeriod`` DTOs.  Writes go through the DataPort inside
        ``port.atomic()`` blocks.

    Guarantees:
        - Concurrent closes for a user serialize on the active period row
          (``load_active_period(for_update=True)``).
        - The chained next period starts the day after ``end_date``.

    Non-goals:
        - Does NOT commit -- caller controls boundaries.
        - Does NOT close periods on a schedule.
    """

    def __init__(
        self,
        port: DataPort,
        clock: Clock | None = None,
        *,
        tz: tzinfo = UTC,
        transfer_category: str = DEFAULT_TRANSFER_CATEGORY,
        chain_next_period: bool = True,
    ):
        self._port = port
        self._clock = clock or SystemClock()
        self._tz = tz
        self._chain_next_period = chain_next_period
        self._aggregator = TransactionAggregator(transfer_category=transfer_category, tz=tz)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_active_period(self, user_id: UUID) -> BudgetPeriod | None:
        return self._port.load_active_period(user_id)

    def get_periods(self, user_id: UUID) -> list[BudgetPeriod]:
        """All periods of the user, newest first."""
        return self._port.load_periods_by_user(user_id)

    def get_active_periods(self, user_ids: Iterable[UUID]) -> dict[UUID, BudgetPeriod | None]:
        """Active period per user (None where the user has none)."""
        return {user_id: self._port.load_active_period(user_id) for user_id in user_ids}

    def preview_period(
        self,
        user_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> PeriodTotals:
        """
        Totals a close would record, without writing anything.

        ``start_date`` defaults to the active period's start and
        ``end_date`` to today in the configured timezone.

        Raises:
            ActivePeriodNotFoundError: No start_date given and nothing open.
            InvalidRangeError: end_date before start_date.
        """
        if start_date is None:
            active = self._port.load_active_period(user_id)
            if active is None:
                raise ActivePeriodNotFoundError(user_id)
            start_date = active.start_date
        if end_date is None:
            end_date = self._clock.today(self._tz)
        if end_date < start_date:
            raise InvalidRangeError(start_date, end_date, "end date precedes start date")

        return self._compute_totals(user_id, start_date, end_date, None, None)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start_period(self, user_id: UUID, start_date: date) -> BudgetPeriod:
        """
        Open a new active period for the user.

        Raises:
            ActivePeriodExistsError: A period is already open.
            InvalidRangeError: start_date precedes the latest closed
                period's end date.
        """
        with LogContext.bind(user_id=user_id), self._port.atomic():
            active = self._port.load_active_period(user_id, for_update=True)
            if active is not None:
                logger.warning(
                    "period_start_rejected_active_exists",
                    extra={"active_period_id": str(active.id)},
                )
                raise ActivePeriodExistsError(user_id, active.id)

            closed_ends = [
                p.end_date for p in self._port.load_periods_by_user(user_id)
                if p.end_date is not None
            ]
            if closed_ends:
                latest_end = max(closed_ends)
                if start_date < latest_end:
                    raise InvalidRangeError(
                        start_date, latest_end, "start date precedes the last closed period"
                    )

            period = self._port.create_period(
                PeriodDraft(user_id=user_id, start_date=start_date, created_at=self._clock.now())
            )

            logger.info(
                "period_started",
                extra={"period_id": str(period.id), "start_date": start_date.isoformat()},
            )
            return period

    def close_period(
        self,
        user_id: UUID,
        end_date: date,
        transactions: Sequence[Transaction] | None = None,
        budgets: Sequence[Budget] | None = None,
    ) -> ClosePeriodResult:
        """
        Close the user's active period on ``end_date`` and open the next.

        Args:
            user_id: Owner of the period.
            end_date: Inclusive last day of the period.
            transactions: Transactions to total; loaded from the port when
                omitted.  Entries of other users are ignored.
            budgets: Budgets to total; loaded from the port when omitted.
                Entries of other users are ignored.

        Returns:
            ClosePeriodResult with the closed period and the chained one.

        Raises:
            ActivePeriodNotFoundError: Nothing open to close.
            InvalidRangeError: end_date precedes the period's start_date.
        """
        with LogContext.bind(user_id=user_id):
            replay = self._find_replay(user_id, end_date)
            if replay is not None:
                logger.info(
                    "period_close_replayed",
                    extra={"period_id": str(replay.id), "end_date": end_date.isoformat()},
                )
                return ClosePeriodResult(
                    period=replay,
                    next_period=self._chained_after(user_id, end_date),
                    replayed=True,
                )

            closed = self._close_active(user_id, end_date, transactions, budgets)

            next_period = None
            if self._chain_next_period:
                next_period = self._start_next(user_id, closed)

            return ClosePeriodResult(period=closed, next_period=next_period)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _close_active(
        self,
        user_id: UUID,
        end_date: date,
        transactions: Sequence[Transaction] | None,
        budgets: Sequence[Budget] | None,
    ) -> BudgetPeriod:
        with self._port.atomic():
            active = self._port.load_active_period(user_id, for_update=True)
            if active is None:
                logger.warning("period_close_no_active_period")
                raise ActivePeriodNotFoundError(user_id)
            if end_date < active.start_date:
                raise InvalidRangeError(
                    active.start_date, end_date, "end date precedes period start"
                )

            with LogContext.bind(period_id=active.id):
                totals = self._compute_totals(
                    user_id, active.start_date, end_date, transactions, budgets
                )
                closed = self._port.update_period(
                    active.id,
                    PeriodUpdate(
                        period_id=active.id,
                        is_active=False,
                        end_date=end_date,
                        total_spent=totals.total_spent,
                        total_saved=totals.total_saved,
                        category_spending=totals.category_spending,
                        updated_at=self._clock.now(),
                    ),
                )

                logger.info(
                    "period_closed",
                    extra={
                        "start_date": active.start_date.isoformat(),
                        "end_date": end_date.isoformat(),
                        "total_budget": str(totals.total_budget),
                        "total_spent": str(totals.total_spent),
                        "total_saved": str(totals.total_saved),
                    },
                )
                return closed

    def _start_next(self, user_id: UUID, closed: BudgetPeriod) -> BudgetPeriod | None:
        next_start = next_day(closed.end_date)
        try:
            return self.start_period(user_id, next_start)
        except Exception:
            # The close is kept; the caller sees next_period=None
            logger.warning(
                "next_period_start_failed",
                extra={
                    "closed_period_id": str(closed.id),
                    "next_start_date": next_start.isoformat(),
                },
                exc_info=True,
            )
            return None

    def _find_replay(self, user_id: UUID, end_date: date) -> BudgetPeriod | None:
        """
        The stored close for ``end_date``, when closing again would be a repeat.

        An open period that starts on or before ``end_date`` is closed normally
        even if an older period already ended that day.
        """
        replay = self._port.find_closed_period(user_id, end_date)
        if replay is None:
            return None
        active = self._port.load_active_period(user_id)
        if active is not None and active.start_date <= end_date:
            return None
        return replay

    def _chained_after(self, user_id: UUID, end_date: date) -> BudgetPeriod | None:
        active = self._port.load_active_period(user_id)
        if active is not None and active.start_date == next_day(end_date):
            return active
        return None

    def _compute_totals(
        self,
        user_id: UUID,
        start_date: date,
        end_date: date,
        transactions: Sequence[Transaction] | None,
        budgets: Sequence[Budget] | None,
    ) -> PeriodTotals:
        window = DateRange(
            start=start_of_day(start_date, self._tz),
            end=end_of_day(end_date, self._tz),
        )
        if transactions is None:
            transactions = self._port.load_transactions_by_user(user_id, window)
        if budgets is None:
            budgets = self._port.load_budgets_by_user(user_id)
        # Hosts may pass group-wide lists
        transactions = [t for t in transactions if t.user_id == user_id]
        budgets = [b for b in budgets if b.user_id == user_id]
        return self._aggregator.period_totals(transactions, budgets, window.start, window.end)
