"""
BudgetCore -- public facade and DI container of the budget core.

Contract:
    Wires PeriodService, RecurringExecutor and ReconciliationService over
    one DataPort and one Clock, and exposes the host-facing operations.
    Period operations return ``PeriodOperationResult`` instead of raising
    business errors.

Architecture: budget_services (top-level).  The only package that
    combines budget_kernel, budget_recurring and budget_config.

Invariants enforced:
    - Clock injection: all services receive the same Clock.
    - Business errors (``BudgetCoreError``) from period operations become
      ``PeriodOperationResult.error``; ``PersistenceError`` propagates so
      the host can roll back its transaction.
    - No module-level state: one BudgetCore per session / port.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from budget_config.schema import CoreConfig
from budget_kernel.domain.aggregation import PeriodTotals
from budget_kernel.domain.clock import Clock, SystemClock
from budget_kernel.domain.dtos import Budget, BudgetPeriod, Transaction
from budget_kernel.exceptions import BudgetCoreError, PersistenceError
from budget_kernel.logging_config import get_logger
from budget_kernel.ports.base import DataPort
from budget_kernel.ports.sql import SqlAlchemyDataPort
from budget_kernel.services.period_service import PeriodService
from budget_recurring.domain.types import (
    ExecutionOptions,
    ExecutionResult,
    MissedExecution,
    ReconciliationReport,
)
from budget_recurring.services.executor import RecurringExecutor
from budget_recurring.services.reconciliation import ReconciliationService

logger = get_logger("services.core")


@dataclass(frozen=True)
class OperationError:
    """Machine-readable error carried by a failed period operation."""

    code: str
    message: str

    @classmethod
    def from_exception(cls, exc: BudgetCoreError) -> OperationError:
        return cls(code=exc.code, message=str(exc))


@dataclass(frozen=True)
class PeriodOperationResult:
    """Result of start_period / close_period."""

    period: BudgetPeriod | None = None
    next_period: BudgetPeriod | None = None
    replayed: bool = False
    error: OperationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "period": _period_dict(self.period),
            "next_period": _period_dict(self.next_period),
            "replayed": self.replayed,
            "error": (
                {"code": self.error.code, "message": self.error.message}
                if self.error is not None
                else None
            ),
        }


class BudgetCore:
    """Facade over the period lifecycle and recurring engine.

    Contract:
        - ``from_session()`` factory creates a fully wired core over the
          SQL Data Port.
        - The constructor accepts any DataPort (e.g. InMemoryDataPort).

    Non-goals:
        - Does NOT commit -- caller controls boundaries.
        - Does NOT schedule run_due_recurring -- an external trigger does.
    """

    def __init__(
        self,
        port: DataPort,
        clock: Clock | None = None,
        config: CoreConfig | None = None,
    ) -> None:
        self._port = port
        self._clock = clock or SystemClock()
        self._config = config or CoreConfig()
        tz = self._config.tzinfo
        self._periods = PeriodService(
            port,
            self._clock,
            tz=tz,
            transfer_category=self._config.transfer_category,
            chain_next_period=self._config.chain_next_period,
        )
        self._executor = RecurringExecutor(port, self._clock, tz=tz)
        self._reconciliation = ReconciliationService(port)

    @classmethod
    def from_session(
        cls,
        session: Session,
        clock: Clock | None = None,
        config: CoreConfig | None = None,
    ) -> BudgetCore:
        """Create a BudgetCore backed by ``SqlAlchemyDataPort(session)``."""
        return cls(SqlAlchemyDataPort(session), clock=clock, config=config)

    @property
    def config(self) -> CoreConfig:
        return self._config

    @property
    def periods(self) -> PeriodService:
        return self._periods

    @property
    def executor(self) -> RecurringExecutor:
        return self._executor

    # -------------------------------------------------------------------------
    # Periods
    # -------------------------------------------------------------------------

    def close_period(
        self,
        user_id: UUID,
        end_date: date,
        transactions: Sequence[Transaction] | None = None,
        budgets: Sequence[Budget] | None = None,
    ) -> PeriodOperationResult:
        try:
            result = self._periods.close_period(user_id, end_date, transactions, budgets)
        except PersistenceError:
            raise
        except BudgetCoreError as exc:
            logger.info(
                "period_close_refused",
                extra={"user_id": str(user_id), "error_code": exc.code},
            )
            return PeriodOperationResult(error=OperationError.from_exception(exc))
        return PeriodOperationResult(
            period=result.period,
            next_period=result.next_period,
            replayed=result.replayed,
        )

    def start_period(self, user_id: UUID, start_date: date) -> PeriodOperationResult:
        try:
            period = self._periods.start_period(user_id, start_date)
        except PersistenceError:
            raise
        except BudgetCoreError as exc:
            logger.info(
                "period_start_refused",
                extra={"user_id": str(user_id), "error_code": exc.code},
            )
            return PeriodOperationResult(error=OperationError.from_exception(exc))
        return PeriodOperationResult(period=period)

    def preview_period(
        self,
        user_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> PeriodTotals:
        """Totals a close would record now.  Raises on business errors."""
        return self._periods.preview_period(user_id, start_date, end_date)

    def get_active_period(self, user_id: UUID) -> BudgetPeriod | None:
        return self._periods.get_active_period(user_id)

    def get_active_periods(self, user_ids: Iterable[UUID]) -> dict[UUID, BudgetPeriod | None]:
        return self._periods.get_active_periods(user_ids)

    def get_periods(self, user_id: UUID) -> list[BudgetPeriod]:
        return self._periods.get_periods(user_id)

    # -------------------------------------------------------------------------
    # Recurring
    # -------------------------------------------------------------------------

    def run_due_recurring(
        self,
        options: ExecutionOptions | None = None,
        now: datetime | None = None,
    ) -> ExecutionResult:
        """Fire every due active series; defaults come from the config."""
        if options is None:
            options = ExecutionOptions(
                dry_run=self._config.dry_run,
                max_days_overdue=self._config.max_days_overdue,
            )
        return self._executor.run_due(now=now, options=options)

    def get_reconciliation(self, series_id: UUID) -> ReconciliationReport:
        return self._reconciliation.get_series_reconciliation(series_id)

    def find_missed_executions(self) -> list[MissedExecution]:
        return self._reconciliation.find_missed_executions()


def _period_dict(period: BudgetPeriod | None) -> dict[str, Any] | None:
    if period is None:
        return None
    return {
        "id": str(period.id),
        "user_id": str(period.user_id),
        "start_date": period.start_date.isoformat(),
        "end_date": period.end_date.isoformat() if period.end_date else None,
        "is_active": period.is_active,
        "total_spent": str(period.total_spent) if period.total_spent is not None else None,
        "total_saved": str(period.total_saved) if period.total_saved is not None else None,
        "category_spending": {k: str(v) for k, v in period.category_spending.items()},
    }
