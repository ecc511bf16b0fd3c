"""
ReconciliationService -- expected vs actual executions of recurring series.

Contract:
    ``get_series_reconciliation()`` compares a series' execution counter
    with the transactions tagged with its id.  ``find_missed_executions()``
    runs that comparison over every active series and keeps the ones with
    missed payments.  Read-only.

Architecture: budget_recurring/services.  Reads through the DataPort.

Invariants enforced:
    - expected_total = amount x total_executions.
    - success_rate = actual / expected x 100, and 0 when nothing was
      expected.
    - A series whose counter matches its tagged transactions reports
      100% success and zero missed payments.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from budget_kernel.domain.dtos import RecurringSeries
from budget_kernel.domain.values import ZERO, round_money
from budget_kernel.exceptions import SeriesNotFoundError
from budget_kernel.logging_config import get_logger
from budget_kernel.ports.base import DataPort
from budget_recurring.domain.types import MissedExecution, ReconciliationReport

logger = get_logger("recurring.reconciliation")

_HUNDRED = Decimal("100")


class ReconciliationService:
    """Read-only audit of recurring series."""

    def __init__(self, port: DataPort):
        self._port = port

    def get_series_reconciliation(self, series_id: UUID) -> ReconciliationReport:
        """
        Reconcile one series.

        Raises:
            SeriesNotFoundError: Unknown series id.
        """
        series = self._port.load_series(series_id)
        if series is None:
            raise SeriesNotFoundError(series_id)
        return self.reconcile(series)

    def reconcile(self, series: RecurringSeries) -> ReconciliationReport:
        transactions = self._port.load_transactions_by_series(series.id)

        expected = series.total_executions
        actual = len(transactions)
        expected_total = round_money(series.amount * expected)
        actual_total = round_money(sum((t.amount for t in transactions), ZERO))

        if expected > 0:
            success_rate = round_money(Decimal(actual) / Decimal(expected) * _HUNDRED)
        else:
            success_rate = round_money(ZERO)

        return ReconciliationReport(
            series_id=series.id,
            series_name=series.description,
            expected_executions=expected,
            actual_executions=actual,
            expected_total=expected_total,
            actual_total=actual_total,
            difference=actual_total - expected_total,
            missed_payments=expected - actual,
            success_rate=success_rate,
            transaction_ids=tuple(t.id for t in transactions),
        )

    def find_missed_executions(self) -> list[MissedExecution]:
        """Active series whose counter exceeds their tagged transactions."""
        missed: list[MissedExecution] = []
        for series in self._port.load_active_series():
            report = self.reconcile(series)
            if report.missed_payments > 0:
                missed.append(
                    MissedExecution(
                        series=series,
                        missed_count=report.missed_payments,
                        report=report,
                    )
                )

        if missed:
            logger.warning(
                "recurring_missed_executions_found",
                extra={
                    "count": len(missed),
                    "series_ids": [str(m.series.id) for m in missed],
                },
            )
        return missed
