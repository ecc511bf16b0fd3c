"""
budget_recurring.domain.types -- Frozen result types for the recurring engine.

ZERO I/O.  Frozen dataclasses with tuples for immutable collections.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any
from uuid import UUID

from budget_kernel.domain.dtos import RecurringSeries, SeriesUpdate, Transaction
from budget_recurring.domain.schedule import DEFAULT_MAX_DAYS_OVERDUE


@dataclass(frozen=True)
class ExecutionOptions:
    """Knobs for one run_due invocation."""

    dry_run: bool = False
    max_days_overdue: int = DEFAULT_MAX_DAYS_OVERDUE
    # Also fire due series whose auto_execute flag is off
    force_execute: bool = False

    def __post_init__(self) -> None:
        if self.max_days_overdue < 0:
            raise ValueError(f"max_days_overdue must be >= 0, got {self.max_days_overdue}")


@dataclass(frozen=True)
class ExecutedEntry:
    """A series that fired, with the transaction it produced."""

    series: RecurringSeries
    transaction: Transaction


@dataclass(frozen=True)
class FailureEntry:
    """A due series that could not fire."""

    series_id: UUID
    series_name: str
    error: str
    error_code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "series_id": str(self.series_id),
            "series_name": self.series_name,
            "error": self.error,
            "error_code": self.error_code,
        }


@dataclass(frozen=True)
class ExecutionSummary:
    total_processed: int = 0
    successful_executions: int = 0
    failed_executions: int = 0
    total_amount: Decimal = Decimal("0")
    skipped: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_processed": self.total_processed,
            "successful_executions": self.successful_executions,
            "failed_executions": self.failed_executions,
            "total_amount": str(self.total_amount),
            "skipped": self.skipped,
        }


@dataclass(frozen=True)
class ExecutionResult:
    """
    Outcome of one run_due batch.

    In a dry run ``executed`` and ``series_updates`` are empty while the
    summary still counts what would have fired.
    """

    executed: tuple[ExecutedEntry, ...] = ()
    failed: tuple[FailureEntry, ...] = ()
    summary: ExecutionSummary = field(default_factory=ExecutionSummary)
    series_updates: tuple[SeriesUpdate, ...] = ()
    dry_run: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "dry_run": self.dry_run,
            "executed": [
                {
                    "series_id": str(e.series.id),
                    "series_name": e.series.description,
                    "transaction_id": str(e.transaction.id),
                    "amount": str(e.transaction.amount),
                }
                for e in self.executed
            ],
            "failed": [f.to_dict() for f in self.failed],
            "summary": self.summary.to_dict(),
        }


@dataclass(frozen=True)
class ReconciliationReport:
    """Expected vs actual executions of one series."""

    series_id: UUID
    series_name: str
    expected_executions: int
    actual_executions: int
    expected_total: Decimal
    actual_total: Decimal
    difference: Decimal
    missed_payments: int
    success_rate: Decimal
    transaction_ids: tuple[UUID, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "series_id": str(self.series_id),
            "series_name": self.series_name,
            "expected_executions": self.expected_executions,
            "actual_executions": self.actual_executions,
            "expected_total": str(self.expected_total),
            "actual_total": str(self.actual_total),
            "difference": str(self.difference),
            "missed_payments": self.missed_payments,
            "success_rate": str(self.success_rate),
        }


@dataclass(frozen=True)
class MissedExecution:
    series: RecurringSeries
    missed_count: int
    report: ReconciliationReport | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "series_id": str(self.series.id),
            "series_name": self.series.description,
            "missed_count": self.missed_count,
        }
