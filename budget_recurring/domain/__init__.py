"""
budget_recurring.domain -- Pure schedule functions and result types.

ZERO I/O.  All types are frozen dataclasses.
"""

from budget_recurring.domain.schedule import (
    DEFAULT_MAX_DAYS_OVERDUE,
    add_months,
    days_until_due,
    is_due,
    next_due,
    parse_frequency,
)
from budget_recurring.domain.types import (
    ExecutedEntry,
    ExecutionOptions,
    ExecutionResult,
    ExecutionSummary,
    FailureEntry,
    MissedExecution,
    ReconciliationReport,
)

__all__ = [
    "DEFAULT_MAX_DAYS_OVERDUE",
    "ExecutedEntry",
    "ExecutionOptions",
    "ExecutionResult",
    "ExecutionSummary",
    "FailureEntry",
    "MissedExecution",
    "ReconciliationReport",
    "add_months",
    "days_until_due",
    "is_due",
    "next_due",
    "parse_frequency",
]
