"""
Pure domain layer.

This module contains pure data transfer objects and domain logic
with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

All domain objects are immutable and deterministic.
"""

from budget_kernel.domain.aggregation import (
    AggregateResult,
    PeriodTotals,
    TransactionAggregator,
    is_transfer_like,
)
from budget_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from budget_kernel.domain.dtos import (
    Budget,
    BudgetPeriod,
    BudgetType,
    DateRange,
    Frequency,
    PeriodDraft,
    PeriodUpdate,
    RecurringSeries,
    SeriesUpdate,
    Transaction,
    TransactionDraft,
    TransactionType,
)

__all__ = [
    "AggregateResult",
    "Budget",
    "BudgetPeriod",
    "BudgetType",
    "Clock",
    "DateRange",
    "DeterministicClock",
    "Frequency",
    "PeriodDraft",
    "PeriodTotals",
    "PeriodUpdate",
    "RecurringSeries",
    "SeriesUpdate",
    "SystemClock",
    "Transaction",
    "TransactionAggregator",
    "TransactionDraft",
    "TransactionType",
    "is_transfer_like",
]
