"""
budget_kernel.domain.aggregation -- Net spend per category over a date window.

Responsibility:
    Compute how much of a budget's categories was spent in a window:
    expenses minus income (refunds) per category, transfers excluded.
    Also folds per-budget aggregates into period totals (spent, saved,
    per-category breakdown) for period close and preview.

Architecture position:
    Kernel > Domain -- pure calculation layer, zero I/O.
    Consumed by PeriodService.

Invariants enforced:
    - Purity: identical inputs produce identical outputs; no clock access,
      no I/O.  Safe to call concurrently.
    - Transfer-like rows never count: type TRANSFER, the reserved transfer
      category, or a populated ``to_account_id`` -- any one excludes.
    - Rounding happens once, on the aggregate, half-up to 2 places.
    - total_saved is floored at zero.

Failure modes:
    - None for empty inputs: no categories or no transactions yields a zero
      total and an empty breakdown.

Usage:
    from budget_kernel.domain.aggregation import TransactionAggregator

    aggregator = TransactionAggregator()
    result = aggregator.aggregate(transactions, {"groceries"}, start, end)
    print(result.total_spent)       # Decimal("80.00")
    print(result.per_category)      # {"groceries": Decimal("80.00")}
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, tzinfo
from decimal import Decimal

from budget_kernel.domain.dtos import Budget, Transaction, TransactionType
from budget_kernel.domain.values import UTC, ZERO, round_money, within_range
from budget_kernel.logging_config import get_logger

logger = get_logger("domain.aggregation")

DEFAULT_TRANSFER_CATEGORY = "trasferimento"

_BUDGET_TYPES = (TransactionType.EXPENSE, TransactionType.INCOME)


@dataclass(frozen=True)
class AggregateResult:
    """Net spend over one category set."""

    total_spent: Decimal
    per_category: dict[str, Decimal] = field(default_factory=dict)


@dataclass(frozen=True)
class PeriodTotals:
    """Totals of all of a user's budgets over a period window."""

    total_budget: Decimal
    total_spent: Decimal
    total_saved: Decimal
    category_spending: dict[str, Decimal] = field(default_factory=dict)


def is_transfer_like(
    transaction: Transaction,
    transfer_category: str = DEFAULT_TRANSFER_CATEGORY,
) -> bool:
    """True when the row moves money between the user's own accounts."""
    return (
        transaction.type == TransactionType.TRANSFER
        or transaction.category == transfer_category
        or transaction.to_account_id is not None
    )


class TransactionAggregator:
    """
    Pure function calculator for budget spend.

    Contract:
        No I/O, no database access, fully deterministic.
    Guarantees:
        - Per-category net = sum(expense) - sum(income).
        - ``total_spent`` = sum of per-category nets, rounded once.
    """

    def __init__(
        self,
        transfer_category: str = DEFAULT_TRANSFER_CATEGORY,
        tz: tzinfo = UTC,
    ):
        self._transfer_category = transfer_category
        self._tz = tz

    def aggregate(
        self,
        transactions: Iterable[Transaction],
        categories: Iterable[str],
        start: date | datetime,
        end: date | datetime,
    ) -> AggregateResult:
        """
        Net spend of ``categories`` within ``[start, end]``.

        Args:
            transactions: Candidate rows (any user filtering is the caller's).
            categories: Category keys to include.
            start: Inclusive lower bound.
            end: Inclusive upper bound.  Pass an end-of-day datetime to
                include the whole last day.

        Returns:
            AggregateResult with the rounded total and unrounded per-category
            nets.
        """
        wanted = frozenset(categories)
        if not wanted:
            return AggregateResult(total_spent=round_money(ZERO))

        nets: dict[str, Decimal] = {}
        for tx in transactions:
            if not self._counts(tx, wanted, start, end):
                continue
            signed = tx.amount if tx.type == TransactionType.EXPENSE else -tx.amount
            nets[tx.category] = nets.get(tx.category, ZERO) + signed

        total = round_money(sum(nets.values(), ZERO))
        return AggregateResult(total_spent=total, per_category=nets)

    def period_totals(
        self,
        transactions: Sequence[Transaction],
        budgets: Iterable[Budget],
        start: date | datetime,
        end: date | datetime,
    ) -> PeriodTotals:
        """
        Fold every budget's aggregate into period totals.

        total_saved = max(0, round(sum(budget.amount) - total_spent)).
        """
        total_budget = ZERO
        total_spent = ZERO
        category_spending: dict[str, Decimal] = {}

        for budget in budgets:
            total_budget += budget.amount
            result = self.aggregate(transactions, budget.categories, start, end)
            total_spent += result.total_spent
            for category, net in result.per_category.items():
                category_spending[category] = category_spending.get(category, ZERO) + net

        total_spent = round_money(total_spent)
        total_saved = max(ZERO, round_money(total_budget - total_spent))

        logger.debug(
            "period_totals_computed",
            extra={
                "total_budget": str(total_budget),
                "total_spent": str(total_spent),
                "total_saved": str(total_saved),
                "categories": len(category_spending),
            },
        )

        return PeriodTotals(
            total_budget=round_money(total_budget),
            total_spent=total_spent,
            total_saved=round_money(total_saved),
            category_spending={k: round_money(v) for k, v in category_spending.items()},
        )

    def _counts(
        self,
        tx: Transaction,
        categories: frozenset[str],
        start: date | datetime,
        end: date | datetime,
    ) -> bool:
        if tx.type not in _BUDGET_TYPES:
            return False
        if tx.category not in categories:
            return False
        if is_transfer_like(tx, self._transfer_category):
            return False
        return within_range(tx.date, start, end, self._tz)
