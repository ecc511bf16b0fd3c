"""ORM models backing the SQL Data Port."""

from budget_kernel.models.budget import BudgetModel
from budget_kernel.models.budget_period import BudgetPeriodModel
from budget_kernel.models.recurring_series import RecurringSeriesModel
from budget_kernel.models.transaction import TransactionModel

__all__ = [
    "BudgetModel",
    "BudgetPeriodModel",
    "RecurringSeriesModel",
    "TransactionModel",
]
