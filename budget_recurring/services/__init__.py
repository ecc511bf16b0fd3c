"""Recurring execution and reconciliation services."""

from budget_recurring.services.executor import RecurringExecutor
from budget_recurring.services.reconciliation import ReconciliationService

__all__ = ["ReconciliationService", "RecurringExecutor"]
