"""
budget_services -- host-facing facade of the budget core.

``BudgetCore`` is the canonical entry point: build it with
``BudgetCore.from_session(session)`` or over any DataPort.
"""

from budget_services.core import BudgetCore, OperationError, PeriodOperationResult

__all__ = ["BudgetCore", "OperationError", "PeriodOperationResult"]
