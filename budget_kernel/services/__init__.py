"""Kernel services: imperative shell over the Data Port."""

from budget_kernel.services.period_service import ClosePeriodResult, PeriodService

__all__ = ["ClosePeriodResult", "PeriodService"]
