"""
budget_recurring -- Recurring transaction execution engine.

Selects due recurring series, materializes their transactions through the
Data Port with per-series isolation, advances due dates and reconciles
expected against actual executions.

Architecture:
    budget_recurring/ depends on budget_kernel (domain, ports, exceptions,
    logging).  Nothing in budget_kernel imports from budget_recurring.
"""
