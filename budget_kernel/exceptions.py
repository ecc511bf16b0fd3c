"""
Typed Exception Hierarchy for the Budget Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the core (web handlers, scheduled jobs, the CLI) must react to
errors precisely. Every error therefore:
  1. Has a TYPED exception class (catch by type, not message)
  2. Has a CODE attribute (machine-readable, API-safe)
  3. Carries structured DATA (not just a message string)

Example:
    try:
        periods.start_period(user_id, start_date)
    except ActivePeriodExistsError as e:
        return {"error": e.code, "period_id": str(e.period_id)}

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    BudgetCoreError (base)
    |
    +-- ConflictError
    |   +-- ActivePeriodExistsError
    |
    +-- NotFoundError
    |   +-- ActivePeriodNotFoundError
    |   +-- PeriodNotFoundError
    |   +-- SeriesNotFoundError
    |
    +-- InvalidRangeError
    |
    +-- UnsupportedFrequencyError
    |
    +-- SeriesInactiveError
    |   +-- SeriesPausedError
    |
    +-- PersistenceError
        +-- PortUnavailableError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Code                     | When Raised
-------------------------|------------------------------------------------
ACTIVE_PERIOD_EXISTS     | start_period while a period is still open
ACTIVE_PERIOD_NOT_FOUND  | close_period with no open period
PERIOD_NOT_FOUND         | Period id does not exist
SERIES_NOT_FOUND         | Recurring series id does not exist
INVALID_RANGE            | Dates out of order (start after end, overlap)
UNSUPPORTED_FREQUENCY    | Recurring frequency with no interval rule
SERIES_INACTIVE          | Deactivated series selected for execution
SERIES_PAUSED            | Paused series selected for execution
PERSISTENCE_ERROR        | Data Port read/write failed
PORT_UNAVAILABLE         | Data Port unreachable (aborts batches)

===============================================================================
"""

from datetime import date
from uuid import UUID


class BudgetCoreError(Exception):
    """
    Base exception for all budget core errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "BUDGET_CORE_ERROR"


# Conflict exceptions


class ConflictError(BudgetCoreError):
    """Operation conflicts with current state."""

    code: str = "CONFLICT"


class ActivePeriodExistsError(ConflictError):
    """User already has an open budget period."""

    code: str = "ACTIVE_PERIOD_EXISTS"

    def __init__(self, user_id: UUID, period_id: UUID):
        self.user_id = user_id
        self.period_id = period_id
        super().__init__(
            f"User {user_id} already has an active budget period {period_id}"
        )


# Not-found exceptions


class NotFoundError(BudgetCoreError):
    """Referenced entity does not exist."""

    code: str = "NOT_FOUND"


class ActivePeriodNotFoundError(NotFoundError):
    """User has no open budget period to close."""

    code: str = "ACTIVE_PERIOD_NOT_FOUND"

    def __init__(self, user_id: UUID):
        self.user_id = user_id
        super().__init__(f"No active budget period for user {user_id}")


class PeriodNotFoundError(NotFoundError):
    """Budget period with given ID was not found."""

    code: str = "PERIOD_NOT_FOUND"

    def __init__(self, period_id: UUID):
        self.period_id = period_id
        super().__init__(f"Budget period not found: {period_id}")


class SeriesNotFoundError(NotFoundError):
    """Recurring series with given ID was not found."""

    code: str = "SERIES_NOT_FOUND"

    def __init__(self, series_id: UUID):
        self.series_id = series_id
        super().__init__(f"Recurring series not found: {series_id}")


# Validation exceptions


class InvalidRangeError(BudgetCoreError):
    """Date range bounds are out of order."""

    code: str = "INVALID_RANGE"

    def __init__(self, start: date, end: date, reason: str):
        self.start = start
        self.end = end
        self.reason = reason
        super().__init__(f"Invalid date range {start} .. {end}: {reason}")


class UnsupportedFrequencyError(BudgetCoreError):
    """Recurring frequency has no interval rule."""

    code: str = "UNSUPPORTED_FREQUENCY"

    def __init__(self, frequency: str):
        self.frequency = frequency
        super().__init__(f"Unsupported frequency: {frequency}")


class SeriesInactiveError(BudgetCoreError):
    """
    Series was selected for execution but is deactivated.

    Snapshots handed to the engine may be stale; the engine re-checks
    ``is_active`` before firing and records this as a per-series failure.
    """

    code: str = "SERIES_INACTIVE"

    def __init__(self, series_id: UUID):
        self.series_id = series_id
        super().__init__("inactive")


class SeriesPausedError(SeriesInactiveError):
    """Series is active but paused.  Handled exactly like a deactivated one."""

    code: str = "SERIES_PAUSED"

    def __init__(self, series_id: UUID):
        self.series_id = series_id
        BudgetCoreError.__init__(self, "paused")


# Persistence exceptions


class PersistenceError(BudgetCoreError):
    """Opaque wrapper for Data Port failures."""

    code: str = "PERSISTENCE_ERROR"

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Data port operation '{operation}' failed: {reason}")


class PortUnavailableError(PersistenceError):
    """
    Data Port cannot be reached at all.

    Unlike a single failed write, this aborts a whole execution batch:
    partial progress without a reliable commit log would corrupt
    reconciliation.
    """

    code: str = "PORT_UNAVAILABLE"
