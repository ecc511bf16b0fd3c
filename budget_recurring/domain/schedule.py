"""
Pure due-date functions for recurring series.

Contract:
    ``next_due()``, ``days_until_due()`` and ``is_due()`` are PURE -- no
    I/O, no clock access.  The executor passes ``now`` in.

Architecture: budget_recurring/domain.  ZERO I/O.

Invariants enforced:
    - next_due(d, f) > d for every supported frequency.
    - Monthly steps clamp to the last day of the target month
      (2025-01-31 -> 2025-02-28); yearly steps move Feb 29 to Feb 28.
    - A series is due when ceil((start_of_day(due_date) - now) / 1 day)
      lies in [-max_days_overdue, 0].
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta, tzinfo

from budget_kernel.domain.dtos import Frequency
from budget_kernel.domain.values import UTC, start_of_day
from budget_kernel.exceptions import UnsupportedFrequencyError

DEFAULT_MAX_DAYS_OVERDUE = 7

_ONE_DAY = timedelta(days=1)

_FIXED_STEPS: dict[Frequency, timedelta] = {
    Frequency.WEEKLY: timedelta(days=7),
    Frequency.BIWEEKLY: timedelta(days=14),
}


def parse_frequency(frequency: Frequency | str) -> Frequency:
    """Coerce a stored frequency value.

    Raises:
        UnsupportedFrequencyError: No interval rule for the value.
    """
    if isinstance(frequency, Frequency):
        return frequency
    try:
        return Frequency(str(frequency).lower())
    except ValueError:
        raise UnsupportedFrequencyError(str(frequency)) from None


def add_months(day: date, months: int) -> date:
    """Shift by calendar months, clamping to the target month's last day."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def next_due(current_due: date, frequency: Frequency | str) -> date:
    """
    The occurrence after ``current_due``.

    Raises:
        UnsupportedFrequencyError: Unknown frequency.
    """
    freq = parse_frequency(frequency)
    step = _FIXED_STEPS.get(freq)
    if step is not None:
        return current_due + step
    if freq == Frequency.MONTHLY:
        return add_months(current_due, 1)
    if freq == Frequency.YEARLY:
        return add_months(current_due, 12)
    raise UnsupportedFrequencyError(freq.value)


def days_until_due(due_date: date, now: datetime, tz: tzinfo = UTC) -> int:
    """Whole days from ``now`` to the start of ``due_date``, rounded up.

    Negative when overdue; 0 on the due day itself.
    """
    delta = start_of_day(due_date, tz) - now
    days, remainder = divmod(delta, _ONE_DAY)
    return days + 1 if remainder else days


def is_due(
    due_date: date,
    now: datetime,
    max_days_overdue: int = DEFAULT_MAX_DAYS_OVERDUE,
    tz: tzinfo = UTC,
) -> bool:
    """True when the series should fire at ``now``."""
    return -max_days_overdue <= days_until_due(due_date, now, tz) <= 0
