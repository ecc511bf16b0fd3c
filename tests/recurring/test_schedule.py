"""
Tests for the pure due-date functions.

Verifies:
- next_due per frequency, including month-end clamping and Feb 29
- Unknown frequencies raise UnsupportedFrequencyError
- days_until_due rounds up and is_due honours the overdue window
"""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from budget_kernel.domain.dtos import Frequency
from budget_kernel.exceptions import UnsupportedFrequencyError
from budget_recurring.domain.schedule import (
    add_months,
    days_until_due,
    is_due,
    next_due,
    parse_frequency,
)

NOON = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


class TestNextDue:
    """Interval rules."""

    def test_weekly(self):
        assert next_due(date(2025, 1, 1), Frequency.WEEKLY) == date(2025, 1, 8)

    def test_biweekly(self):
        assert next_due(date(2025, 1, 1), Frequency.BIWEEKLY) == date(2025, 1, 15)

    def test_monthly(self):
        assert next_due(date(2025, 1, 15), Frequency.MONTHLY) == date(2025, 2, 15)

    def test_monthly_clamps_to_month_end(self):
        assert next_due(date(2025, 1, 31), Frequency.MONTHLY) == date(2025, 2, 28)

    def test_monthly_clamps_leap_year(self):
        assert next_due(date(2024, 1, 31), Frequency.MONTHLY) == date(2024, 2, 29)

    def test_monthly_december_rolls_year(self):
        assert next_due(date(2024, 12, 10), Frequency.MONTHLY) == date(2025, 1, 10)

    def test_yearly(self):
        assert next_due(date(2025, 3, 1), Frequency.YEARLY) == date(2026, 3, 1)

    def test_yearly_from_leap_day(self):
        assert next_due(date(2024, 2, 29), Frequency.YEARLY) == date(2025, 2, 28)

    def test_accepts_stored_string(self):
        assert next_due(date(2025, 1, 1), "weekly") == date(2025, 1, 8)

    def test_unknown_frequency(self):
        with pytest.raises(UnsupportedFrequencyError) as exc_info:
            next_due(date(2025, 1, 1), "fortnightly-ish")
        assert exc_info.value.code == "UNSUPPORTED_FREQUENCY"
        assert exc_info.value.frequency == "fortnightly-ish"

    def test_consecutive_monthly_chain(self):
        due = date(2025, 1, 31)
        chain = []
        for _ in range(3):
            due = next_due(due, Frequency.MONTHLY)
            chain.append(due)
        assert chain == [date(2025, 2, 28), date(2025, 3, 28), date(2025, 4, 28)]


class TestHelpers:

    def test_add_months_negative(self):
        assert add_months(date(2025, 3, 31), -1) == date(2025, 2, 28)

    def test_parse_frequency_case_insensitive(self):
        assert parse_frequency("MONTHLY") is Frequency.MONTHLY


class TestDueSelection:
    """ceil((start_of_day(due) - now) / 1 day) in [-max_days_overdue, 0]."""

    def test_due_today(self):
        assert days_until_due(date(2025, 1, 15), NOON) == 0
        assert is_due(date(2025, 1, 15), NOON)

    def test_due_tomorrow_not_yet(self):
        assert days_until_due(date(2025, 1, 16), NOON) == 1
        assert not is_due(date(2025, 1, 16), NOON)

    def test_overdue_within_window(self):
        assert days_until_due(date(2025, 1, 8), NOON) == -7
        assert is_due(date(2025, 1, 8), NOON, max_days_overdue=7)

    def test_overdue_beyond_window(self):
        assert days_until_due(date(2025, 1, 7), NOON) == -8
        assert not is_due(date(2025, 1, 7), NOON, max_days_overdue=7)

    def test_zero_window_only_today(self):
        assert is_due(date(2025, 1, 15), NOON, max_days_overdue=0)
        assert not is_due(date(2025, 1, 14), NOON, max_days_overdue=0)

    def test_exact_midnight(self):
        midnight = datetime(2025, 1, 15, 0, 0, tzinfo=timezone.utc)
        assert days_until_due(date(2025, 1, 15), midnight) == 0
        assert days_until_due(date(2025, 1, 16), midnight) == 1

    def test_timezone_of_due_day(self):
        # 23:30 UTC on Jan 14 is already Jan 15 in Rome
        late = datetime(2025, 1, 14, 23, 30, tzinfo=timezone.utc)
        rome = ZoneInfo("Europe/Rome")
        assert not is_due(date(2025, 1, 15), late)
        assert is_due(date(2025, 1, 15), late, tz=rome)
