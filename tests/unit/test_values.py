"""
Unit tests for money and day-boundary primitives.

Verifies:
- Float constructor prohibition
- Half-up rounding
- Inclusive window containment with date and datetime bounds
- Timezone-aware day boundaries
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from budget_kernel.domain.values import (
    as_datetime,
    end_of_day,
    local_date,
    next_day,
    resolve_timezone,
    round_money,
    start_of_day,
    to_decimal,
    within_range,
)

ROME = ZoneInfo("Europe/Rome")


class TestToDecimal:
    """Tests for to_decimal coercion."""

    def test_string(self):
        assert to_decimal("100.50") == Decimal("100.50")

    def test_int(self):
        assert to_decimal(42) == Decimal("42")

    def test_decimal_passthrough(self):
        value = Decimal("1.23")
        assert to_decimal(value) is value

    def test_float_rejected(self):
        with pytest.raises(TypeError):
            to_decimal(0.1)

    def test_bool_rejected(self):
        with pytest.raises(TypeError):
            to_decimal(True)

    def test_invalid_string_raises(self):
        with pytest.raises(ValueError):
            to_decimal("not a number")


class TestRoundMoney:
    """Rounding is half-up to two places."""

    def test_half_up(self):
        assert round_money(Decimal("2.345")) == Decimal("2.35")

    def test_half_up_negative(self):
        assert round_money(Decimal("-2.345")) == Decimal("-2.35")

    def test_below_half(self):
        assert round_money(Decimal("2.344")) == Decimal("2.34")

    def test_zero_places(self):
        assert round_money(Decimal("2.5"), decimal_places=0) == Decimal("3")

    def test_pads_to_two_places(self):
        assert str(round_money(Decimal("7"))) == "7.00"


class TestDayBoundaries:
    """Start/end of day helpers."""

    def test_start_of_day(self):
        assert start_of_day(date(2025, 1, 31)) == datetime(2025, 1, 31, tzinfo=timezone.utc)

    def test_end_of_day_is_last_microsecond(self):
        end = end_of_day(date(2025, 1, 31))
        assert (end.hour, end.minute, end.second, end.microsecond) == (23, 59, 59, 999999)

    def test_timezone_respected(self):
        start = start_of_day(date(2025, 7, 1), ROME)
        assert start.astimezone(timezone.utc) == datetime(2025, 6, 30, 22, tzinfo=timezone.utc)

    def test_as_datetime_promotes_date(self):
        assert as_datetime(date(2025, 1, 1)) == datetime(2025, 1, 1, tzinfo=timezone.utc)

    def test_as_datetime_tags_naive(self):
        assert as_datetime(datetime(2025, 1, 1, 8)).tzinfo is not None

    def test_local_date_crosses_midnight(self):
        # 23:30 UTC on Jan 31 is already Feb 1 in Rome
        instant = datetime(2025, 1, 31, 23, 30, tzinfo=timezone.utc)
        assert local_date(instant, ROME) == date(2025, 2, 1)

    def test_next_day_month_rollover(self):
        assert next_day(date(2025, 1, 31)) == date(2025, 2, 1)

    def test_resolve_timezone(self):
        assert resolve_timezone(None) == ZoneInfo("UTC")
        assert resolve_timezone("Europe/Rome") == ROME
        assert resolve_timezone(ROME) is ROME


class TestWithinRange:
    """Windows are inclusive on both ends."""

    def test_end_of_day_bound_includes_late_evening(self):
        late = datetime(2025, 1, 31, 23, 59, tzinfo=timezone.utc)
        assert within_range(late, date(2025, 1, 1), end_of_day(date(2025, 1, 31)))

    def test_plain_date_end_excludes_later_same_day(self):
        late = datetime(2025, 1, 31, 10, tzinfo=timezone.utc)
        assert not within_range(late, date(2025, 1, 1), date(2025, 1, 31))

    def test_start_inclusive(self):
        assert within_range(date(2025, 1, 1), date(2025, 1, 1), date(2025, 1, 31))

    def test_before_start(self):
        early = datetime(2024, 12, 31, 23, 59, tzinfo=timezone.utc)
        assert not within_range(early, date(2025, 1, 1), date(2025, 1, 31))
