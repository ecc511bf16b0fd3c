"""Tests for the injectable clocks."""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from budget_kernel.domain.clock import DeterministicClock, SystemClock


class TestDeterministicClock:

    def test_pinned_until_moved(self):
        instant = datetime(2025, 3, 1, 8, 0, tzinfo=timezone.utc)
        clock = DeterministicClock(instant)

        assert clock.now() == instant
        assert clock.now() == instant

    def test_advance(self):
        clock = DeterministicClock(datetime(2025, 3, 1, tzinfo=timezone.utc))

        moved = clock.advance(days=1, hours=2)

        assert moved == datetime(2025, 3, 2, 2, 0, tzinfo=timezone.utc)
        assert clock.now() == moved

    def test_rejects_naive_time(self):
        with pytest.raises(ValueError):
            DeterministicClock(datetime(2025, 3, 1))

        clock = DeterministicClock()
        with pytest.raises(ValueError):
            clock.set_time(datetime(2025, 3, 1))

    def test_today_in_timezone(self):
        # 23:30 UTC on Jan 31 is already Feb 1 in Rome
        clock = DeterministicClock(datetime(2025, 1, 31, 23, 30, tzinfo=timezone.utc))

        assert clock.today() == date(2025, 1, 31)
        assert clock.today(ZoneInfo("Europe/Rome")) == date(2025, 2, 1)


def test_system_clock_is_aware():
    assert SystemClock().now().tzinfo is not None
