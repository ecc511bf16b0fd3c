"""
Clock -- Injectable source of "now" for period stamps and due-date checks.

Responsibility:
    Services receive a Clock and never read the system time themselves, so
    "is this series due" and "what is today in the user's timezone" are
    answered from one value per call and tests can pin it.

Architecture position:
    Kernel > Domain.  SystemClock is the only place that reads real time.

Failure modes:
    - DeterministicClock raises ValueError on a naive datetime.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone, tzinfo

from budget_kernel.domain.values import local_date


class Clock(ABC):
    """
    Source of the current instant.

    Contract:
        ``now()`` returns a timezone-aware datetime.
    """

    @abstractmethod
    def now(self) -> datetime:
        ...

    def today(self, tz: tzinfo = timezone.utc) -> date:
        """Calendar date of ``now()`` as seen in ``tz``."""
        return local_date(self.now(), tz)


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Pinned clock for tests and replays.

    Stays on the same instant until moved with ``advance()`` or
    ``set_time()``.
    """

    def __init__(self, current: datetime | None = None):
        self._current = _require_aware(
            current or datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
        )

    def now(self) -> datetime:
        return self._current

    def set_time(self, current: datetime) -> None:
        self._current = _require_aware(current)

    def advance(self, *, days: int = 0, hours: int = 0, seconds: int = 0) -> datetime:
        """Move forward and return the new instant."""
        self._current += timedelta(days=days, hours=hours, seconds=seconds)
        return self._current


def _require_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        raise ValueError(f"Clock time must be timezone-aware, got {value!r}")
    return value
