"""
Values -- Money and date-range primitives.

Responsibility:
    Decimal-safe money coercion and rounding, plus the day-boundary and
    inclusive-containment helpers every date window in the core is built
    from.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  Imported by the
    aggregator, the period service and the recurring engine.

Invariants enforced:
    - Monetary amounts are Decimal, never float.
    - round_money() is the ONLY sanctioned rounding function; it rounds
      half-up.
    - Date windows are inclusive on both ends.  A plain ``date`` bound is
      promoted to the start (lower bound) of that day in the given
      timezone; closing windows use ``end_of_day`` explicitly.

Failure modes:
    - TypeError when a float is passed where money is expected.
    - ValueError when a string is not a valid decimal number.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, tzinfo
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from zoneinfo import ZoneInfo

MONEY_DECIMAL_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_UP
ZERO = Decimal("0")

UTC = ZoneInfo("UTC")


def to_decimal(value: Decimal | int | str) -> Decimal:
    """
    Coerce a monetary input to Decimal.

    Floats are rejected: binary floating point cannot represent most cent
    values exactly, and silently accepting them is how drift starts.

    Raises:
        TypeError: If value is a float or an unsupported type.
        ValueError: If a string is not a valid number.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError(f"Money must not be constructed from {type(value).__name__}: {value!r}")
    if isinstance(value, (int, str)):
        try:
            return Decimal(str(value).strip())
        except InvalidOperation as e:
            raise ValueError(f"Invalid amount: {value!r}") from e
    raise TypeError(f"Unsupported money type: {type(value).__name__}")


def round_money(
    value: Decimal,
    decimal_places: int = MONEY_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to the given decimal places (half-up).

    Args:
        value: The Decimal value to round.
        decimal_places: Number of decimal places to round to.
        rounding: Rounding mode (default: ROUND_HALF_UP).

    Returns:
        Rounded Decimal value.
    """
    quantize_str = "0." + "0" * decimal_places if decimal_places > 0 else "1"
    return value.quantize(Decimal(quantize_str), rounding=rounding)


# ---------------------------------------------------------------------------
# Date boundaries
# ---------------------------------------------------------------------------


def resolve_timezone(name: str | tzinfo | None) -> tzinfo:
    """Return a tzinfo for an IANA name (None -> UTC)."""
    if name is None:
        return UTC
    if isinstance(name, tzinfo):
        return name
    return ZoneInfo(name)


def start_of_day(day: date, tz: tzinfo = UTC) -> datetime:
    """First instant of ``day`` in ``tz``."""
    return datetime.combine(day, time.min, tzinfo=tz)


def end_of_day(day: date, tz: tzinfo = UTC) -> datetime:
    """Last instant of ``day`` in ``tz`` (23:59:59.999999)."""
    return datetime.combine(day, time.max, tzinfo=tz)


def as_datetime(value: date | datetime, tz: tzinfo = UTC) -> datetime:
    """
    Normalize a date or datetime to an aware datetime.

    Plain dates become the start of that day in ``tz``; naive datetimes
    are interpreted in ``tz``; aware datetimes pass through unchanged.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=tz)
        return value
    return start_of_day(value, tz)


def within_range(
    value: date | datetime,
    start: date | datetime,
    end: date | datetime,
    tz: tzinfo = UTC,
) -> bool:
    """Inclusive containment check: start <= value <= end."""
    return as_datetime(start, tz) <= as_datetime(value, tz) <= as_datetime(end, tz)


def local_date(value: date | datetime, tz: tzinfo = UTC) -> date:
    """Calendar date of ``value`` as seen in ``tz``."""
    if isinstance(value, datetime):
        return as_datetime(value, tz).astimezone(tz).date()
    return value


def next_day(day: date) -> date:
    """The calendar day after ``day``."""
    return day + timedelta(days=1)
