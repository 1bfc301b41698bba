"""
Duration and comparison arithmetic between two dates.

Two families of results:
- Elapsed time (milliseconds, seconds, minutes, hours, days_between_exact):
  raw instant subtraction. Minutes and hours truncate toward zero.
  days_between_exact keeps the fraction and ignores calendars and DST.
- Calendar counts (days, months, years): whole units between the date-only
  projections of both dates, so the time of day and DST changes never shift
  the count.

All results are end minus start and may be negative.
"""
from datetime import datetime

from chronokit.core.utils.datetime_utils import add_days, to_local_date
from chronokit.core.utils.timezone_utils import MILLISECONDS_IN_A_DAY, ZoneLike, to_epoch_millis

MILLISECONDS_IN_A_SECOND = 1000
MILLISECONDS_IN_A_MINUTE = 60_000
MINUTES_IN_AN_HOUR = 60
MONTHS_IN_A_YEAR = 12


def _truncating_div(dividend: int, divisor: int) -> int:
    """Integer division rounding toward zero (-90 / 60 -> -1, not -2)."""
    quotient = abs(dividend) // abs(divisor)
    return quotient if (dividend >= 0) == (divisor > 0) else -quotient


# ============================================================================
# ELAPSED TIME
# ============================================================================

def milliseconds_between(start_date: datetime, end_date: datetime) -> int:
    return to_epoch_millis(end_date) - to_epoch_millis(start_date)


def seconds_between(start_date: datetime, end_date: datetime) -> int:
    return _truncating_div(milliseconds_between(start_date, end_date), MILLISECONDS_IN_A_SECOND)


def minutes_between(start_date: datetime, end_date: datetime) -> int:
    return _truncating_div(milliseconds_between(start_date, end_date), MILLISECONDS_IN_A_MINUTE)


def hours_between(start_date: datetime, end_date: datetime) -> int:
    return _truncating_div(minutes_between(start_date, end_date), MINUTES_IN_AN_HOUR)


def days_between_exact(start_date: datetime, end_date: datetime) -> float:
    """
    Elapsed days including the fraction (36 hours -> 1.5).

    Not calendar-aware: a day across a DST change counts as 23/24 or 25/24.
    Use days_between() for calendar days.
    """
    return days_between_exact_millis(to_epoch_millis(start_date), to_epoch_millis(end_date))


def days_between_exact_millis(start_millis: int, end_millis: int) -> float:
    """days_between_exact() for raw epoch-millisecond instants."""
    return (end_millis - start_millis) / MILLISECONDS_IN_A_DAY


# ============================================================================
# CALENDAR COUNTS
# ============================================================================

def days_between(start_date: datetime, end_date: datetime, tz: ZoneLike = None) -> int:
    """
    Calendar days between the dates of two datetimes (time of day ignored).

    Examples:
        >>> days_between(datetime(2024, 1, 1, 23, 0, tzinfo=timezone.utc), datetime(2024, 1, 2, 1, 0, tzinfo=timezone.utc), tz="UTC")
        1
    """
    return (to_local_date(end_date, tz) - to_local_date(start_date, tz)).days


def days_spanned(start_date: datetime, end_date: datetime, tz: ZoneLike = None) -> int:
    """
    Calendar days covered by a span, counting both ends.

    A booking from the 1st to the 10th spans 10 days.
    """
    return days_between(start_date, add_days(end_date, 1, tz=tz), tz=tz)


def months_between(start_date: datetime, end_date: datetime, tz: ZoneLike = None) -> int:
    """
    Whole calendar months between the dates of two datetimes.

    A month is complete once the day of month is reached again:
    January 31st to February 29th is 0 months, January 31st to March 1st is 1.
    """
    start = to_local_date(start_date, tz)
    end = to_local_date(end_date, tz)
    start_packed = (start.year * MONTHS_IN_A_YEAR + start.month - 1) * 32 + start.day
    end_packed = (end.year * MONTHS_IN_A_YEAR + end.month - 1) * 32 + end.day
    return _truncating_div(end_packed - start_packed, 32)


def years_between(start_date: datetime, end_date: datetime, tz: ZoneLike = None) -> int:
    """Whole calendar years between the dates of two datetimes (29 Feb to 28 Feb next year is 0)."""
    return _truncating_div(months_between(start_date, end_date, tz=tz), MONTHS_IN_A_YEAR)
