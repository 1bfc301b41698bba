"""
Date and time utilities for chronokit.

Stateless helpers over aware datetimes: composing dates from calendar fields,
resolving canonical instants (start/end of day or year), computing month
boundaries, reading fields, calendar arithmetic and range checks.

Conventions:
- Months are zero-based (January = 0, December = 11), days are one-based.
- Day of week is one-based starting on Sunday (Sunday = 1, Saturday = 7).
- Functions return new datetimes. The few that mutate take a MutableDate and
  say so in their name (..._on_date, ..._in_place, set_month_boundaries).
- Every zone-sensitive function accepts ``tz`` (see timezone_utils) and every
  "now"-dependent function accepts ``clock`` (see clock).
"""
from datetime import date as date_type, datetime, timedelta
from typing import Optional

import structlog

from chronokit.core.schemas.dates import MutableDate, TimeEvent
from chronokit.core.utils.clock import Clock, get_clock
from chronokit.core.utils.date_formats import DateFormatter, Formatter, MINUTES_IN_AN_HOUR
from chronokit.core.utils.timezone_utils import (
    ZoneLike,
    compose_date_time,
    from_epoch_millis,
    localize,
    now_in_zone,
    to_epoch_millis,
    to_zone,
    wall_date,
    )

logger = structlog.get_logger(__name__)

DAYS_IN_A_WEEK = 7
MILLISECONDS_IN_A_MINUTE = 60_000


def utcnow(clock: Optional[Clock] = None) -> datetime:
    """
    Get current UTC datetime with timezone info.

    Returns:
        datetime: Current datetime in UTC with tzinfo set to timezone.utc

    Note:
        Always use this function (or the clock argument) instead of
        datetime.now() so tests can freeze time.
    """
    return get_clock(clock).now()


# ============================================================================
# FIELD COMPOSITION
# ============================================================================

def set_date_time(
    year: int,
    month: int,
    day: int,
    hour: int = 0,
    minute: int = 0,
    seconds: int = 0,
    milliseconds: int = 0,
    tz: ZoneLike = None,
    ) -> datetime:
    """
    Build a date from calendar fields; fields not given are zero.

    Out-of-range values roll over into the neighbouring unit (month 12 is
    January of the next year, day 0 is the last day of the previous month).

    Args:
        year: Absolute year
        month: Zero-based month
        day: One-based day of month
        hour: Hour of day (0-23)
        minute: Minute
        seconds: Second
        milliseconds: Millisecond
        tz: Zone the fields are expressed in

    Returns:
        Aware datetime
    """
    return compose_date_time(year, month, day, hour, minute, seconds, milliseconds, tz=tz)


def set_date(year: int, month: int, day: int, tz: ZoneLike = None) -> datetime:
    """Midnight at the start of year/month/day (month zero-based)."""
    return set_date_time(year, month, day, tz=tz)


def set_time(
    date: datetime,
    hours: int,
    minutes: int,
    seconds: int = 0,
    milliseconds: int = 0,
    tz: ZoneLike = None,
    ) -> datetime:
    """
    Same calendar date as ``date`` with the time of day replaced.

    Milliseconds are applied on top of the composed second, so a negative
    value borrows from it: set_time(d, 0, 0, 0, -1) is 23:59:59.999 of the
    day before ``d``. The END_OF_DAY and END_OF_YEAR events rely on this.

    Examples:
        >>> set_time(datetime(2024, 3, 10, 15, 45, tzinfo=timezone.utc), 9, 30, tz="UTC")
        datetime.datetime(2024, 3, 10, 9, 30, tzinfo=zoneinfo.ZoneInfo(key='UTC'))
    """
    local = to_zone(date, tz)
    return set_date_time(local.year, local.month - 1, local.day, hours, minutes, seconds, milliseconds, tz=tz)


def set_time_from(date: datetime, date_with_time: datetime, copy_seconds: bool = False, tz: ZoneLike = None) -> datetime:
    """
    Same calendar date as ``date`` with the hour and minute of ``date_with_time``.

    Seconds are copied only when ``copy_seconds`` is True; milliseconds are zeroed.
    """
    seconds = get_seconds(date_with_time, tz) if copy_seconds else 0
    return set_time(date, get_hours(date_with_time, tz), get_minutes(date_with_time, tz), seconds, 0, tz=tz)


def set_time_on_date(
    target: MutableDate,
    hours: int,
    minutes: int,
    seconds: int = 0,
    milliseconds: int = 0,
    tz: ZoneLike = None,
    ) -> None:
    """In-place counterpart of set_time(): overwrite the time of day stored in ``target``."""
    target.assign(set_time(target.to_datetime(tz), hours, minutes, seconds, milliseconds, tz=tz))


def time_on_dummy_date(hours: int, minutes: int, tz: ZoneLike = None) -> datetime:
    """A time of day placed on the epoch date (1970-01-01 as seen in the zone)."""
    return set_time(from_epoch_millis(0, tz), hours, minutes, 0, 0, tz=tz)


def time_on_dummy_date_from(date_with_time: Optional[datetime], tz: ZoneLike = None) -> Optional[datetime]:
    """Hour and minute of a date placed on the epoch date; None when no date is given."""
    if date_with_time is None:
        return None
    return time_on_dummy_date(get_hours(date_with_time, tz), get_minutes(date_with_time, tz), tz=tz)


def parse_time_on_dummy_date(time_string: Optional[str], tz: ZoneLike = None) -> Optional[datetime]:
    """
    Parse HH:mm text onto the epoch date; None when no text is given.

    Raises:
        DateParseError: If the text is not HH:mm
    """
    if time_string is None:
        return None
    return time_on_dummy_date_from(Formatter.ISO_8601_TIME_ONLY.with_zone(tz).parse(time_string), tz=tz)


# ============================================================================
# TIME EVENTS
# ============================================================================

def set_time_event(date: datetime, time_event: TimeEvent, tz: ZoneLike = None) -> datetime:
    """
    Resolve a canonical instant relative to ``date``.

    - START_OF_YEAR: January 1st of the date's year, 00:00:00.000
    - START_OF_DAY: the date at 00:00:00.000
    - END_OF_DAY: one millisecond before the start of the next day (23:59:59.999)
    - END_OF_YEAR: one millisecond before January 1st of the next year
    - ONE_WEEK_AGO: start of day, seven calendar days earlier

    Anything that is not a TimeEvent leaves the date unchanged.

    Args:
        date: Base date
        time_event: Instant to resolve
        tz: Zone the day and year boundaries are taken in

    Returns:
        Resolved datetime (or ``date`` itself for an unrecognized event)
    """
    if time_event == TimeEvent.START_OF_YEAR:
        return set_date(get_year(date, tz), 0, 1, tz=tz)
    elif time_event == TimeEvent.START_OF_DAY:
        return set_time(date, 0, 0, 0, 0, tz=tz)
    elif time_event == TimeEvent.END_OF_DAY:
        # -1 ms from midnight of the following day is the last millisecond of this day
        return set_time(add_days(date, 1, tz=tz), 0, 0, 0, -1, tz=tz)
    elif time_event == TimeEvent.END_OF_YEAR:
        # -1 ms from January 1st of the following year is the last millisecond of this year
        return set_time(set_date(get_year(date, tz) + 1, 0, 1, tz=tz), 0, 0, 0, -1, tz=tz)
    elif time_event == TimeEvent.ONE_WEEK_AGO:
        start_of_day = MutableDate.from_datetime(set_time(date, 0, 0, 0, 0, tz=tz))
        add_days_in_place(start_of_day, -DAYS_IN_A_WEEK, tz=tz)
        return start_of_day.to_datetime(tz)
    else:
        logger.debug("Unrecognized time event, returning date unchanged", time_event=repr(time_event))
        return date


def set_time_event_on_date(target: MutableDate, time_event: TimeEvent, tz: ZoneLike = None) -> None:
    """In-place counterpart of set_time_event()."""
    target.assign(set_time_event(target.to_datetime(tz), time_event, tz=tz))


def reset_time(date: datetime, tz: ZoneLike = None) -> datetime:
    """The date at 00:00:00.000."""
    return set_time_event(date, TimeEvent.START_OF_DAY, tz=tz)


def reset_time_on_date(target: MutableDate, tz: ZoneLike = None) -> None:
    """In-place counterpart of reset_time()."""
    set_time_event_on_date(target, TimeEvent.START_OF_DAY, tz=tz)


# ============================================================================
# MONTH BOUNDARIES
# ============================================================================

def set_month_boundaries(
    start_date_to_set: MutableDate,
    end_date_to_set: MutableDate,
    year: int,
    month: int,
    tz: ZoneLike = None,
    ) -> None:
    """
    Write the first and last instants of a month into two caller-owned slots.

    The end is the END_OF_DAY of "day 0" of the following month, which the
    calendar normalizes to the last day of ``month``; no month-length or
    leap-year table is needed.

    Args:
        start_date_to_set: Receives year/month/1 at 00:00:00.000
        end_date_to_set: Receives the last day of the month at 23:59:59.999
        year: Absolute year
        month: Zero-based month
        tz: Zone the boundaries are taken in

    Example:
        >>> start, end = MutableDate(), MutableDate()
        >>> set_month_boundaries(start, end, 2024, 1, tz="UTC")  # February 2024
        >>> end.to_datetime("UTC").isoformat()
        '2024-02-29T23:59:59.999000+00:00'
    """
    logger.info("Setting month boundaries", month=month, year=year)

    start_of_month = set_time_event(set_date(year, month, 1, tz=tz), TimeEvent.START_OF_DAY, tz=tz)
    start_date_to_set.assign(start_of_month)

    end_of_month = set_time_event(set_date(year, month + 1, 0, tz=tz), TimeEvent.END_OF_DAY, tz=tz)
    end_date_to_set.assign(end_of_month)

    logger.info(
        "Month boundaries set",
        month_start=start_of_month.isoformat(),
        month_end=end_of_month.isoformat()
        )


def set_month_boundaries_from(
    start_date_to_set: MutableDate,
    end_date_to_set: MutableDate,
    date_with_year: datetime,
    date_with_month: datetime,
    tz: ZoneLike = None,
    ) -> None:
    """set_month_boundaries() with the year read from one date and the month from another."""
    set_month_boundaries(
        start_date_to_set,
        end_date_to_set,
        get_year(date_with_year, tz),
        get_month(date_with_month, tz),
        tz=tz,
        )


# ============================================================================
# CONVERSIONS
# ============================================================================

def to_local_date(date: datetime, tz: ZoneLike = None) -> date_type:
    """Date-only projection: the calendar date of ``date`` in the zone."""
    return wall_date(date, tz)


def convert_to_minutes(date_with_time: datetime, tz: ZoneLike = None) -> int:
    """Minutes since midnight for the time of day of a date."""
    local = to_zone(date_with_time, tz)
    return hours_minutes_to_minutes(local.hour, local.minute)


def hours_minutes_to_minutes(hours: int, minutes: int) -> int:
    return hours * MINUTES_IN_AN_HOUR + minutes


def get_dates_as_list(start_date: datetime, number_of_days: int, tz: ZoneLike = None) -> list[datetime]:
    """
    Consecutive calendar days starting at ``start_date`` (same time of day).

    Examples:
        >>> [d.day for d in get_dates_as_list(datetime(2024, 2, 28, tzinfo=timezone.utc), 3, tz="UTC")]
        [28, 29, 1]
    """
    return [add_days(start_date, offset, tz=tz) for offset in range(number_of_days)]


# ============================================================================
# FIELD EXTRACTION
# ============================================================================

def get_year(date: datetime, tz: ZoneLike = None) -> int:
    return to_zone(date, tz).year


def get_month(date: datetime, tz: ZoneLike = None) -> int:
    """Zero-based month (January = 0)."""
    return to_zone(date, tz).month - 1


def get_day(date: datetime, tz: ZoneLike = None) -> int:
    """Day of month (1-31)."""
    return to_zone(date, tz).day


def get_hours(date: datetime, tz: ZoneLike = None) -> int:
    """Hour of day on the 24-hour clock."""
    return to_zone(date, tz).hour


def get_minutes(date: datetime, tz: ZoneLike = None) -> int:
    return to_zone(date, tz).minute


def get_seconds(date: datetime, tz: ZoneLike = None) -> int:
    return to_zone(date, tz).second


def get_milliseconds(date: datetime, tz: ZoneLike = None) -> int:
    return to_zone(date, tz).microsecond // 1000


def get_day_of_week(date: datetime, tz: ZoneLike = None) -> int:
    """Day of week, Sunday = 1 through Saturday = 7."""
    return to_zone(date, tz).isoweekday() % DAYS_IN_A_WEEK + 1


def get_current_year(clock: Optional[Clock] = None, tz: ZoneLike = None) -> int:
    return now_in_zone(tz, clock).year


def get_current_month(clock: Optional[Clock] = None, tz: ZoneLike = None) -> int:
    """Zero-based current month."""
    return now_in_zone(tz, clock).month - 1


def get_start_of_year(year: int, tz: ZoneLike = None) -> datetime:
    return set_time_event(set_date(year, 0, 1, tz=tz), TimeEvent.START_OF_YEAR, tz=tz)


def get_end_of_year(year: int, tz: ZoneLike = None) -> datetime:
    return set_time_event(set_date(year, 11, 31, tz=tz), TimeEvent.END_OF_DAY, tz=tz)


def get_start_of_today(clock: Optional[Clock] = None, tz: ZoneLike = None) -> datetime:
    return set_time_event(now_in_zone(tz, clock), TimeEvent.START_OF_DAY, tz=tz)


def get_end_of_today(clock: Optional[Clock] = None, tz: ZoneLike = None) -> datetime:
    return set_time_event(now_in_zone(tz, clock), TimeEvent.END_OF_DAY, tz=tz)


# ============================================================================
# ARITHMETIC
# ============================================================================

def add_days(date: datetime, days_to_add: int, tz: ZoneLike = None) -> datetime:
    """
    Move a date by whole calendar days, keeping its wall-clock time.

    Across a daylight-saving change the elapsed time is 23 or 25 hours.
    """
    local = to_zone(date, tz)
    return localize(local.replace(tzinfo=None) + timedelta(days=days_to_add), tz)


def add_days_in_place(date_to_adjust: MutableDate, days_to_add: int, tz: ZoneLike = None) -> None:
    """In-place counterpart of add_days()."""
    date_to_adjust.assign(add_days(date_to_adjust.to_datetime(tz), days_to_add, tz=tz))


def days_from_now(days_to_add: int, clock: Optional[Clock] = None, tz: ZoneLike = None) -> datetime:
    """The current instant moved by whole calendar days."""
    return add_days(now_in_zone(tz, clock), days_to_add, tz=tz)


def add_minutes(date: datetime, minutes_to_add: int, tz: ZoneLike = None) -> datetime:
    """
    Move a date by elapsed minutes.

    The result keeps the zone of ``date``; across a daylight-saving change the
    wall clock moves by 60 minutes more or less than requested.
    """
    shifted = to_epoch_millis(date, tz) + minutes_to_add * MILLISECONDS_IN_A_MINUTE
    return from_epoch_millis(shifted, date.tzinfo or tz)


def add_minutes_in_place(date_to_adjust: MutableDate, minutes_to_add: int) -> None:
    """In-place counterpart of add_minutes()."""
    date_to_adjust.set_epoch_millis(date_to_adjust.epoch_millis + minutes_to_add * MILLISECONDS_IN_A_MINUTE)


def minus_minutes_in_place(date_to_adjust: MutableDate, minutes_to_subtract: int) -> None:
    add_minutes_in_place(date_to_adjust, -minutes_to_subtract)


def minutes_from_now(minutes_to_add: int, clock: Optional[Clock] = None, tz: ZoneLike = None) -> datetime:
    """The current instant moved by elapsed minutes."""
    return add_minutes(now_in_zone(tz, clock), minutes_to_add)


# ============================================================================
# RANGE & MEMBERSHIP CHECKS
# ============================================================================

def is_in_future(date_to_check: Optional[datetime], clock: Optional[Clock] = None, tz: ZoneLike = None) -> bool:
    """True iff the date is strictly after now. A missing date is never in the future."""
    if date_to_check is None:
        return False
    return to_epoch_millis(date_to_check, tz) > get_clock(clock).now_millis()


def is_between(date_to_check: datetime, from_date: datetime, to_date: datetime, tz: ZoneLike = None) -> bool:
    """Inclusive range check: from_date <= date_to_check <= to_date."""
    instant = to_epoch_millis(date_to_check, tz)
    return to_epoch_millis(from_date, tz) <= instant <= to_epoch_millis(to_date, tz)


def is_within(
    start_date_to_check: datetime,
    end_date_to_check: datetime,
    start_date_range: datetime,
    end_date_range: datetime,
    tz: ZoneLike = None,
    ) -> bool:
    """
    True iff both ends of an interval lie inside a range (inclusive).

    This is containment, not overlap: an interval that starts inside the range
    but ends after it is NOT within it.
    """
    return (
        is_between(start_date_to_check, start_date_range, end_date_range, tz=tz)
        and is_between(end_date_to_check, start_date_range, end_date_range, tz=tz)
    )


def is_within_days(date_to_check: datetime, days: int, clock: Optional[Clock] = None, tz: ZoneLike = None) -> bool:
    """True iff the date is strictly before now plus ``days`` calendar days."""
    return to_epoch_millis(date_to_check, tz) < to_epoch_millis(days_from_now(days, clock=clock, tz=tz))


def is_not_within_days(date_to_check: datetime, days: int, clock: Optional[Clock] = None, tz: ZoneLike = None) -> bool:
    return not is_within_days(date_to_check, days, clock=clock, tz=tz)


def is_same_date(date1: datetime, date2: datetime, formatter: DateFormatter) -> bool:
    """
    True iff both dates render to the same text with ``formatter``.

    Equality is at the formatter's granularity: with a date-only formatter two
    times on the same day are the same date.
    """
    return formatter.format(date1) == formatter.format(date2)


def is_today(date: datetime, clock: Optional[Clock] = None, tz: ZoneLike = None) -> bool:
    """True iff the date falls on the current calendar day."""
    formatter = Formatter.ISO_8601_DATE_ONLY if tz is None else Formatter.ISO_8601_DATE_ONLY.with_zone(tz)
    return is_same_date(date, get_clock(clock).now(), formatter)
