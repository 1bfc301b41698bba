"""
Time zone resolution and calendar-field composition.

Every zone-sensitive function in chronokit accepts an optional ``tz`` argument
(IANA name or tzinfo). When it is omitted the configured default zone is used
(CHRONOKIT_DEFAULT_TIMEZONE), and when that is empty the host's local zone.

Calendar fields are composed leniently, the same way the host calendar
normalizes out-of-range values:
- month 12 of 2023 is January 2024, month -1 is December of the previous year
- day 0 is the last day of the previous month
- millisecond -1 is the last millisecond of the previous second

This is what lets callers ask for "day 0 of next month" to get the last day of
a month without knowing month lengths or leap years.
"""
from datetime import date as date_type, datetime, timedelta, timezone, tzinfo
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog
from dateutil import tz as dateutil_tz

from chronokit.core.config import get_settings
from chronokit.core.utils.clock import Clock, EPOCH, datetime_to_epoch_millis, get_clock

logger = structlog.get_logger(__name__)

ZoneLike = Union[str, tzinfo, None]

MILLISECONDS_IN_A_DAY = 86_400_000


def resolve_zone(tz: ZoneLike = None) -> tzinfo:
    """
    Resolve a zone argument to a tzinfo.

    Args:
        tz: IANA zone name, tzinfo instance, or None/"" for the default zone

    Returns:
        tzinfo for the requested zone. Unknown names resolve to UTC.

    Examples:
        >>> resolve_zone("Europe/Paris")
        zoneinfo.ZoneInfo(key='Europe/Paris')
        >>> resolve_zone("Not/AZone")  # Falls back to UTC
        datetime.timezone.utc
    """
    if isinstance(tz, tzinfo):
        return tz
    name = tz or get_settings().DEFAULT_TIMEZONE
    if not name:
        return dateutil_tz.tzlocal()
    return _zone_by_name(name)


def _zone_by_name(name: str) -> tzinfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        logger.warning(
            "Unknown time zone, falling back to UTC",
            zone=name,
            error=str(e)
            )
        return timezone.utc


def localize(wall: datetime, tz: ZoneLike = None) -> datetime:
    """
    Attach a zone to a naive wall-clock datetime.

    Wall times inside a DST gap do not exist; they are moved forward by the
    gap length (02:30 on a spring-forward night becomes 03:30 daylight time).
    Ambiguous wall times resolve to their first occurrence.
    """
    zone = resolve_zone(tz)
    aware = wall.replace(tzinfo=zone, fold=0)
    # A round trip through UTC normalizes wall times that fall in a gap
    return aware.astimezone(timezone.utc).astimezone(zone)


def to_zone(value: datetime, tz: ZoneLike = None) -> datetime:
    """
    View a datetime in the resolved zone.

    Aware datetimes are converted (same instant); naive ones are treated as
    wall time in that zone.
    """
    if value.tzinfo is None:
        return localize(value, tz)
    return value.astimezone(resolve_zone(tz))


def to_epoch_millis(value: datetime, tz: ZoneLike = None) -> int:
    """Milliseconds since the Unix epoch. Naive values are read as wall time in ``tz``."""
    return datetime_to_epoch_millis(to_zone(value, tz))


def from_epoch_millis(epoch_millis: int, tz: ZoneLike = None) -> datetime:
    """Aware datetime in the resolved zone for an epoch-millisecond instant."""
    return (EPOCH + timedelta(milliseconds=epoch_millis)).astimezone(resolve_zone(tz))


def now_in_zone(tz: ZoneLike = None, clock: Optional[Clock] = None) -> datetime:
    """Current instant from the clock, viewed in the resolved zone."""
    return get_clock(clock).now().astimezone(resolve_zone(tz))


def compose_date_time(
    year: int,
    month: int,
    day: int,
    hour: int = 0,
    minute: int = 0,
    second: int = 0,
    millisecond: int = 0,
    tz: ZoneLike = None,
    ) -> datetime:
    """
    Build an aware datetime from calendar fields, normalizing out-of-range values.

    Args:
        year: Absolute year (e.g. 2024)
        month: Zero-based month (January = 0, December = 11)
        day: One-based day of month (0 means the last day of the previous month)
        hour: Hour of day (0-23)
        minute: Minute (0-59)
        second: Second (0-59)
        millisecond: Millisecond (0-999)
        tz: Zone the fields are expressed in

    Returns:
        Aware datetime in the resolved zone

    Examples:
        >>> compose_date_time(2024, 2, 0, tz="UTC")  # day 0 of March
        datetime.datetime(2024, 2, 29, 0, 0, tzinfo=zoneinfo.ZoneInfo(key='UTC'))
    """
    first_of_month = datetime(year + month // 12, month % 12 + 1, 1)
    wall = first_of_month + timedelta(
        days=day - 1,
        hours=hour,
        minutes=minute,
        seconds=second,
        milliseconds=millisecond,
        )
    return localize(wall, tz)


def wall_date(value: datetime, tz: ZoneLike = None) -> date_type:
    """Calendar date of a datetime in the resolved zone (the date-only projection)."""
    return to_zone(value, tz).date()


def get_time_zone_offset_millis(zone_name: Optional[str] = None, clock: Optional[Clock] = None) -> int:
    """
    UTC offset of a zone at the current instant, in milliseconds.

    The offset reflects the daylight-saving state at call time, so the same
    zone returns different values in summer and winter.

    Args:
        zone_name: IANA zone name; empty or None means the default zone
        clock: Clock used for "now"

    Returns:
        Offset in milliseconds (e.g. 3_600_000 for Europe/London in summer)
    """
    offset = now_in_zone(zone_name, clock).utcoffset()
    return offset // timedelta(milliseconds=1)


def is_currently_dst(zone_name: ZoneLike, clock: Optional[Clock] = None) -> bool:
    """
    True iff the zone is observing daylight-saving time at the current instant.

    DST is read from the offset, not from ``tzinfo.dst()``: zones such as
    Europe/Dublin declare winter time as a negative saving, so ``dst()`` is
    non-zero in January and zero in July. A zone is on DST when its current
    offset is ahead of the smaller of its 1 January and 1 July offsets.
    """
    now = now_in_zone(zone_name, clock)
    zone = now.tzinfo
    standard = min(
        datetime(now.year, 1, 1, tzinfo=zone).utcoffset(),
        datetime(now.year, 7, 1, tzinfo=zone).utcoffset(),
        )
    return now.utcoffset() > standard
