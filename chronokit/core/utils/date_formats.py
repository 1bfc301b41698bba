"""
Date format patterns, formatters, and strict validation.

Patterns use the CLDR/LDML letters (yyyy, MM, dd, HH, mm, ...), rendered with
Babel and parsed by a regular expression compiled from the same pattern.

Parsing is lenient: numeric fields may have any width and out-of-range values
roll over ("2024-13-01" parses as 2025-01-01). Use validate_date_unit() when the
text must be exactly what the pattern would print.

Usage:
    from chronokit.core.utils.date_formats import Formatter, validate_date_unit

    text = Formatter.UK_DATE.format(value)          # '29/02/2024'
    value = validate_date_unit("2024-02-29", Formatter.ISO_8601_DATE_ONLY, "date")
"""
import re
from datetime import datetime
from typing import NamedTuple, Optional, Union

import structlog
from babel.dates import format_datetime, tokenize_pattern

from chronokit.core.config import get_settings
from chronokit.core.utils.cache_utils import get_cache_lock, get_lru_cache
from chronokit.core.utils.clock import Clock
from chronokit.core.utils.locale_utils import get_babel_locale, meridiem_names, month_names
from chronokit.core.utils.timezone_utils import ZoneLike, compose_date_time, now_in_zone, to_zone

logger = structlog.get_logger(__name__)

MINUTES_IN_AN_HOUR = 60

FORMATTER_CACHE = "date_formatters"
PARSER_CACHE = "date_parsers"

NUMERIC_FIELDS = frozenset("yMdHhmsS")
TEXT_FIELDS = frozenset("Ma")
SUPPORTED_FIELDS = NUMERIC_FIELDS | TEXT_FIELDS


class DateParseError(ValueError):
    """Raised when text does not match a date pattern."""


class InvalidDateError(Exception):
    """Raised by strict validation when text is not a well-formed date for its pattern."""


# ============================================================================
# PATTERNS
# ============================================================================

class Format:
    """Named date/time layouts."""

    # ISO 8601
    ISO_8601_DATE_TIME = "yyyy-MM-dd'T'HH:mm:ss"
    ISO_8601_DATE_ONLY = "yyyy-MM-dd"
    ISO_8601_TIME_ONLY = "HH:mm"

    # Units
    YEAR_ONLY = "yyyy"
    MONTH_ONLY = "MMM"
    MONTH_NAME = "MMMM"
    TIME_24H = "%02d:%02d"  # printf layout (hours, minutes), not a calendar pattern

    # United Kingdom
    UK_DATE = "dd/MM/yyyy"
    UK_DATE_SHORT_YEAR = "dd/MM/yy"
    UK_DATE_COMPACT = "dd/MM"
    UK_TIME_STAMP = "dd/MM/yy @ HH:mm"

    # United States
    US_DATE = "MM/dd/yyyy"
    US_DATE_SHORT_YEAR = "MM/dd/yy"
    US_DATE_COMPACT = "MM/dd"
    US_TIME = "hh:mm a"

    # France / Japan
    FR_DATE = "dd.MM.yyyy"
    JP_DATE = "yyyy/MM/dd"


# ============================================================================
# FORMATTER
# ============================================================================

class _CompiledParser(NamedTuple):
    regex: re.Pattern
    fields: tuple[tuple[str, str, int], ...]  # (group name, pattern letter, letter count)
    months: dict[str, int]
    meridiems: dict[str, str]


class DateFormatter:
    """
    Immutable printer/parser bound to one pattern.

    A formatter holds no mutable state, so one instance can be shared by any
    number of threads. The zone and locale are resolved on each call when they
    were not fixed at construction, following the configured defaults.

    Args:
        pattern: CLDR date pattern (see Format)
        tz: Zone to render and parse in; None means the default zone
        locale: Babel locale id for month/meridiem names; None means CHRONOKIT_LOCALE

    Raises:
        ValueError: If the pattern uses a letter chronokit cannot parse
    """

    __slots__ = ("_pattern", "_tz", "_locale", "_tokens")

    def __init__(self, pattern: str, tz: ZoneLike = None, locale: Optional[str] = None):
        tokens = tuple(tokenize_pattern(pattern))
        for kind, value in tokens:
            if kind == "field" and value[0] not in SUPPORTED_FIELDS:
                raise ValueError(f"Unsupported pattern letter '{value[0]}' in date pattern {pattern!r}")
        object.__setattr__(self, "_pattern", pattern)
        object.__setattr__(self, "_tz", tz)
        object.__setattr__(self, "_locale", locale)
        object.__setattr__(self, "_tokens", tokens)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def pattern(self) -> str:
        return self._pattern

    @property
    def tz(self) -> ZoneLike:
        return self._tz

    def __repr__(self) -> str:
        return f"DateFormatter({self._pattern!r}, tz={self._tz!r}, locale={self._locale!r})"

    def __eq__(self, other):
        if not isinstance(other, DateFormatter):
            return NotImplemented
        return (self._pattern, self._tz, self._locale) == (other._pattern, other._tz, other._locale)

    def __hash__(self):
        return hash((self._pattern, self._locale))

    def with_zone(self, tz: ZoneLike) -> "DateFormatter":
        """Formatter for the same pattern and locale in another zone."""
        return get_formatter(self._pattern, tz=tz, locale=self._locale)

    def format(self, value: datetime) -> str:
        """Render a date in this formatter's zone."""
        local = to_zone(value, self._tz)
        return format_datetime(local, self._pattern, locale=get_babel_locale(self._locale))

    def parse(self, text: str, clock: Optional[Clock] = None) -> datetime:
        """
        Parse text leniently into an aware datetime in this formatter's zone.

        Args:
            text: Text starting with a date in this pattern (trailing text is ignored)
            clock: Clock used to place two-digit years in their century

        Raises:
            DateParseError: If the text does not match the pattern
        """
        parser = self._compiled()
        match = parser.regex.match(text)
        if match is None:
            raise DateParseError(f'Unparseable date: "{text}" (expected {self._pattern})')

        year, month, day = 1970, 0, 1
        hour = minute = second = millisecond = 0
        hour12: Optional[int] = None
        pm = False
        for group, letter, count in parser.fields:
            raw = match.group(group)
            if letter == "y":
                year = int(raw)
                if count == 2 and len(raw) == 2:
                    year = _two_digit_year(year, self._tz, clock)
            elif letter == "M":
                month = (int(raw) if count <= 2 else parser.months[raw.lower()]) - 1
            elif letter == "d":
                day = int(raw)
            elif letter == "H":
                hour = int(raw)
            elif letter == "h":
                hour12 = int(raw)
            elif letter == "m":
                minute = int(raw)
            elif letter == "s":
                second = int(raw)
            elif letter == "S":
                millisecond = int(raw)
            elif letter == "a":
                pm = parser.meridiems[raw.lower()] == "pm"
        # The meridiem only qualifies a 12-hour clock field; HH is already absolute
        if hour12 is not None:
            hour = (0 if hour12 == 12 else hour12) + (12 if pm else 0)

        try:
            return compose_date_time(year, month, day, hour, minute, second, millisecond, tz=self._tz)
        except (OverflowError, ValueError) as e:
            raise DateParseError(f'Unparseable date: "{text}" ({e})') from e

    def _compiled(self) -> _CompiledParser:
        locale = get_babel_locale(self._locale)
        key = (self._pattern, str(locale))
        cache = get_lru_cache(PARSER_CACHE, maxsize=get_settings().FORMATTER_CACHE_SIZE)
        with get_cache_lock(PARSER_CACHE):
            parser = cache.get(key)
            if parser is None:
                parser = _compile_parser(self._tokens, locale)
                cache[key] = parser
        return parser


def _compile_parser(tokens, locale) -> _CompiledParser:
    months: dict[str, int] = {}
    for width in ("wide", "abbreviated"):
        for number, name in month_names(width, locale).items():
            months.setdefault(name.lower(), number)
    meridiems = {name.lower(): period for period, name in meridiem_names(locale).items()}

    parts = []
    fields = []
    for index, (kind, value) in enumerate(tokens):
        if kind == "chars":
            parts.append(re.escape(value))
            continue
        letter, count = value
        group = f"f{index}"
        if letter == "M" and count >= 3:
            expr = _alternation(months)
        elif letter == "a":
            expr = _alternation(meridiems)
        elif _next_is_numeric(tokens, index):
            # Adjacent numeric fields can only be split by their declared widths
            expr = r"\d{%d}" % count
        else:
            expr = r"\d+"
        parts.append(f"(?P<{group}>{expr})")
        fields.append((group, letter, count))

    regex = re.compile("".join(parts), re.IGNORECASE)
    return _CompiledParser(regex, tuple(fields), months, meridiems)


def _alternation(names) -> str:
    # Longest first so "June" wins over "Jun"
    return "|".join(re.escape(name) for name in sorted(names, key=len, reverse=True))


def _next_is_numeric(tokens, index: int) -> bool:
    if index + 1 >= len(tokens):
        return False
    kind, value = tokens[index + 1]
    if kind != "field":
        return False
    letter, count = value
    return letter in NUMERIC_FIELDS and not (letter == "M" and count >= 3)


def _two_digit_year(two_digit: int, tz: ZoneLike, clock: Optional[Clock]) -> int:
    """Place a two-digit year within 80 years before and 20 years after the current year."""
    window_start = now_in_zone(tz, clock).year - 80
    year = window_start // 100 * 100 + two_digit
    if year < window_start:
        year += 100
    return year


def get_formatter(pattern: str, tz: ZoneLike = None, locale: Optional[str] = None) -> DateFormatter:
    """
    Get the shared formatter for a pattern.

    Formatters for a zone name (or the default zone) are cached, so repeated
    calls with the same arguments return the same instance.

    Args:
        pattern: CLDR date pattern
        tz: Zone name, tzinfo, or None for the default zone
        locale: Babel locale id, or None for CHRONOKIT_LOCALE

    Returns:
        DateFormatter instance
    """
    if tz is not None and not isinstance(tz, str):
        return DateFormatter(pattern, tz=tz, locale=locale)

    key = (pattern, tz, locale)
    cache = get_lru_cache(FORMATTER_CACHE, maxsize=get_settings().FORMATTER_CACHE_SIZE)
    with get_cache_lock(FORMATTER_CACHE):
        formatter = cache.get(key)
        if formatter is None:
            formatter = DateFormatter(pattern, tz=tz, locale=locale)
            cache[key] = formatter
    return formatter


class Formatter:
    """Shared formatter instances, one per calendar pattern in Format."""

    # ISO 8601
    ISO_8601_DATE_ONLY = DateFormatter(Format.ISO_8601_DATE_ONLY)
    ISO_8601_DATE_TIME = DateFormatter(Format.ISO_8601_DATE_TIME)
    ISO_8601_TIME_ONLY = DateFormatter(Format.ISO_8601_TIME_ONLY)

    # Units
    MONTH_NAME = DateFormatter(Format.MONTH_NAME)
    MONTH_ONLY = DateFormatter(Format.MONTH_ONLY)
    YEAR_ONLY = DateFormatter(Format.YEAR_ONLY)

    # United Kingdom
    UK_DATE = DateFormatter(Format.UK_DATE)
    UK_DATE_SHORT_YEAR = DateFormatter(Format.UK_DATE_SHORT_YEAR)
    UK_TIME_STAMP = DateFormatter(Format.UK_TIME_STAMP)
    UK_DATE_COMPACT = DateFormatter(Format.UK_DATE_COMPACT)

    # United States
    US_DATE = DateFormatter(Format.US_DATE)
    US_DATE_SHORT_YEAR = DateFormatter(Format.US_DATE_SHORT_YEAR)
    US_DATE_COMPACT = DateFormatter(Format.US_DATE_COMPACT)
    US_TIME = DateFormatter(Format.US_TIME)

    # France / Japan
    FR_DATE = DateFormatter(Format.FR_DATE)
    JP_DATE = DateFormatter(Format.JP_DATE)


FormatterLike = Union[str, DateFormatter]


def as_formatter(formatter: FormatterLike) -> DateFormatter:
    """Accept either a pattern string or a DateFormatter."""
    if isinstance(formatter, DateFormatter):
        return formatter
    return get_formatter(formatter)


# ============================================================================
# FORMATTING & PARSING
# ============================================================================

def format_date(value: datetime, formatter: FormatterLike) -> str:
    """Render a date with a pattern or formatter."""
    return as_formatter(formatter).format(value)


def parse_date(text: str, formatter: FormatterLike, clock: Optional[Clock] = None) -> datetime:
    """
    Parse text with a pattern or formatter.

    Raises:
        DateParseError: If the text does not match the pattern
    """
    return as_formatter(formatter).parse(text, clock=clock)


def convert_format(text: str, from_format: FormatterLike, to_format: FormatterLike) -> str:
    """
    Re-render date text from one layout into another.

    Examples:
        >>> convert_format("29/02/2024", Format.UK_DATE, Format.ISO_8601_DATE_ONLY)
        '2024-02-29'

    Raises:
        DateParseError: If the text does not match from_format
    """
    return as_formatter(to_format).format(as_formatter(from_format).parse(text))


def iso8601_string_to_date(text: str) -> datetime:
    """Parse yyyy-MM-dd'T'HH:mm:ss text in the default zone."""
    return Formatter.ISO_8601_DATE_TIME.parse(text)


def to_iso_string_date(value: Optional[datetime], tz: ZoneLike = None) -> Optional[str]:
    """yyyy-MM-dd text for a date, or None when no date is given."""
    if value is None:
        return None
    return get_formatter(Format.ISO_8601_DATE_ONLY, tz=tz).format(value)


def to_iso_string_date_time(value: Optional[datetime], tz: ZoneLike = None) -> Optional[str]:
    """yyyy-MM-dd'T'HH:mm:ss text for a date, or None when no date is given."""
    if value is None:
        return None
    return get_formatter(Format.ISO_8601_DATE_TIME, tz=tz).format(value)


def hours_minutes_to_string(hours: int, minutes: int) -> str:
    """Zero-padded HH:mm text, e.g. (9, 5) -> '09:05'."""
    return Format.TIME_24H % (hours, minutes)


def minutes_to_time(minutes: int) -> str:
    """
    Render a count of minutes as HH:mm.

    Examples:
        >>> minutes_to_time(90)
        '01:30'
        >>> minutes_to_time(1500)  # Hours are not wrapped at 24
        '25:00'
    """
    # Truncate toward zero so negative counts render symmetrically
    hours, remainder = divmod(abs(minutes), MINUTES_IN_AN_HOUR)
    if minutes < 0:
        hours, remainder = -hours, -remainder
    return hours_minutes_to_string(hours, remainder)


def to_string_time(value: datetime, tz: ZoneLike = None) -> str:
    """Hour and minute of a date as HH:mm."""
    local = to_zone(value, tz)
    return hours_minutes_to_string(local.hour, local.minute)


# ============================================================================
# STRICT VALIDATION
# ============================================================================

def validate_date_unit(value_to_parse: str, formatter: FormatterLike, unit: str) -> datetime:
    """
    Parse text and accept it only if it is exactly what the formatter prints.

    The lenient parser would silently turn "2024-13-01" into 2025-01-01 and
    "2024-1-5" into 2024-01-05. The round trip rejects both.

    Args:
        value_to_parse: Text to validate
        formatter: Pattern or formatter the text must follow
        unit: Label for the value in the error message (e.g. "date", "start time")

    Returns:
        Parsed datetime

    Raises:
        InvalidDateError: If the text does not parse or does not round-trip
    """
    formatter = as_formatter(formatter)
    cause: Optional[DateParseError] = None
    try:
        parsed = formatter.parse(value_to_parse)
        if formatter.format(parsed) == value_to_parse:
            return parsed
    except DateParseError as e:
        cause = e

    error = f"Invalid {unit} format for String: {value_to_parse}; should be {formatter.pattern}"
    logger.error(
        error,
        unit=unit,
        value=value_to_parse,
        pattern=formatter.pattern
        )
    raise InvalidDateError(error) from cause
