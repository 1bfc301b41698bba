#!/usr/bin/env python3
# PYTHON_ARGCOMPLETE_OK
"""
chronokit Date CLI

Command-line front end for the chronokit date utilities.
Use it to convert, validate and inspect dates from a terminal or a shell script.

Patterns can be given as a Format name (UK_DATE, ISO_8601_DATE_ONLY, ...)
or as a literal pattern ("dd/MM/yyyy").

Usage:
    python dates_cli.py convert 29/02/2024 UK_DATE ISO_8601_DATE_ONLY
    python dates_cli.py validate 2024-13-01 ISO_8601_DATE_ONLY --unit "start date"
    python dates_cli.py month-bounds 2024 1
    python dates_cli.py minutes-to-time 90
    python dates_cli.py resolve END_OF_DAY 2024-03-31T10:15:00
    python dates_cli.py tz-offset Europe/London
    python dates_cli.py is-dst America/New_York

Or, once installed:
    chronokit --tz Europe/Paris month-bounds 2024 1
"""
import argparse
import sys
from typing import Optional

import argcomplete

from chronokit.core.logging_config import configure_logging
from chronokit.core.schemas.dates import MutableDate, TimeEvent
from chronokit.core.utils.date_formats import (
    DateParseError,
    Format,
    InvalidDateError,
    convert_format,
    get_formatter,
    minutes_to_time,
    validate_date_unit,
    )
from chronokit.core.utils.datetime_utils import set_month_boundaries, set_time_event
from chronokit.core.utils.timezone_utils import get_time_zone_offset_millis, is_currently_dst, now_in_zone

FORMAT_NAMES = sorted(name for name in vars(Format) if name.isupper() and name != "TIME_24H")


def _pattern(value: str) -> str:
    """Map a Format name to its pattern; anything else is taken as a literal pattern."""
    if value in FORMAT_NAMES:
        return getattr(Format, value)
    return value


def _iso(value) -> str:
    return value.isoformat(timespec="milliseconds")


def cmd_convert(text: str, from_format: str, to_format: str, tz: Optional[str]) -> bool:
    """Re-render date text in another layout."""
    try:
        print(convert_format(text, get_formatter(_pattern(from_format), tz=tz), get_formatter(_pattern(to_format), tz=tz)))
        return True
    except DateParseError as e:
        print(f"❌ {e}")
        return False


def cmd_validate(text: str, pattern: str, unit: str, tz: Optional[str]) -> bool:
    """Strictly validate date text against a pattern."""
    try:
        parsed = validate_date_unit(text, get_formatter(_pattern(pattern), tz=tz), unit)
    except InvalidDateError as e:
        print(f"❌ {e}")
        return False
    print(f"✅ {_iso(parsed)}")
    return True


def cmd_month_bounds(year: int, month: int, tz: Optional[str]) -> bool:
    """Print the first and last instants of a month (zero-based month)."""
    start, end = MutableDate(), MutableDate()
    set_month_boundaries(start, end, year, month, tz=tz)
    print(f"start: {_iso(start.to_datetime(tz))}")
    print(f"end:   {_iso(end.to_datetime(tz))}")
    return True


def cmd_resolve(event: str, date_text: Optional[str], tz: Optional[str]) -> bool:
    """Resolve a time event relative to a date (default: now)."""
    if date_text is None:
        base = now_in_zone(tz)
    else:
        try:
            base = validate_date_unit(date_text, get_formatter(Format.ISO_8601_DATE_TIME, tz=tz), "date")
        except InvalidDateError as e:
            print(f"❌ {e}")
            return False
    print(_iso(set_time_event(base, TimeEvent(event), tz=tz)))
    return True


def cmd_tz_offset(zone: Optional[str]) -> bool:
    """Print the current UTC offset of a zone in milliseconds."""
    print(get_time_zone_offset_millis(zone))
    return True


def cmd_is_dst(zone: str) -> bool:
    """Print whether a zone currently observes daylight-saving time."""
    dst = is_currently_dst(zone)
    print("yes" if dst else "no")
    return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="chronokit Date CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Format names:
  {", ".join(FORMAT_NAMES)}

Examples:
  python dates_cli.py convert 02/29/2024 US_DATE FR_DATE
  python dates_cli.py validate 31/02/2024 UK_DATE --unit "due date"
  python dates_cli.py --tz UTC month-bounds 2023 1
        """
    )
    parser.add_argument("--tz", default=None, help="IANA time zone (default: CHRONOKIT_DEFAULT_TIMEZONE or host zone)")
    parser.add_argument("--log-level", default=None, help="Log level (default: CHRONOKIT_LOG_LEVEL)")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # convert
    convert_parser = subparsers.add_parser("convert", help="Convert date text between layouts")
    convert_parser.add_argument("text", help="Date text")
    convert_parser.add_argument("from_format", help="Format name or pattern of the input")
    convert_parser.add_argument("to_format", help="Format name or pattern of the output")

    # validate
    validate_parser = subparsers.add_parser("validate", help="Strictly validate date text")
    validate_parser.add_argument("text", help="Date text")
    validate_parser.add_argument("pattern", help="Format name or pattern")
    validate_parser.add_argument("--unit", default="date", help="Label used in the error message")

    # month-bounds
    bounds_parser = subparsers.add_parser("month-bounds", help="First and last instant of a month")
    bounds_parser.add_argument("year", type=int, help="Year")
    bounds_parser.add_argument("month", type=int, help="Zero-based month (January = 0)")

    # minutes-to-time
    minutes_parser = subparsers.add_parser("minutes-to-time", help="Render minutes as HH:mm")
    minutes_parser.add_argument("minutes", type=int, help="Number of minutes")

    # resolve
    resolve_parser = subparsers.add_parser("resolve", help="Resolve a time event")
    resolve_parser.add_argument("event", choices=[event.value for event in TimeEvent], help="Time event")
    resolve_parser.add_argument("date", nargs="?", default=None, help="Base date as yyyy-MM-dd'T'HH:mm:ss (default: now)")

    # tz-offset
    offset_parser = subparsers.add_parser("tz-offset", help="Current UTC offset of a zone in milliseconds")
    offset_parser.add_argument("zone", nargs="?", default=None, help="IANA zone (default zone when omitted)")

    # is-dst
    dst_parser = subparsers.add_parser("is-dst", help="Whether a zone is currently on daylight-saving time")
    dst_parser.add_argument("zone", help="IANA zone")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    argcomplete.autocomplete(parser)
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    configure_logging(args.log_level)

    if args.command == "convert":
        success = cmd_convert(args.text, args.from_format, args.to_format, args.tz)
    elif args.command == "validate":
        success = cmd_validate(args.text, args.pattern, args.unit, args.tz)
    elif args.command == "month-bounds":
        success = cmd_month_bounds(args.year, args.month, args.tz)
    elif args.command == "minutes-to-time":
        print(minutes_to_time(args.minutes))
        success = True
    elif args.command == "resolve":
        success = cmd_resolve(args.event, args.date, args.tz)
    elif args.command == "tz-offset":
        success = cmd_tz_offset(args.zone or args.tz)
    elif args.command == "is-dst":
        success = cmd_is_dst(args.zone)
    else:
        parser.print_help()
        success = False

    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
