"""
Injectable clock for "now"-dependent operations.

Every function that samples the current time reads it through a Clock,
either the one passed explicitly (clock=...) or the process default.
Tests freeze time by installing a FixedClock instead of patching datetime.

Usage:
    from chronokit.core.utils.clock import frozen_clock

    with frozen_clock(datetime(2024, 2, 29, 12, 0, tzinfo=timezone.utc)):
        assert get_current_year() == 2024
"""
import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Iterator, Optional, Union

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class Clock(ABC):
    """Source of the current instant, in milliseconds since the Unix epoch."""

    @abstractmethod
    def now_millis(self) -> int:
        """Return the current instant as epoch milliseconds."""

    def now(self) -> datetime:
        """Return the current instant as a UTC-aware datetime (millisecond precision)."""
        return EPOCH + timedelta(milliseconds=self.now_millis())


class SystemClock(Clock):
    """Wall clock of the host."""

    def now_millis(self) -> int:
        return time.time_ns() // 1_000_000

    def __repr__(self) -> str:
        return "SystemClock()"


class FixedClock(Clock):
    """
    Clock that always returns the same instant until moved explicitly.

    Examples:
        >>> clock = FixedClock(0)
        >>> clock.advance(1500)
        >>> clock.now_millis()
        1500
    """

    def __init__(self, epoch_millis: int):
        self._epoch_millis = int(epoch_millis)

    @classmethod
    def at(cls, instant: datetime) -> "FixedClock":
        """Build a clock frozen at an aware datetime."""
        if instant.tzinfo is None:
            raise ValueError(f"Cannot freeze clock at naive datetime {instant}; attach a timezone first")
        return cls(datetime_to_epoch_millis(instant))

    def now_millis(self) -> int:
        return self._epoch_millis

    def set(self, epoch_millis: int) -> None:
        self._epoch_millis = int(epoch_millis)

    def advance(self, millis: int) -> None:
        self._epoch_millis += int(millis)

    def __repr__(self) -> str:
        return f"FixedClock({self._epoch_millis})"


_default_clock: Clock = SystemClock()


def get_clock(clock: Optional[Clock] = None) -> Clock:
    """
    Resolve the clock to use.

    Args:
        clock: Explicit clock; when None the process default clock is returned

    Returns:
        Clock instance
    """
    return clock if clock is not None else _default_clock


def set_clock(clock: Clock) -> Clock:
    """
    Install a new process default clock.

    Returns:
        The previously installed clock, so callers can restore it
    """
    global _default_clock
    previous = _default_clock
    _default_clock = clock
    return previous


def reset_clock() -> None:
    """Restore the system wall clock as process default."""
    set_clock(SystemClock())


@contextmanager
def frozen_clock(at: Union[datetime, int]) -> Iterator[FixedClock]:
    """
    Freeze the process default clock for the duration of a with-block.

    Args:
        at: Aware datetime or epoch milliseconds

    Yields:
        The installed FixedClock (can be advanced inside the block)
    """
    fixed = FixedClock.at(at) if isinstance(at, datetime) else FixedClock(at)
    previous = set_clock(fixed)
    try:
        yield fixed
    finally:
        set_clock(previous)


def datetime_to_epoch_millis(value: datetime) -> int:
    """Milliseconds since the Unix epoch for an aware datetime (sub-millisecond part truncated)."""
    delta = value - EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000
