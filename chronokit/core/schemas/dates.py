"""
Date value schemas.

**Domain Coverage**:
- TimeEvent: Named canonical instants within a day or year
- MutableDate: Caller-owned date slot that in-place operations overwrite

**Design Notes**:
- The pure API works on aware datetimes; MutableDate exists for the few
  operations whose contract is to write into a slot the caller pre-allocated
  (e.g. month boundaries)
- The slot stores an absolute instant (epoch milliseconds), so reading it back
  in another zone yields the same instant
"""
# Postpones evaluation of type hints to improve imports and performance. Also avoid circular import issues.
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from chronokit.core.utils.clock import Clock, get_clock
from chronokit.core.utils.timezone_utils import ZoneLike, from_epoch_millis, to_epoch_millis


class TimeEvent(str, Enum):
    """
    Canonical instants relative to a date.

    - START_OF_YEAR: January 1st, 00:00:00.000 of the date's year
    - START_OF_DAY: 00:00:00.000 of the date
    - END_OF_DAY: 23:59:59.999 of the date
    - END_OF_YEAR: December 31st, 23:59:59.999 of the date's year
    - ONE_WEEK_AGO: Start of the day seven calendar days earlier
    """
    START_OF_YEAR = "START_OF_YEAR"
    START_OF_DAY = "START_OF_DAY"
    END_OF_DAY = "END_OF_DAY"
    END_OF_YEAR = "END_OF_YEAR"
    ONE_WEEK_AGO = "ONE_WEEK_AGO"


class MutableDate(BaseModel):
    """
    Mutable date slot holding an absolute instant.

    Attributes:
        epoch_millis: Milliseconds since 1970-01-01T00:00:00Z

    Examples:
        >>> slot = MutableDate.from_datetime(datetime(2024, 2, 29, tzinfo=timezone.utc))
        >>> slot.epoch_millis
        1709164800000
        >>> slot.set_epoch_millis(0)
        >>> slot.to_datetime("UTC")
        datetime.datetime(1970, 1, 1, 0, 0, tzinfo=zoneinfo.ZoneInfo(key='UTC'))
    """
    model_config = ConfigDict(validate_assignment=True)

    epoch_millis: int = Field(0, description="Milliseconds since the Unix epoch")

    @classmethod
    def from_datetime(cls, value: datetime, tz: ZoneLike = None) -> MutableDate:
        """Slot holding the instant of a datetime (naive values are wall time in ``tz``)."""
        return cls(epoch_millis=to_epoch_millis(value, tz))

    @classmethod
    def now(cls, clock: Optional[Clock] = None) -> MutableDate:
        """Slot holding the current instant."""
        return cls(epoch_millis=get_clock(clock).now_millis())

    def to_datetime(self, tz: ZoneLike = None) -> datetime:
        """Aware datetime for the stored instant, viewed in the resolved zone."""
        return from_epoch_millis(self.epoch_millis, tz)

    def set_epoch_millis(self, epoch_millis: int) -> None:
        """Overwrite the stored instant."""
        self.epoch_millis = epoch_millis

    def assign(self, value: datetime, tz: ZoneLike = None) -> None:
        """Overwrite the stored instant with the instant of a datetime."""
        self.epoch_millis = to_epoch_millis(value, tz)
