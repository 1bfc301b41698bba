"""
Pydantic schemas and enumerations for chronokit.

**Organization by Domain**:
- dates.py: Date value schemas (TimeEvent, MutableDate)
"""
from chronokit.core.schemas.dates import (
    MutableDate,
    TimeEvent,
    )

__all__ = [
    "MutableDate",
    "TimeEvent",
    ]
