"""
Utility functions for chronokit.

This package contains:
- datetime_utils: Field composition, time events, month boundaries, field access, range checks
- duration_utils: Elapsed-time and calendar-count differences between dates
- date_formats: Format patterns, shared formatters, parsing and strict validation
- timezone_utils: Zone resolution, lenient calendar composition, UTC offset and DST state
- clock: Injectable clock for "now"
- locale_utils: Babel locale lookup for month and AM/PM names
- cache_utils: Named LRU caches (formatter instances)
"""
