"""
Shared pytest fixtures for chronokit tests.

Every test runs with the default zone pinned to Europe/London and the English
locale, so results do not depend on the host running the suite. The process
clock, the formatter caches, the cached settings and the structlog
configuration are restored after each test. A test that changes the
environment itself must call get_settings.cache_clear().
"""
from datetime import datetime, timezone

import pytest
import structlog

from chronokit.core.config import get_settings
from chronokit.core.utils.cache_utils import clear_all_caches
from chronokit.core.utils.clock import FixedClock, frozen_clock, reset_clock

TEST_TIMEZONE = "Europe/London"

# 2024-02-29T12:00:00Z, a Thursday in a leap year (London is on GMT)
FROZEN_INSTANT = datetime(2024, 2, 29, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def chronokit_environment(monkeypatch):
    """Pin zone and locale, then restore global state after the test."""
    monkeypatch.setenv("CHRONOKIT_DEFAULT_TIMEZONE", TEST_TIMEZONE)
    monkeypatch.setenv("CHRONOKIT_LOCALE", "en")
    get_settings.cache_clear()
    yield
    structlog.reset_defaults()
    reset_clock()
    clear_all_caches()
    get_settings.cache_clear()


@pytest.fixture
def frozen():
    """Process clock frozen at FROZEN_INSTANT."""
    with frozen_clock(FROZEN_INSTANT) as clock:
        yield clock


@pytest.fixture
def summer_clock() -> FixedClock:
    """Explicit clock in British Summer Time (2024-07-01T12:00:00Z)."""
    return FixedClock.at(datetime(2024, 7, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def winter_clock() -> FixedClock:
    """Explicit clock in Greenwich Mean Time (2024-01-15T12:00:00Z)."""
    return FixedClock.at(datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc))
