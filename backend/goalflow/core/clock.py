"""Injectable time sources.

Anything that needs "now" accepts a ``Clock`` so tests can pin the instant.
Only the outermost caller should fall back to ``system_clock``.
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    """Return the current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def fixed_clock(instant: datetime) -> Clock:
    """Return a clock that always reports ``instant`` (naive values are read as UTC)."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)

    def _now() -> datetime:
        return instant

    return _now


def utc_today(clock: Clock | None = None) -> date:
    """Return today's calendar date in UTC according to ``clock``."""
    now = (clock or system_clock)()
    return now.astimezone(timezone.utc).date()
