"""Injectable clocks."""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Callable
from zoneinfo import ZoneInfo

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    return datetime.now(timezone.utc)


def fixed_clock(moment: datetime) -> Clock:
    """Return a clock that always reports ``moment`` (naive values are UTC)."""

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)

    def _clock() -> datetime:
        return moment

    return _clock


def local_today(clock: Clock, tz_name: str) -> date:
    """Calendar day of ``clock()`` in the reference time zone."""

    now = clock()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(ZoneInfo(tz_name)).date()


__all__ = ["Clock", "system_clock", "fixed_clock", "local_today"]
