"""
Time sources and calendar-day policies.

Every time-dependent rule in the engine (decay, cooldowns, incubation,
daily challenges) receives `now` from a `Clock` instead of reading the
system time, so tests can pin and advance time explicitly.

All datetimes handled by the engine are timezone-aware UTC. Naive values
coming from storage are interpreted as UTC by `ensure_utc`.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Protocol

DayKeyPolicy = Callable[[datetime], str]


def ensure_utc(moment: datetime) -> datetime:
    """Return `moment` as an aware UTC datetime (naive values are taken as UTC)."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


class Clock(Protocol):
    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """
    Manually driven clock for tests and replays.

    Examples
    --------
    >>> clock = FixedClock(datetime(2024, 1, 1, tzinfo=timezone.utc))
    >>> _ = clock.advance(minutes=30)
    >>> clock.now().minute
    30
    """

    def __init__(self, start: datetime) -> None:
        self._now = ensure_utc(start)

    def now(self) -> datetime:
        return self._now

    def set(self, moment: datetime) -> None:
        self._now = ensure_utc(moment)

    def advance(self, **delta: float) -> datetime:
        self._now = self._now + timedelta(**delta)
        return self._now


def utc_day_key(moment: datetime) -> str:
    """Calendar day of `moment` in UTC, as `YYYY-MM-DD`."""
    return ensure_utc(moment).date().isoformat()


def offset_day_key(offset_minutes: int) -> DayKeyPolicy:
    """
    Build a day-key policy for a fixed UTC offset.

    `offset_day_key(-300)` rolls the day over at midnight UTC-5.
    """
    offset = timedelta(minutes=offset_minutes)

    def _day_key(moment: datetime) -> str:
        return (ensure_utc(moment) + offset).date().isoformat()

    _day_key.__name__ = f"offset_day_key({offset_minutes})"
    return _day_key


__all__ = [
    "Clock",
    "DayKeyPolicy",
    "FixedClock",
    "SystemClock",
    "ensure_utc",
    "offset_day_key",
    "utc_day_key",
]
