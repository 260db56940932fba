"""
Clock sources - the only place the engine learns what time it is

The engine never calls datetime.now() itself. It is handed a ClockSource
and reads it once per tick, so tests can pin time to any minute.
"""

from datetime import datetime, timedelta
from typing import Optional, Protocol


class ClockSource(Protocol):
    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall clock in the local time zone (tz-aware, so timestamps are unambiguous)."""

    def now(self) -> datetime:
        return datetime.now().astimezone()


class FixedClock:
    """
    Deterministic clock for tests and replays.

    Holds one instant until told otherwise:
        clock = FixedClock(datetime(2024, 3, 15, 14, 30))
        clock.advance(seconds=90)
    """

    def __init__(self, moment: Optional[datetime] = None):
        self._moment = moment or datetime(2024, 1, 1, 0, 0)

    def now(self) -> datetime:
        return self._moment

    def set(self, moment: datetime):
        self._moment = moment

    def advance(self, seconds: float = 0.0, minutes: float = 0.0, days: float = 0.0) -> datetime:
        self._moment = self._moment + timedelta(days=days, minutes=minutes, seconds=seconds)
        return self._moment
