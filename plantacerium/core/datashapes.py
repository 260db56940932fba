#!/usr/bin/env python3
"""
datashapes.py - Centralized Data Shape Definitions

All dataclasses and enums used across the ring engine live here.
Almost no logic - just definitions of what data looks like, plus the
validation that keeps a TemporalKey pointing at a real minute.

Other modules import from here to ensure consistent structures:
    from plantacerium.core.datashapes import TemporalKey, Entry, Scene
"""

import calendar
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, Tuple

from plantacerium.core.errors import TemporalValidationError


MINUTES_PER_DAY = 1440

_KEY_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})-(\d{2})-(\d{2})$")


# =============================================================================
# ENUMS
# =============================================================================

class RingPolicy(Enum):
    """How a calendar date becomes a ring index."""
    DENSE = "dense"          # Only days that hold entries (plus today) get a ring
    ABSOLUTE = "absolute"    # One ring per calendar day since the first ring day


class ResonanceScope(Enum):
    """Which rings the resonance detector scans each tick."""
    LIVE_RING = "live_ring"
    ALL_RINGS = "all_rings"


class BreathPhase(Enum):
    """Stages of the breathing cycle, in their fixed cyclic order."""
    INHALE = "inhale"
    HOLD = "hold"
    EXHALE = "exhale"


class InteractionMode(Enum):
    BROWSING = "browsing"
    EDITING = "editing"    # writing the body of the entry under the cursor
    GOTO = "goto"          # typing a YYYY-MM-DD-HH-mm key to jump to


# =============================================================================
# TEMPORAL KEY - one addressable minute
# =============================================================================

def _require_int(name: str, value) -> int:
    # bool is an int subclass; True as a minute is always a caller bug
    if isinstance(value, bool) or not isinstance(value, int):
        raise TemporalValidationError(f"{name} must be an integer, got {value!r}")
    return value


def validate_clock_time(hour, minute):
    """Reject an hour/minute pair outside 00:00..23:59."""
    hour = _require_int("hour", hour)
    minute = _require_int("minute", minute)
    if not 0 <= hour <= 23:
        raise TemporalValidationError(f"hour out of range [0, 23]: {hour}")
    if not 0 <= minute <= 59:
        raise TemporalValidationError(f"minute out of range [0, 59]: {minute}")
    return hour, minute


@dataclass(frozen=True, order=True)
class TemporalKey:
    """
    Immutable minute address: (year, month, day, hour, minute).

    Field order is the comparison order, so sorting keys sorts them
    chronologically. Canonical text form is YYYY-MM-DD-HH-mm.
    """
    year: int
    month: int
    day: int
    hour: int
    minute: int

    def __post_init__(self):
        year = _require_int("year", self.year)
        month = _require_int("month", self.month)
        day = _require_int("day", self.day)
        if not 1 <= year <= 9999:
            raise TemporalValidationError(f"year out of range [1, 9999]: {year}")
        if not 1 <= month <= 12:
            raise TemporalValidationError(f"month out of range [1, 12]: {month}")
        days_in_month = calendar.monthrange(year, month)[1]
        if not 1 <= day <= days_in_month:
            raise TemporalValidationError(
                f"day {day} invalid for {year:04d}-{month:02d} (has {days_in_month} days)"
            )
        validate_clock_time(self.hour, self.minute)

    # ----- constructors -----

    @classmethod
    def parse(cls, text: str) -> "TemporalKey":
        """Parse the canonical YYYY-MM-DD-HH-mm form."""
        match = _KEY_PATTERN.match(text.strip()) if isinstance(text, str) else None
        if not match:
            raise TemporalValidationError(f"not a YYYY-MM-DD-HH-mm key: {text!r}")
        return cls(*(int(part) for part in match.groups()))

    @classmethod
    def of(cls, day: date, hour: int, minute: int) -> "TemporalKey":
        return cls(day.year, day.month, day.day, hour, minute)

    @classmethod
    def from_datetime(cls, moment: datetime) -> "TemporalKey":
        """Truncate a datetime to its minute (seconds are dropped, never rounded)."""
        return cls(moment.year, moment.month, moment.day, moment.hour, moment.minute)

    # ----- views -----

    @property
    def date(self) -> date:
        return date(self.year, self.month, self.day)

    @property
    def minute_of_day(self) -> int:
        return self.hour * 60 + self.minute

    def to_datetime(self) -> datetime:
        return datetime(self.year, self.month, self.day, self.hour, self.minute)

    def canonical(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}-{self.hour:02d}-{self.minute:02d}"

    def __str__(self) -> str:
        return self.canonical()


# =============================================================================
# VAULT RECORDS
# =============================================================================

@dataclass(frozen=True)
class Entry:
    """
    One journal record. Owned by the NoteVault; the key never changes
    after creation (moving a note means delete + put under a new key).
    """
    key: TemporalKey
    body: str
    created_at: datetime
    updated_at: datetime


# =============================================================================
# DERIVED GEOMETRY - computed every tick, never persisted
# =============================================================================

@dataclass(frozen=True)
class RingCoordinate:
    ring_index: int
    angle_radians: float   # [0, 2*pi), 0 = midnight, clockwise by minute of day


@dataclass
class CursorState:
    """Mutable navigation position, written only by NavigationCursor."""
    ring_index: int
    hour: int
    minute: int

    @property
    def minute_of_day(self) -> int:
        return self.hour * 60 + self.minute


@dataclass(frozen=True)
class OscillatorPhase:
    phase: BreathPhase
    progress: float          # progress within the current phase, [0, 1)
    cycle_progress: float    # progress through the whole cycle, [0, 1)
    scale: float             # breathing amplitude: 0 -> 1 on inhale, 1 on hold, 1 -> 0 on exhale


@dataclass(frozen=True)
class ResonanceEvent:
    key: TemporalKey
    strength: float          # 1.0 = perfect alignment, falls linearly to 0 at the tolerance edge
    ring_index: int


@dataclass(frozen=True)
class EntryMark:
    """Where one entry sits on the ring diagram."""
    key: TemporalKey
    ring_index: int
    angle_radians: float


@dataclass(frozen=True)
class RingSnapshot:
    index: int
    date: date
    radius: float
    marks: Tuple[EntryMark, ...] = ()


@dataclass(frozen=True)
class Scene:
    """
    Everything the renderer needs for one frame, computed from a single
    reading of the clock. Abstract polar units only - no screen cells.
    """
    timestamp: datetime
    live_key: TemporalKey
    live: RingCoordinate
    live_angle_exact: float          # live angle including seconds, for the hand
    cursor_key: TemporalKey
    cursor: RingCoordinate
    cursor_entry: Optional[Entry]
    rings: Tuple[RingSnapshot, ...]
    resonance: Tuple[ResonanceEvent, ...]
    oscillator: OscillatorPhase
    emanations: Tuple[float, ...]
    zoom: float
    dilation: float
    mode: InteractionMode = InteractionMode.BROWSING
    draft: Optional[str] = None
    alerts: Tuple[str, ...] = field(default_factory=tuple)
    experience_seconds: int = 0

    @property
    def max_radius(self) -> float:
        return max((ring.radius for ring in self.rings), default=0.0)
