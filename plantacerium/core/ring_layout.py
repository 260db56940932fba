#!/usr/bin/env python3
"""
Ring Layout Engine - calendar time -> layered polar coordinates

Each calendar day is a concentric ring; each minute of the day is an
angle on that ring (midnight at 0, one full turn per day). Everything
here is pure: a RingLayout is rebuilt from the vault's day list whenever
it changes and answers questions without side effects.

Ring policies:
    DENSE    - ring index = number of ring days strictly before the date.
               Ring days are the days holding entries, plus the live day
               when it is the newest; empty days never get a ring of their own.
    ABSOLUTE - ring index = days since the origin (gaps kept). The origin is
               the earliest ring day, or an earlier pinned day.
"""

import math
from bisect import bisect_left
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from plantacerium.core.datashapes import (
    MINUTES_PER_DAY,
    RingCoordinate,
    RingPolicy,
    TemporalKey,
    validate_clock_time,
)
from plantacerium.core.errors import TemporalValidationError


TWO_PI = 2.0 * math.pi

# Zoom is a user-adjustable aesthetic factor, so it is clamped, never rejected
ZOOM_DEFAULT = 1.0
ZOOM_STEP = 0.1
ZOOM_FLOOR = 0.1

DEFAULT_INNER_RADIUS = 1.0
DEFAULT_RING_SPACING = 1.0


# =============================================================================
# PURE COORDINATE FUNCTIONS
# =============================================================================

def angle_of(hour: int, minute: int) -> float:
    """
    Angle of a minute of the day, in [0, 2*pi).

    Raises TemporalValidationError for anything outside 00:00..23:59;
    clamping would silently move a note to the wrong minute.
    """
    hour, minute = validate_clock_time(hour, minute)
    return (hour * 60 + minute) / MINUTES_PER_DAY * TWO_PI


def minute_of(angle: float) -> int:
    """Inverse of angle_of: nearest minute of the day for an angle (any turn)."""
    if not math.isfinite(angle):
        raise TemporalValidationError(f"angle must be finite, got {angle!r}")
    return round(angle / TWO_PI * MINUTES_PER_DAY) % MINUTES_PER_DAY


def live_minutes(moment: datetime) -> float:
    """Position of the live hand in minutes of the day, including seconds."""
    return (
        moment.hour * 60
        + moment.minute
        + moment.second / 60.0
        + moment.microsecond / 60_000_000.0
    )


def exact_angle_of(moment: datetime) -> float:
    """Angle including seconds, for the sweeping live hand."""
    return live_minutes(moment) / MINUTES_PER_DAY * TWO_PI


def clamp_zoom(zoom: float) -> float:
    # round() keeps repeated 0.1 steps from drifting (1.0000000000000002 etc.)
    return max(ZOOM_FLOOR, round(float(zoom), 6))


def radius_of(ring_index: int, zoom: float = ZOOM_DEFAULT,
              inner_radius: float = DEFAULT_INNER_RADIUS,
              ring_spacing: float = DEFAULT_RING_SPACING) -> float:
    """
    Radius of a ring in abstract polar units.

    Strictly increasing in ring_index (inner_radius and ring_spacing are
    positive) and linear in zoom. Zoom below the floor is clamped.
    """
    if isinstance(ring_index, bool) or not isinstance(ring_index, int) or ring_index < 0:
        raise TemporalValidationError(f"ring index must be a non-negative integer, got {ring_index!r}")
    return (inner_radius + ring_index * ring_spacing) * clamp_zoom(zoom)


def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise TemporalValidationError(f"expected a date, got {value!r}")


# =============================================================================
# RING LAYOUT
# =============================================================================

class RingLayout:
    """
    Date <-> ring index mapping for one snapshot of the archive.

    Usage:
        layout = RingLayout.build(vault.days_with_entries(), live_date=today)
        layout.ring_index_of(date(2024, 1, 3))
        layout.coordinate_of(TemporalKey.parse("2024-01-03-14-30"))

    Under ABSOLUTE the origin may be pinned below the earliest ring day, so
    that deleting the oldest entries does not re-index the remaining rings.
    """

    def __init__(self, ring_days: Iterable[date], policy: RingPolicy = RingPolicy.DENSE,
                 inner_radius: float = DEFAULT_INNER_RADIUS,
                 ring_spacing: float = DEFAULT_RING_SPACING,
                 origin: Optional[date] = None):
        if inner_radius <= 0 or ring_spacing <= 0:
            raise ValueError("inner_radius and ring_spacing must be positive")
        self.policy = policy
        self.inner_radius = inner_radius
        self.ring_spacing = ring_spacing
        self._days: List[date] = sorted({_as_date(d) for d in ring_days})

        self._origin = self._days[0] if self._days else None
        if policy is RingPolicy.ABSOLUTE and origin is not None:
            origin = _as_date(origin)
            self._origin = min(origin, self._origin) if self._origin else origin

    @classmethod
    def build(cls, days_with_entries: Iterable[date], live_date: Optional[date] = None,
              policy: RingPolicy = RingPolicy.DENSE, **kwargs) -> "RingLayout":
        """
        Layout for the archive's entry days.

        The live day gets a ring of its own when it is on or after the last
        entry day. Under DENSE a live day that falls between entry days
        (future-dated keys, a timezone change) is left out, so the entry
        rings keep their indices.
        """
        days = [_as_date(d) for d in days_with_entries]
        if live_date is not None:
            live_date = _as_date(live_date)
            if policy is RingPolicy.ABSOLUTE or not days or live_date >= max(days):
                days.append(live_date)
        return cls(days, policy=policy, **kwargs)

    # ----- introspection -----

    @property
    def ring_days(self) -> Tuple[date, ...]:
        return tuple(self._days)

    @property
    def origin(self) -> Optional[date]:
        return self._origin

    @property
    def max_ring(self) -> int:
        if not self._days:
            return 0
        if self.policy is RingPolicy.ABSOLUTE:
            return (self._days[-1] - self._origin).days
        return len(self._days) - 1

    @property
    def ring_count(self) -> int:
        return self.max_ring + 1 if self._days else 0

    def owns_ring(self, day) -> bool:
        """True when the date is drawn as a ring of its own."""
        day = _as_date(day)
        if self.policy is RingPolicy.ABSOLUTE:
            return bool(self._days) and self._origin <= day <= self._days[-1]
        return day in self._days

    # ----- date <-> ring -----

    def ring_index_of(self, day) -> int:
        """
        Ring index for a calendar date (datetimes use their date part).

        Monotonic non-decreasing in date; every minute of a day shares a ring.
        """
        day = _as_date(day)
        if self.policy is RingPolicy.ABSOLUTE:
            if self._origin is None:
                raise TemporalValidationError("absolute ring policy needs at least one ring day")
            offset = (day - self._origin).days
            if offset < 0:
                raise TemporalValidationError(f"{day.isoformat()} is before the first ring day {self._origin.isoformat()}")
            return offset
        return bisect_left(self._days, day)

    def date_of_ring(self, ring_index: int) -> date:
        """Calendar date drawn as the given ring."""
        if isinstance(ring_index, bool) or not isinstance(ring_index, int):
            raise TemporalValidationError(f"ring index must be an integer, got {ring_index!r}")
        if not self._days or not 0 <= ring_index <= self.max_ring:
            raise TemporalValidationError(f"ring {ring_index} outside [0, {self.max_ring}]")
        if self.policy is RingPolicy.ABSOLUTE:
            return self._origin + timedelta(days=ring_index)
        return self._days[ring_index]

    def ring_dates(self) -> List[Tuple[int, date]]:
        """Every drawable ring as (index, date), innermost first."""
        return [(index, self.date_of_ring(index)) for index in range(self.ring_count)]

    # ----- geometry -----

    def coordinate_of(self, key: TemporalKey) -> RingCoordinate:
        return RingCoordinate(self.ring_index_of(key.date), angle_of(key.hour, key.minute))

    def radius_of(self, ring_index: int, zoom: float = ZOOM_DEFAULT) -> float:
        return radius_of(ring_index, zoom, self.inner_radius, self.ring_spacing)

    def key_at(self, ring_index: int, hour: int, minute: int) -> TemporalKey:
        return TemporalKey.of(self.date_of_ring(ring_index), hour, minute)
