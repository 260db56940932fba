"""
Resonance Detector - live clock hand vs. archived entries

An entry resonates when the live minute (hour*60 + minute, seconds are
ignored) is within `tolerance` of the entry's minute on the ring being
scanned:

    d        = shortest distance around the dial (wraps across midnight)
    strength = 1 - d / tolerance          emitted while d <= tolerance

Distances are measured in minutes of arc (one minute = 2*pi/1440 rad), so
the window is symmetric: with the default tolerance of 1 minute the entry
resonates at full strength during its own minute and at strength 0 during
the minutes either side.

Scanning is a linear pass over each ring's entries - at most 1440 per
ring. For ALL_RINGS the caller hands in entries already bucketed by ring,
so history is not re-sorted every tick.
"""

import math
from datetime import datetime
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from plantacerium.core.datashapes import (
    MINUTES_PER_DAY,
    Entry,
    ResonanceEvent,
    ResonanceScope,
)
from plantacerium.core.ring_layout import TWO_PI

DEFAULT_TOLERANCE_MINUTES = 1.0


def dial_distance(a_minutes: float, b_minutes: float) -> float:
    """Shortest distance between two dial positions, in minutes of arc [0, 720]."""
    diff = abs(a_minutes - b_minutes) % MINUTES_PER_DAY
    return min(diff, MINUTES_PER_DAY - diff)


class ResonanceDetector:
    def __init__(self, tolerance_minutes: float = DEFAULT_TOLERANCE_MINUTES,
                 scope: ResonanceScope = ResonanceScope.LIVE_RING):
        if not math.isfinite(tolerance_minutes) or tolerance_minutes <= 0:
            raise ValueError(f"resonance tolerance must be positive, got {tolerance_minutes!r}")
        self.tolerance_minutes = float(tolerance_minutes)
        self.scope = scope

    @property
    def tolerance_radians(self) -> float:
        return self.tolerance_minutes / MINUTES_PER_DAY * TWO_PI

    def scan(self, live_position: float, ring_index: int, entries: Iterable[Entry]) -> List[ResonanceEvent]:
        """Events for one ring's entries against a live dial position (minutes)."""
        events = []
        for entry in entries:
            distance = dial_distance(live_position, entry.key.minute_of_day)
            if distance <= self.tolerance_minutes:
                events.append(ResonanceEvent(
                    key=entry.key,
                    strength=1.0 - distance / self.tolerance_minutes,
                    ring_index=ring_index,
                ))
        return events

    def detect(self, now: datetime, live_ring: Optional[int],
               entries_by_ring: Mapping[int, Sequence[Entry]]) -> Tuple[ResonanceEvent, ...]:
        """
        All resonance for this tick.

        Args:
            now: the tick's single clock reading
            live_ring: ring index of now's calendar day, None when it has no ring
            entries_by_ring: ring index -> that ring's entries

        Returns:
            Events strongest first; empty when nothing aligns
        """
        position = now.hour * 60 + now.minute
        if self.scope is ResonanceScope.ALL_RINGS:
            rings: Dict[int, Sequence[Entry]] = dict(entries_by_ring)
        else:
            rings = {live_ring: entries_by_ring.get(live_ring, ())} if live_ring is not None else {}

        events: List[ResonanceEvent] = []
        for ring_index in sorted(rings):
            events.extend(self.scan(position, ring_index, rings[ring_index]))
        events.sort(key=lambda event: (-event.strength, event.ring_index, event.key))
        return tuple(events)
