"""
Navigation Cursor - the (ring, hour, minute) the user is looking at

Movement rules:
    move_minute  walks the minute of the day, carrying into the hour.
                 No day crossing: the cursor stops at 00:00 and 23:59.
    move_ring    steps between rings; a step that would leave
                 [0, max_ring] is ignored entirely.
"""

import logging

from plantacerium.core.datashapes import MINUTES_PER_DAY, CursorState, TemporalKey

logger = logging.getLogger(__name__)


class NavigationCursor:
    """Single owner of CursorState. Everything else reads `state`."""

    def __init__(self, ring_index: int = 0, hour: int = 0, minute: int = 0, max_ring: int = 0):
        self.max_ring = max(0, max_ring)
        self.state = CursorState(
            ring_index=min(max(0, ring_index), self.max_ring),
            hour=min(max(0, hour), 23),
            minute=min(max(0, minute), 59),
        )

    @property
    def ring_index(self) -> int:
        return self.state.ring_index

    @property
    def hour(self) -> int:
        return self.state.hour

    @property
    def minute(self) -> int:
        return self.state.minute

    def set_max_ring(self, max_ring: int):
        """New ring bound from the layout; pulls the cursor in if the archive shrank."""
        self.max_ring = max(0, max_ring)
        if self.state.ring_index > self.max_ring:
            self.state.ring_index = self.max_ring

    def move_minute(self, delta: int) -> bool:
        """
        Move by `delta` minutes within the current ring.

        Returns:
            True if the position changed (False when pinned at a day edge)
        """
        current = self.state.minute_of_day
        target = min(max(current + delta, 0), MINUTES_PER_DAY - 1)
        if target == current:
            return False
        self.state.hour, self.state.minute = divmod(target, 60)
        return True

    def move_ring(self, delta: int) -> bool:
        """Step `delta` rings outward (positive) or inward; out-of-range steps are no-ops."""
        target = self.state.ring_index + delta
        if delta == 0 or not 0 <= target <= self.max_ring:
            logger.debug(f"Ring move {delta:+d} from {self.state.ring_index} ignored (max {self.max_ring})")
            return False
        self.state.ring_index = target
        return True

    def jump_to(self, ring_index: int, hour: int, minute: int):
        """Place the cursor directly; used for the jump-to-now action."""
        self.state.ring_index = min(max(0, ring_index), self.max_ring)
        self.state.hour = hour
        self.state.minute = minute

    def jump_to_key(self, ring_index: int, key: TemporalKey):
        self.jump_to(ring_index, key.hour, key.minute)
