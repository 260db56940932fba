#!/usr/bin/env python3
"""
Temporal Ring Engine - the tick-driven core behind the ring display

Owns the layout, cursor, oscillator, resonance detector and composer, and
exposes one handler per user intent (move, open, seal, zoom, dilate, ...).

Per tick:
    1. read the clock ONCE
    2. rebuild the ring layout if the archive or the live day changed
    3. oscillator phase + emanations from that same reading
    4. resonance against the same reading
    5. compose the Scene

Handlers run between ticks and are the only writers of cursor, zoom,
dilation and edit state, so nothing here needs a lock.
"""

import logging
from collections import deque
from datetime import date, datetime, timedelta
from typing import Deque, Dict, List, Optional, Sequence, Tuple

from plantacerium.core.clock import ClockSource, SystemClock
from plantacerium.core.cursor import NavigationCursor
from plantacerium.core.datashapes import (
    Entry,
    InteractionMode,
    ResonanceScope,
    RingPolicy,
    Scene,
    TemporalKey,
)
from plantacerium.core.error_handler import ErrorCategory, ErrorHandler, ErrorSeverity
from plantacerium.core.errors import TemporalValidationError, VaultWriteError
from plantacerium.core.frame_composer import FrameComposer
from plantacerium.core.oscillator import (
    DILATION_DEFAULT,
    DILATION_STEP,
    BreathingOscillator,
    clamp_dilation,
    elapsed_since_epoch,
)
from plantacerium.core.resonance import DEFAULT_TOLERANCE_MINUTES, ResonanceDetector
from plantacerium.core.ring_layout import (
    DEFAULT_INNER_RADIUS,
    DEFAULT_RING_SPACING,
    ZOOM_DEFAULT,
    ZOOM_STEP,
    RingLayout,
    clamp_zoom,
)
from plantacerium.vault.note_vault import NoteVault

logger = logging.getLogger(__name__)

ALERT_SECONDS = 4.0

# Original shortcut: the coarse step of the minute dial
COARSE_MINUTE_STEP = 5


class TemporalRingEngine:
    """
    Usage:
        engine = TemporalRingEngine(vault, clock=SystemClock())
        engine.move_minute(+1)
        engine.open_entry(); engine.type_text("# morning"); engine.seal_entry()
        scene = engine.tick()
    """

    def __init__(self,
                 vault: NoteVault,
                 clock: Optional[ClockSource] = None,
                 policy: RingPolicy = RingPolicy.DENSE,
                 resonance_tolerance: float = DEFAULT_TOLERANCE_MINUTES,
                 resonance_scope: ResonanceScope = ResonanceScope.LIVE_RING,
                 inner_radius: float = DEFAULT_INNER_RADIUS,
                 ring_spacing: float = DEFAULT_RING_SPACING,
                 error_handler: Optional[ErrorHandler] = None):
        self.vault = vault
        self.clock = clock or SystemClock()
        self.policy = policy
        self.inner_radius = inner_radius
        self.ring_spacing = ring_spacing
        self.error_handler = error_handler or ErrorHandler()

        self.oscillator = BreathingOscillator()
        self.detector = ResonanceDetector(resonance_tolerance, resonance_scope)
        self.composer = FrameComposer()

        # Mutated only by the handlers below
        self.zoom = ZOOM_DEFAULT
        self.dilation = DILATION_DEFAULT
        self.mode = InteractionMode.BROWSING
        self.draft: Optional[str] = None
        self.edit_key: Optional[TemporalKey] = None
        self.should_quit = False

        self._alerts: Deque[Tuple[str, datetime]] = deque(maxlen=6)
        self._layout_signature = None
        self._layout: Optional[RingLayout] = None
        # ABSOLUTE origin, pinned for the session
        self._origin: Optional[date] = None
        self._entries_by_ring: Dict[int, List[Entry]] = {}
        self.cursor: Optional[NavigationCursor] = None

        # Start on the live minute
        now = self.clock.now()
        self._last_now = now
        layout = self._refresh_layout(now)
        live_key = TemporalKey.from_datetime(now)
        self.cursor = NavigationCursor(
            ring_index=layout.ring_index_of(live_key.date),
            hour=live_key.hour,
            minute=live_key.minute,
            max_ring=layout.max_ring,
        )

    # =========================================================================
    # LAYOUT CACHE
    # =========================================================================

    @property
    def layout(self) -> RingLayout:
        return self._layout

    def _refresh_layout(self, now: datetime) -> RingLayout:
        """Rebuild layout and per-ring buckets when the archive or live day changed."""
        signature = (self.vault.revision, now.date())
        if signature == self._layout_signature and self._layout is not None:
            return self._layout

        previous = self._layout
        cursor_day = None
        if previous is not None and self.cursor is not None:
            cursor_day = previous.date_of_ring(self.cursor.ring_index)

        layout = RingLayout.build(
            self.vault.days_with_entries(),
            live_date=now.date(),
            policy=self.policy,
            inner_radius=self.inner_radius,
            ring_spacing=self.ring_spacing,
            origin=self._origin,
        )
        self._entries_by_ring = {
            layout.ring_index_of(day): self.vault.entries_on_day(day)
            for day in self.vault.days_with_entries()
        }
        self._layout = layout
        self._origin = layout.origin
        self._layout_signature = signature
        logger.debug(f"Layout rebuilt: {layout.ring_count} rings, policy={self.policy.value}")

        if self.cursor is not None:
            self.cursor.set_max_ring(layout.max_ring)
            # Keep the cursor on its calendar day when rings shift underneath it;
            # if that day lost its ring, land on the next ring outward
            if cursor_day is not None and cursor_day >= layout.origin:
                self.cursor.state.ring_index = min(layout.ring_index_of(cursor_day), layout.max_ring)
        return layout

    def entries_by_ring(self) -> Dict[int, Sequence[Entry]]:
        return dict(self._entries_by_ring)

    # =========================================================================
    # NAVIGATION HANDLERS
    # =========================================================================

    def move_minute(self, delta: int) -> bool:
        return self.cursor.move_minute(delta)

    def move_ring(self, delta: int) -> bool:
        return self.cursor.move_ring(delta)

    def jump_to_live(self):
        """Return the cursor to the live minute of the last tick."""
        live_key = TemporalKey.from_datetime(self._last_now)
        layout = self._refresh_layout(self._last_now)
        self.cursor.jump_to_key(layout.ring_index_of(live_key.date), live_key)

    def jump_to_key(self, key: TemporalKey):
        """
        Move the cursor to an existing ring's minute.

        Raises:
            TemporalValidationError: the key's day has no ring
        """
        layout = self._refresh_layout(self._last_now)
        if self.policy is RingPolicy.DENSE and key.date not in layout.ring_days:
            raise TemporalValidationError(f"no ring for {key.date.isoformat()} - it holds no entries")
        ring_index = layout.ring_index_of(key.date)
        if ring_index > layout.max_ring:
            raise TemporalValidationError(f"{key.date.isoformat()} is after the outermost ring")
        self.cursor.jump_to_key(ring_index, key)

    def cursor_key(self) -> TemporalKey:
        return self._refresh_layout(self._last_now).key_at(
            self.cursor.ring_index, self.cursor.hour, self.cursor.minute
        )

    # =========================================================================
    # ENTRY HANDLERS
    # =========================================================================

    def open_entry(self) -> TemporalKey:
        """Start editing the entry under the cursor (empty draft for a free minute)."""
        key = self.cursor_key()
        existing = self.vault.get(key)
        self.edit_key = key
        self.draft = existing.body if existing else ""
        self.mode = InteractionMode.EDITING
        logger.debug(f"Opened entry {key}")
        return key

    def type_text(self, text: str):
        if self.mode is not InteractionMode.BROWSING and self.draft is not None:
            self.draft += text

    def newline(self):
        self.type_text("\n")

    def backspace(self):
        if self.mode is not InteractionMode.BROWSING and self.draft:
            self.draft = self.draft[:-1]

    def seal_entry(self) -> Optional[Entry]:
        """
        Store the draft under the key it was opened on and close the editor.

        A blank draft deletes an existing entry and stores nothing for a free
        minute. A failed write is reported as "could not save entry"; the text
        stays in the vault's memory and is written again on flush.
        """
        if self.mode is not InteractionMode.EDITING or self.edit_key is None:
            return None

        key, body = self.edit_key, self.draft or ""
        self.mode = InteractionMode.BROWSING
        self.draft = None
        self.edit_key = None

        try:
            if not body.strip():
                if key in self.vault:
                    self.vault.delete(key)
                    logger.info(f"Cleared entry {key}")
                return None
            entry = self.vault.put(key, body)
            logger.info(f"Sealed entry {key} ({len(body)} chars)")
            return entry
        except VaultWriteError as e:
            self.error_handler.handle_error(
                e, ErrorCategory.VAULT_WRITE, ErrorSeverity.HIGH_DEGRADE,
                context=str(key), operation="seal_entry",
            )
            return self.vault.get(key)

    def open_goto(self):
        self.mode = InteractionMode.GOTO
        self.draft = ""

    def submit_goto(self) -> bool:
        """Jump to the typed YYYY-MM-DD-HH-mm key; a bad key is reported as invalid time."""
        text = self.draft or ""
        self.mode = InteractionMode.BROWSING
        self.draft = None
        try:
            self.jump_to_key(TemporalKey.parse(text))
            return True
        except TemporalValidationError as e:
            self.error_handler.handle_error(
                e, ErrorCategory.TIME_VALIDATION, ErrorSeverity.MEDIUM_ALERT,
                operation="goto",
            )
            return False

    def cancel(self):
        """Leave GOTO mode without jumping."""
        if self.mode is InteractionMode.GOTO:
            self.mode = InteractionMode.BROWSING
            self.draft = None

    # =========================================================================
    # VIEW HANDLERS
    # =========================================================================

    def zoom_in(self) -> float:
        self.zoom = clamp_zoom(self.zoom + ZOOM_STEP)
        return self.zoom

    def zoom_out(self) -> float:
        self.zoom = clamp_zoom(self.zoom - ZOOM_STEP)
        return self.zoom

    def dilate(self) -> float:
        """Stretch the breath (slower cycle)."""
        self.dilation = clamp_dilation(self.dilation + DILATION_STEP)
        return self.dilation

    def contract(self) -> float:
        """Compress the breath (faster cycle)."""
        self.dilation = clamp_dilation(self.dilation - DILATION_STEP)
        return self.dilation

    def request_quit(self):
        self.should_quit = True

    # =========================================================================
    # TICK
    # =========================================================================

    def tick(self) -> Scene:
        now = self.clock.now()
        self._last_now = now

        layout = self._refresh_layout(now)
        # A live day wedged between entry days has no ring, so nothing on it can resonate
        live_ring = layout.ring_index_of(now.date()) if layout.owns_ring(now.date()) else None

        elapsed = elapsed_since_epoch(now)
        phase = self.oscillator.phase_at(elapsed, self.dilation)
        emanations = self.oscillator.emanations(elapsed, self.dilation)

        resonance = self.detector.detect(now, live_ring, self._entries_by_ring)

        return self.composer.compose(
            now=now,
            layout=layout,
            cursor=self.cursor.state,
            entries_by_ring=self._entries_by_ring,
            resonance=resonance,
            oscillator=phase,
            emanations=emanations,
            zoom=self.zoom,
            dilation=self.dilation,
            mode=self.mode,
            draft=self.draft,
            alerts=self._collect_alerts(now),
        )

    def _collect_alerts(self, now: datetime) -> Tuple[str, ...]:
        for message in self.error_handler.get_alerts_for_ui():
            self._alerts.append((message, now + timedelta(seconds=ALERT_SECONDS)))
        while self._alerts and self._alerts[0][1] <= now:
            self._alerts.popleft()
        return tuple(message for message, _expires in self._alerts)

    # =========================================================================
    # SHUTDOWN
    # =========================================================================

    def shutdown(self) -> bool:
        """
        Flush any unsaved change. Returns False if the archive could not be
        written; the failure is reported, not retried.
        """
        if self.mode is InteractionMode.EDITING:
            self.seal_entry()
        try:
            self.vault.flush()
            return True
        except VaultWriteError as e:
            self.error_handler.handle_error(
                e, ErrorCategory.VAULT_WRITE, ErrorSeverity.HIGH_DEGRADE,
                operation="shutdown",
            )
            return False
