"""
Frame Composer - one tick's results -> one immutable Scene

Pure aggregation, no I/O. Every argument must come from the same tick
(same `now`); the engine guarantees that by computing all of them right
before calling compose().
"""

from datetime import datetime
from typing import Mapping, Optional, Sequence, Tuple

from plantacerium.core.datashapes import (
    CursorState,
    Entry,
    EntryMark,
    InteractionMode,
    OscillatorPhase,
    ResonanceEvent,
    RingCoordinate,
    RingSnapshot,
    Scene,
    TemporalKey,
)
from plantacerium.core.ring_layout import RingLayout, angle_of, exact_angle_of


class FrameComposer:
    def compose(self,
                now: datetime,
                layout: RingLayout,
                cursor: CursorState,
                entries_by_ring: Mapping[int, Sequence[Entry]],
                resonance: Tuple[ResonanceEvent, ...],
                oscillator: OscillatorPhase,
                emanations: Tuple[float, ...],
                zoom: float,
                dilation: float,
                mode: InteractionMode = InteractionMode.BROWSING,
                draft: Optional[str] = None,
                alerts: Tuple[str, ...] = ()) -> Scene:
        live_key = TemporalKey.from_datetime(now)
        live = layout.coordinate_of(live_key)

        cursor_key = layout.key_at(cursor.ring_index, cursor.hour, cursor.minute)
        cursor_coord = RingCoordinate(cursor.ring_index, angle_of(cursor.hour, cursor.minute))
        cursor_entry = None
        for entry in entries_by_ring.get(cursor.ring_index, ()):
            if entry.key == cursor_key:
                cursor_entry = entry
                break

        rings = tuple(
            RingSnapshot(
                index=index,
                date=day,
                radius=layout.radius_of(index, zoom),
                marks=tuple(
                    EntryMark(entry.key, index, angle_of(entry.key.hour, entry.key.minute))
                    for entry in entries_by_ring.get(index, ())
                ),
            )
            for index, day in layout.ring_dates()
        )

        return Scene(
            timestamp=now,
            live_key=live_key,
            live=live,
            live_angle_exact=exact_angle_of(now),
            cursor_key=cursor_key,
            cursor=cursor_coord,
            cursor_entry=cursor_entry,
            rings=rings,
            resonance=resonance,
            oscillator=oscillator,
            emanations=emanations,
            zoom=zoom,
            dilation=dilation,
            mode=mode,
            draft=draft,
            alerts=tuple(alerts),
            experience_seconds=now.hour * 3600 + now.minute * 60 + now.second,
        )
