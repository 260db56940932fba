#!/usr/bin/env python3
"""
Breathing Oscillator - phase clock for the inhale / hold / exhale cycle

    Inhale 4s -> Hold 1s -> Exhale 8s -> Inhale ...   (13s per cycle)

Phase is a pure function of elapsed wall-clock seconds and the dilation
factor:

    t = (elapsed / dilation) mod 13

Nothing accumulates between ticks, so there is no drift and restarting the
program at any moment lands on the same phase. Elapsed time is counted
from the Unix epoch. Dilation < 1 speeds the breath up (0.5 -> a 2s inhale),
> 1 slows it down.
"""

import math
from datetime import datetime
from typing import Tuple

from plantacerium.core.datashapes import BreathPhase, OscillatorPhase


INHALE_SECONDS = 4.0
HOLD_SECONDS = 1.0
EXHALE_SECONDS = 8.0
CYCLE_SECONDS = INHALE_SECONDS + HOLD_SECONDS + EXHALE_SECONDS

# (phase, start offset in the cycle, duration), in cyclic order
PHASE_TABLE = (
    (BreathPhase.INHALE, 0.0, INHALE_SECONDS),
    (BreathPhase.HOLD, INHALE_SECONDS, HOLD_SECONDS),
    (BreathPhase.EXHALE, INHALE_SECONDS + HOLD_SECONDS, EXHALE_SECONDS),
)

DILATION_DEFAULT = 1.0
DILATION_STEP = 0.1
DILATION_FLOOR = 0.1

# Three ripples a third of a cycle apart
EMANATION_OFFSETS = (0.0, CYCLE_SECONDS / 3.0, 2.0 * CYCLE_SECONDS / 3.0)


def clamp_dilation(dilation: float) -> float:
    return max(DILATION_FLOOR, round(float(dilation), 6))


def elapsed_since_epoch(moment: datetime) -> float:
    """Seconds since the Unix epoch; naive datetimes are read as local time."""
    return moment.timestamp()


def breathing_scale(cycle_seconds: float) -> float:
    """Amplitude at a point of the cycle: ramps up on inhale, holds, ramps down on exhale."""
    if cycle_seconds < INHALE_SECONDS:
        return cycle_seconds / INHALE_SECONDS
    if cycle_seconds < INHALE_SECONDS + HOLD_SECONDS:
        return 1.0
    return 1.0 - (cycle_seconds - INHALE_SECONDS - HOLD_SECONDS) / EXHALE_SECONDS


class BreathingOscillator:
    """
    Stateless apart from the dilation factor it is asked about.

    Usage:
        osc = BreathingOscillator()
        osc.phase_at(elapsed_since_epoch(now), dilation=1.0)
    """

    def cycle_position(self, elapsed: float, dilation: float = DILATION_DEFAULT) -> float:
        """Seconds into the current (effective) cycle, in [0, 13)."""
        if not math.isfinite(elapsed):
            raise ValueError(f"elapsed must be finite, got {elapsed!r}")
        t = (elapsed / clamp_dilation(dilation)) % CYCLE_SECONDS
        # float modulo can land exactly on the modulus for tiny negatives
        return 0.0 if t >= CYCLE_SECONDS else t

    def phase_at(self, elapsed: float, dilation: float = DILATION_DEFAULT) -> OscillatorPhase:
        t = self.cycle_position(elapsed, dilation)
        phase, start, duration = PHASE_TABLE[-1]
        for candidate in PHASE_TABLE:
            if t < candidate[1] + candidate[2]:
                phase, start, duration = candidate
                break
        progress = min((t - start) / duration, math.nextafter(1.0, 0.0))
        return OscillatorPhase(
            phase=phase,
            progress=progress,
            cycle_progress=t / CYCLE_SECONDS,
            scale=breathing_scale(t),
        )

    def emanations(self, elapsed: float, dilation: float = DILATION_DEFAULT) -> Tuple[float, ...]:
        """Breathing scale of each ripple, offsets applied in effective (dilated) time."""
        base = elapsed / clamp_dilation(dilation)
        return tuple(breathing_scale((base + offset) % CYCLE_SECONDS) for offset in EMANATION_OFFSETS)

    @staticmethod
    def effective_duration(phase: BreathPhase, dilation: float = DILATION_DEFAULT) -> float:
        """Real seconds a phase lasts at the given dilation."""
        for candidate, _start, duration in PHASE_TABLE:
            if candidate is phase:
                return duration * clamp_dilation(dilation)
        raise ValueError(f"unknown phase {phase!r}")
