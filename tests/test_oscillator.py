#!/usr/bin/env python3
"""
Tests for BreathingOscillator - the 4/1/8 second breath

Tests cover:
- Determinism (same elapsed + dilation -> same phase)
- Phase boundaries and cyclic order
- Dilation stretching/compressing real time, and its floor
- Emanation ripples
"""

from datetime import datetime, timezone

import pytest

from plantacerium.core.datashapes import BreathPhase
from plantacerium.core.oscillator import (
    CYCLE_SECONDS,
    DILATION_FLOOR,
    BreathingOscillator,
    breathing_scale,
    clamp_dilation,
    elapsed_since_epoch,
)


@pytest.fixture
def oscillator():
    return BreathingOscillator()


class TestPhases:

    @pytest.mark.parametrize("t, phase", [
        (0.0, BreathPhase.INHALE),
        (3.999, BreathPhase.INHALE),
        (4.0, BreathPhase.HOLD),
        (4.999, BreathPhase.HOLD),
        (5.0, BreathPhase.EXHALE),
        (12.999, BreathPhase.EXHALE),
        (13.0, BreathPhase.INHALE),
    ])
    def test_phase_boundaries(self, oscillator, t, phase):
        assert oscillator.phase_at(t).phase is phase

    def test_cyclic_order(self, oscillator):
        """HAPPY PATH: inhale -> hold -> exhale -> inhale, sampled every 0.1s."""
        seen = []
        for step in range(0, 300):
            phase = oscillator.phase_at(step / 10.0).phase
            if not seen or seen[-1] is not phase:
                seen.append(phase)
        expected = [BreathPhase.INHALE, BreathPhase.HOLD, BreathPhase.EXHALE]
        assert seen == (expected * 3)[:len(seen)]
        assert len(seen) >= 6

    def test_progress_within_phase(self, oscillator):
        assert oscillator.phase_at(2.0).progress == pytest.approx(0.5)
        assert oscillator.phase_at(9.0).progress == pytest.approx(0.5)

    def test_progress_stays_below_one(self, oscillator):
        """EDGE: progress is in [0, 1) even at the last instant of a phase."""
        for t in (3.9999999999, 4.9999999999, 12.9999999999):
            assert 0.0 <= oscillator.phase_at(t).progress < 1.0

    def test_scale_follows_breath(self, oscillator):
        assert oscillator.phase_at(0.0).scale == 0.0
        assert oscillator.phase_at(2.0).scale == pytest.approx(0.5)
        assert oscillator.phase_at(4.5).scale == 1.0
        assert oscillator.phase_at(9.0).scale == pytest.approx(0.5)

    def test_cycle_progress(self, oscillator):
        assert oscillator.phase_at(6.5).cycle_progress == pytest.approx(0.5)


class TestDeterminism:

    def test_same_inputs_same_phase(self, oscillator):
        """HAPPY PATH: the phase is a pure function - no hidden state."""
        elapsed = 1_710_513_000.123
        first = oscillator.phase_at(elapsed, 1.3)
        oscillator.phase_at(5.0, 0.2)
        assert oscillator.phase_at(elapsed, 1.3) == first
        assert BreathingOscillator().phase_at(elapsed, 1.3) == first

    def test_elapsed_since_epoch(self):
        moment = datetime(1970, 1, 1, 0, 0, 13, tzinfo=timezone.utc)
        assert elapsed_since_epoch(moment) == 13.0

    def test_non_finite_elapsed(self, oscillator):
        with pytest.raises(ValueError):
            oscillator.phase_at(float("inf"))


class TestDilation:

    def test_half_dilation_halves_inhale(self, oscillator):
        """HAPPY PATH: dilation 0.5 -> inhale lasts 2 real seconds."""
        base = 100 * CYCLE_SECONDS
        assert oscillator.phase_at(base + 1.99, 0.5).phase is BreathPhase.INHALE
        assert oscillator.phase_at(base + 2.0, 0.5).phase is BreathPhase.HOLD
        assert BreathingOscillator.effective_duration(BreathPhase.INHALE, 0.5) == pytest.approx(2.0)

    def test_double_dilation_stretches(self, oscillator):
        assert oscillator.phase_at(7.9, 2.0).phase is BreathPhase.INHALE
        assert BreathingOscillator.effective_duration(BreathPhase.EXHALE, 2.0) == pytest.approx(16.0)

    @pytest.mark.parametrize("dilation", [0.0, -1.0, 0.05])
    def test_floor(self, oscillator, dilation):
        """EDGE: dilation below 0.1 is clamped, never raised."""
        assert clamp_dilation(dilation) == DILATION_FLOOR
        assert oscillator.phase_at(0.35, dilation) == oscillator.phase_at(0.35, DILATION_FLOOR)


class TestEmanations:

    def test_three_ripples_in_range(self, oscillator):
        ripples = oscillator.emanations(123.4)
        assert len(ripples) == 3
        assert all(0.0 <= r <= 1.0 for r in ripples)

    def test_first_ripple_matches_breath(self, oscillator):
        assert oscillator.emanations(2.0)[0] == pytest.approx(oscillator.phase_at(2.0).scale)

    def test_offsets_are_a_third_of_a_cycle(self, oscillator):
        ripples = oscillator.emanations(0.0)
        assert ripples[1] == pytest.approx(breathing_scale(CYCLE_SECONDS / 3.0))
        assert ripples[2] == pytest.approx(breathing_scale(2.0 * CYCLE_SECONDS / 3.0))
