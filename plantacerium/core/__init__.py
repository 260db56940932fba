"""Temporal Ring Engine - layout, cursor, resonance, breathing and scene composition."""

from plantacerium.core.clock import ClockSource, FixedClock, SystemClock
from plantacerium.core.datashapes import (
    BreathPhase,
    Entry,
    InteractionMode,
    OscillatorPhase,
    ResonanceEvent,
    ResonanceScope,
    RingCoordinate,
    RingPolicy,
    Scene,
    TemporalKey,
)
from plantacerium.core.engine import TemporalRingEngine
from plantacerium.core.errors import (
    PlantaceriumError,
    TemporalValidationError,
    VaultCorruptError,
    VaultError,
    VaultWriteError,
)

__all__ = [
    "BreathPhase",
    "ClockSource",
    "Entry",
    "FixedClock",
    "InteractionMode",
    "OscillatorPhase",
    "PlantaceriumError",
    "ResonanceEvent",
    "ResonanceScope",
    "RingCoordinate",
    "RingPolicy",
    "Scene",
    "SystemClock",
    "TemporalKey",
    "TemporalRingEngine",
    "TemporalValidationError",
    "VaultCorruptError",
    "VaultError",
    "VaultWriteError",
]
