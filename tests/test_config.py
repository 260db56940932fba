#!/usr/bin/env python3
"""
Tests for the environment-driven configuration
"""

import math

import pytest

from plantacerium import config as chronos_config
from plantacerium.config import ChronosConfig, DevelopmentConfig, ProductionConfig, env_float, get_config
from plantacerium.core.datashapes import ResonanceScope, RingPolicy


class TestGetConfig:

    @pytest.mark.parametrize("env, expected", [
        ("development", DevelopmentConfig),
        ("production", ProductionConfig),
        ("test", chronos_config.TestConfig),
        ("staging", DevelopmentConfig),
    ])
    def test_factory(self, env, expected):
        assert get_config(env) is expected

    def test_reads_env_var(self, monkeypatch):
        monkeypatch.setenv("CHRONOS_ENV", "production")
        assert get_config() is ProductionConfig


class TestValidation:

    def test_defaults_are_valid(self):
        """HAPPY PATH: shipped defaults pass validation."""
        assert ProductionConfig.validate_config() == []
        assert chronos_config.TestConfig.validate_config() == []

    def test_enum_accessors(self):
        assert ChronosConfig.ring_policy() in set(RingPolicy)
        assert ChronosConfig.resonance_scope() in set(ResonanceScope)
        assert chronos_config.TestConfig.tick_interval() == pytest.approx(1 / 60)

    @pytest.mark.parametrize("overrides, fragment", [
        ({"TICK_HZ": 0.5}, "TICK_HZ"),
        ({"TICK_HZ": 120}, "TICK_HZ"),
        ({"TICK_HZ": float("nan")}, "TICK_HZ"),
        ({"RESONANCE_TOLERANCE": float("inf")}, "RESONANCE_TOLERANCE"),
        ({"INNER_RADIUS": float("nan")}, "INNER_RADIUS"),
        ({"RING_POLICY": "sparse"}, "RING_POLICY"),
        ({"RESONANCE_SCOPE": "everywhere"}, "RESONANCE_SCOPE"),
        ({"RESONANCE_TOLERANCE": 0}, "RESONANCE_TOLERANCE"),
        ({"RING_SPACING": -1.0}, "RING_SPACING"),
        ({"VAULT_PATH": ""}, "VAULT_PATH"),
    ])
    def test_bad_settings_reported(self, overrides, fragment):
        """EDGE: each bad setting produces an issue naming it."""
        config = type("BrokenConfig", (chronos_config.TestConfig,), overrides)
        issues = config.validate_config()
        assert len(issues) == 1
        assert fragment in issues[0]

    def test_summary(self):
        summary = chronos_config.TestConfig.summary()
        assert summary['log_file'] is None
        assert summary['resonance']['tolerance_minutes'] == chronos_config.TestConfig.RESONANCE_TOLERANCE


class TestEnvFloat:

    def test_unset_uses_default(self, monkeypatch):
        monkeypatch.delenv("CHRONOS_TICK_HZ", raising=False)
        assert env_float("CHRONOS_TICK_HZ", 30) == 30.0

    def test_parses_number(self, monkeypatch):
        monkeypatch.setenv("CHRONOS_TICK_HZ", " 24 ")
        assert env_float("CHRONOS_TICK_HZ", 30) == 24.0

    def test_garbage_becomes_nan(self, monkeypatch):
        """EDGE: a non-numeric value does not crash import; validation rejects it."""
        monkeypatch.setenv("CHRONOS_TICK_HZ", "fast")
        value = env_float("CHRONOS_TICK_HZ", 30)
        assert math.isnan(value)
        broken = type("BrokenConfig", (chronos_config.TestConfig,), {"TICK_HZ": value})
        assert broken.validate_config() == ["TICK_HZ must be a number between 1 and 60"]
