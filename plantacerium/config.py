#!/usr/bin/env python3
"""
Chronos Plantacerium Configuration
Environment-driven settings with per-environment overrides
"""
import math
import os

from plantacerium.core.datashapes import ResonanceScope, RingPolicy


def env_float(name, default):
    """Numeric setting; an unparsable value becomes nan so validate_config reports it."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return float(default)
    try:
        return float(raw)
    except ValueError:
        return math.nan


class ChronosConfig:
    """Configuration for the ring engine and its terminal front end"""

    # Storage
    VAULT_PATH = os.getenv('CHRONOS_VAULT_PATH', 'chronos_notes.json')

    # Loop timing
    TICK_HZ = env_float('CHRONOS_TICK_HZ', 30)

    # Ring layout
    RING_POLICY = os.getenv('CHRONOS_RING_POLICY', 'dense').lower()
    INNER_RADIUS = env_float('CHRONOS_INNER_RADIUS', 1.0)
    RING_SPACING = env_float('CHRONOS_RING_SPACING', 1.0)

    # Resonance
    RESONANCE_TOLERANCE = env_float('CHRONOS_RESONANCE_TOLERANCE', 1.0)  # minutes of arc
    RESONANCE_SCOPE = os.getenv('CHRONOS_RESONANCE_SCOPE', 'live_ring').lower()

    # Logging Configuration
    LOG_LEVEL = os.getenv('CHRONOS_LOG_LEVEL', 'INFO')
    LOG_FILE = os.getenv('CHRONOS_LOG_FILE', 'chronos.log')

    DEBUG = False

    @classmethod
    def ring_policy(cls) -> RingPolicy:
        return RingPolicy(cls.RING_POLICY)

    @classmethod
    def resonance_scope(cls) -> ResonanceScope:
        return ResonanceScope(cls.RESONANCE_SCOPE)

    @classmethod
    def tick_interval(cls) -> float:
        return 1.0 / cls.TICK_HZ

    @classmethod
    def validate_config(cls):
        """Validate configuration settings, returning a list of problems"""
        issues = []

        if not math.isfinite(cls.TICK_HZ) or not 1 <= cls.TICK_HZ <= 60:
            issues.append("TICK_HZ must be a number between 1 and 60")

        if cls.RING_POLICY not in {policy.value for policy in RingPolicy}:
            issues.append("RING_POLICY must be 'dense' or 'absolute'")

        if cls.RESONANCE_SCOPE not in {scope.value for scope in ResonanceScope}:
            issues.append("RESONANCE_SCOPE must be 'live_ring' or 'all_rings'")

        if not math.isfinite(cls.RESONANCE_TOLERANCE) or cls.RESONANCE_TOLERANCE <= 0:
            issues.append("RESONANCE_TOLERANCE must be a positive number")

        for name in ('INNER_RADIUS', 'RING_SPACING'):
            value = getattr(cls, name)
            if not math.isfinite(value) or value <= 0:
                issues.append(f"{name} must be a positive number")

        if not cls.VAULT_PATH:
            issues.append("VAULT_PATH must not be empty")

        return issues

    @classmethod
    def summary(cls):
        return {
            'vault_path': cls.VAULT_PATH,
            'tick_hz': cls.TICK_HZ,
            'ring_policy': cls.RING_POLICY,
            'resonance': {
                'tolerance_minutes': cls.RESONANCE_TOLERANCE,
                'scope': cls.RESONANCE_SCOPE,
            },
            'log_file': cls.LOG_FILE or None,
        }


# Environment-specific configurations
class DevelopmentConfig(ChronosConfig):
    """Development environment configuration"""
    DEBUG = True
    LOG_LEVEL = os.getenv('CHRONOS_LOG_LEVEL', 'DEBUG')


class ProductionConfig(ChronosConfig):
    """Everyday journaling configuration"""
    DEBUG = False


class TestConfig(ChronosConfig):
    """Test environment configuration"""
    DEBUG = True
    LOG_LEVEL = 'DEBUG'
    LOG_FILE = ''
    TICK_HZ = 60.0


# Configuration factory
def get_config(env=None):
    """Get configuration based on environment"""
    env = env or os.getenv('CHRONOS_ENV', 'development')

    configs = {
        'development': DevelopmentConfig,
        'production': ProductionConfig,
        'test': TestConfig
    }

    return configs.get(env, DevelopmentConfig)
