"""
Test Configuration and Fixtures

Shared fixtures for the ring engine, the note vault and the terminal UI.
Every test runs against a FixedClock so no result depends on when the
suite happens to run.
"""

from datetime import date, datetime

import pytest

from plantacerium.core.clock import FixedClock
from plantacerium.core.datashapes import TemporalKey
from plantacerium.core.error_handler import ErrorHandler
from plantacerium.vault import JsonVaultStore, NoteVault


# =============================================================================
# PYTEST MARKERS
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: exercises several modules together")
    config.addinivalue_line("markers", "persistence: tests data written to / read from disk")


# =============================================================================
# KEY CONSTANTS
# =============================================================================

# The live moment most tests pin the clock to
LIVE_MOMENT = datetime(2024, 3, 15, 14, 30, 0)

# Entry days used for the dense ring scenario (live day comes after them)
ENTRY_DAYS = (date(2024, 1, 1), date(2024, 1, 3), date(2024, 1, 10))


# =============================================================================
# CLOCK / VAULT FIXTURES
# =============================================================================

@pytest.fixture
def fixed_clock():
    """Clock pinned at 2024-03-15 14:30:00."""
    return FixedClock(LIVE_MOMENT)


@pytest.fixture
def vault_path(tmp_path):
    return tmp_path / "chronos_notes.json"


@pytest.fixture
def vault(vault_path, fixed_clock):
    """Empty vault backed by a real JSON file in tmp_path."""
    return NoteVault.open(JsonVaultStore(vault_path), clock=fixed_clock)


@pytest.fixture
def memory_vault(fixed_clock):
    """Vault with no store at all - nothing touches the disk."""
    return NoteVault(store=None, clock=fixed_clock)


@pytest.fixture
def populated_vault(vault):
    """
    Vault with one entry on each ENTRY_DAY plus two on the live day.

    Live-day entries sit at 09:00 and 14:30 so the 14:30 clock resonates.
    """
    for day in ENTRY_DAYS:
        vault.put(TemporalKey.of(day, 8, 0), f"# {day.isoformat()}\nmorning")
    vault.put(TemporalKey(2024, 3, 15, 9, 0), "coffee")
    vault.put(TemporalKey(2024, 3, 15, 14, 30), "**half past two**")
    return vault


@pytest.fixture
def error_handler():
    """ErrorHandler with duplicate suppression off so every error is routed."""
    return ErrorHandler(debug_mode=False, suppress_duplicate_seconds=0)
