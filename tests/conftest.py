"""Shared pytest fixtures and configuration hooks."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

# Ensure the project root (which contains the `live_hedge` package) is importable
PROJECT_ROOT = Path(__file__).resolve().parents[1]
PROJECT_ROOT_STR = str(PROJECT_ROOT)
if PROJECT_ROOT_STR not in sys.path:
    sys.path.insert(0, PROJECT_ROOT_STR)


# =============================================================================
# Environment Variables Setup - MUST run before any live_hedge imports
# =============================================================================
# live_hedge.config reads these when the module-level settings are built

TEST_ENV_VARS = {
    "HEDGE_ALERT_TTL_SECONDS": "180",
    "HEDGE_ALERT_SWEEP_SECONDS": "30",
    "HEDGE_ZONE_CACHE_TTL_SECONDS": "3600",
    "HEDGE_MIDDLE_MIN_MOVE": "2",
    "HEDGE_REST_LEAD_MINUTES": "3",
    # Logging
    "LOG_LEVEL": "WARNING",
    "LOG_FORMAT": "",
}

# Apply test environment variables
for key, value in TEST_ENV_VARS.items():
    if key not in os.environ:
        os.environ[key] = value


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Ensure test environment variables are set for each test."""
    for key, value in TEST_ENV_VARS.items():
        monkeypatch.setenv(key, value)


# =============================================================================
# Factories
# =============================================================================

@pytest.fixture
def make_pick():
    """Build a Pick with sensible defaults; override any field by keyword."""
    from live_hedge.models import Pick

    def _make(**overrides):
        fields = {
            "id": "pick-1",
            "player_name": "Jayson Tatum",
            "prop_type": "points",
            "line": 24.5,
            "side": "over",
            "opponent": "Miami Heat",
        }
        fields.update(overrides)
        return Pick(**fields)

    return _make


@pytest.fixture
def make_snapshot():
    """Build a LiveSnapshot with sensible mid-game defaults."""
    from live_hedge.models import LiveSnapshot

    def _make(**overrides):
        fields = {
            "is_live": True,
            "game_status": "in_progress",
            "current_value": 12.0,
            "projected_final": 25.0,
            "game_progress": 50.0,
            "period": "2",
            "clock": "0:00",
            "pace_rating": 100.0,
            "minutes_played": 18.0,
            "rate_per_minute": 0.6,
            "trend": "stable",
            "risk_flags": [],
            "confidence": 60.0,
        }
        fields.update(overrides)
        return LiveSnapshot(**fields)

    return _make
