from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env_float(key: str, default: float) -> float:
    """Resolve a numeric environment variable, falling back to default when unset."""
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"Environment variable {key} must be numeric, got {value!r}") from exc


@dataclass(frozen=True)
class Settings:
    """
    Runtime settings for the live hedge core.

    Every field can be overridden through the environment:
    - HEDGE_ALERT_TTL_SECONDS: how long a quarter alert stays attached
    - HEDGE_ALERT_SWEEP_SECONDS: minimum spacing between cache sweeps
    - HEDGE_ZONE_CACHE_TTL_SECONDS: lifetime of the bulk shot-zone tables
    - HEDGE_MIDDLE_MIN_MOVE: line movement that opens a middle window
    - HEDGE_REST_LEAD_MINUTES: lead time for "approaching rest" flags
    """
    alert_ttl_seconds: float = field(
        default_factory=lambda: _env_float("HEDGE_ALERT_TTL_SECONDS", 180.0)
    )
    alert_sweep_seconds: float = field(
        default_factory=lambda: _env_float("HEDGE_ALERT_SWEEP_SECONDS", 30.0)
    )
    zone_cache_ttl_seconds: float = field(
        default_factory=lambda: _env_float("HEDGE_ZONE_CACHE_TTL_SECONDS", 3600.0)
    )
    middle_min_move: float = field(
        default_factory=lambda: _env_float("HEDGE_MIDDLE_MIN_MOVE", 2.0)
    )
    rest_lead_minutes: float = field(
        default_factory=lambda: _env_float("HEDGE_REST_LEAD_MINUTES", 3.0)
    )


# ============================================================================
# TUNED HEURISTICS - calibrated against historical hedge outcomes
# ============================================================================

@dataclass(frozen=True)
class HedgeThresholdConfig:
    """Probability thresholds for the hedge state cascade."""

    # Base thresholds (hit probability %)
    urgent_base: float = 25.0
    alert_base: float = 45.0
    monitor_base: float = 65.0

    # Player on the bench, side=over
    rest_shift: tuple[float, float, float] = (15.0, 15.0, 10.0)
    # Rest window within lead time, side=over
    approaching_rest_shift: tuple[float, float, float] = (8.0, 8.0, 5.0)
    # Zone matchup against the bet (advantage for under, disadvantage for over)
    zone_shift: tuple[float, float, float] = (10.0, 10.0, 5.0)

    # |overall matchup score| beyond which a zone edge counts
    zone_edge_score: float = 3.0
    # zone score -> probability points, capped
    zone_modifier_scale: float = 3.0
    zone_modifier_cap: float = 15.0

    # Rule gates
    bench_probability_ceiling: float = 60.0
    approaching_rest_probability_ceiling: float = 55.0
    blowout_progress_pct: float = 60.0
    slow_pace_rating: float = 95.0
    small_negative_gap: float = 2.0

    # Output clamp for evaluated states
    min_probability: float = 5.0
    max_probability: float = 95.0


@dataclass(frozen=True)
class HalftimeConfig:
    """Second-half regression heuristics used when no baseline is stored."""

    star_min_avg_minutes: float = 32.0
    starter_min_avg_minutes: float = 24.0
    star_regression: float = 0.95
    starter_regression: float = 0.92
    role_regression: float = 0.88

    # paceAdj = (pace - 100) / 100 * pace_weight
    pace_weight: float = 0.5
    # Reserved multiplicative hook; no fatigue signal is wired yet
    fatigue_adjustment: float = 0.0

    # |variance 1H %| beyond which confidence moves
    variance_trigger_pct: float = 15.0
    favorable_boost: float = 5.0
    unfavorable_penalty: float = -10.0

    min_confidence: float = 1.0
    max_confidence: float = 99.0


# Global instances
settings = Settings()
HEDGE_THRESHOLDS = HedgeThresholdConfig()
HALFTIME_CONFIG = HalftimeConfig()
