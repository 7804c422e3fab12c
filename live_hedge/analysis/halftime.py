"""
Halftime recalibration.

At the half the linear projection (first-half rate x 24) overstates most
players: second halves regress. The recalibrator rebuilds the projection
from the player's historical half split when the baseline store has one,
otherwise from a tier-based regression factor, then nudges live confidence
by how far the first half beat or missed expectations.

Runs once per pick per half. Later halftime polls reuse the stored result.
"""
from __future__ import annotations

from threading import Lock
from typing import Callable, Dict, Optional, Tuple

from live_hedge.config import HALFTIME_CONFIG, HalftimeConfig
from live_hedge.models.enums import BaselineSource, BetSide, GameStatus, PropType
from live_hedge.models.inputs import HalfBaseline, LiveSnapshot, Pick
from live_hedge.models.outputs import HalftimeRecalibration
from live_hedge.utils.logging import get_logger
from live_hedge.utils.numeric import HALF_MINUTES, clamp, round1, safe_divide

logger = get_logger(__name__)

# (player_name, prop_type) -> baseline or None; absence is a valid answer
BaselineLookup = Callable[[str, PropType], Optional[HalfBaseline]]


def tier_regression_factor(avg_minutes: float, config: HalftimeConfig = HALFTIME_CONFIG) -> float:
    """Second-half regression by minutes tier: 0.95 star, 0.92 starter, 0.88 role."""
    if avg_minutes >= config.star_min_avg_minutes:
        return config.star_regression
    if avg_minutes >= config.starter_min_avg_minutes:
        return config.starter_regression
    return config.role_regression


def pace_adjustment(pace_rating: float, config: HalftimeConfig = HALFTIME_CONFIG) -> float:
    return (pace_rating - 100.0) / 100.0 * config.pace_weight


def confidence_boost(
    variance_1h_pct: float,
    side: BetSide,
    config: HalftimeConfig = HALFTIME_CONFIG,
) -> float:
    """
    Confidence shift from first-half variance.

    Hot first half: +5 for over, -10 for under.
    Cold first half: -10 for over, +5 for under.
    """
    if variance_1h_pct >= config.variance_trigger_pct:
        return config.favorable_boost if side is BetSide.OVER else config.unfavorable_penalty
    if variance_1h_pct <= -config.variance_trigger_pct:
        return config.unfavorable_penalty if side is BetSide.OVER else config.favorable_boost
    return 0.0


def _halftime_insight(variance_1h_pct: float, regression_factor: float, config: HalftimeConfig) -> str:
    regression_pct = round((1 - regression_factor) * 100)
    if variance_1h_pct >= config.variance_trigger_pct:
        return (
            f"1st half exceeded expectations by {variance_1h_pct:.0f}%. "
            f"Expect ~{regression_pct}% 2nd half regression."
        )
    if variance_1h_pct <= -config.variance_trigger_pct:
        return (
            f"1st half underperformed by {abs(variance_1h_pct):.0f}%. "
            f"Needs a 2nd half bounce back to reach the line."
        )
    return f"1st half on expected pace. Standard {regression_pct}% 2nd half regression applied."


def _baseline_terms(
    pick: Pick,
    baseline: Optional[HalfBaseline],
    avg_minutes: float,
    config: HalftimeConfig,
) -> Tuple[float, float, float, BaselineSource]:
    """(expected_1h, historical_1h_rate, regression_factor, source)."""
    if baseline is not None and baseline.first_half_pct > 0:
        if pick.l10_average is not None:
            expected_1h = pick.l10_average * baseline.first_half_pct
        else:
            expected_1h = baseline.first_half_rate * HALF_MINUTES
        rate_1h = baseline.first_half_rate or safe_divide(expected_1h, HALF_MINUTES)
        regression = safe_divide(baseline.second_half_pct, baseline.first_half_pct, default=1.0)
        return expected_1h, rate_1h, regression, BaselineSource.BASELINE

    full_game = pick.l10_average if pick.l10_average is not None else pick.line
    expected_1h = full_game / 2
    rate_1h = safe_divide(expected_1h, HALF_MINUTES)
    return expected_1h, rate_1h, tier_regression_factor(avg_minutes, config), BaselineSource.TIER_HEURISTIC


def calculate_halftime_recalibration(
    pick: Pick,
    snapshot: LiveSnapshot,
    baseline: Optional[HalfBaseline] = None,
    config: HalftimeConfig = HALFTIME_CONFIG,
) -> HalftimeRecalibration:
    """
    Rebuild the full-game projection at halftime.

    Deterministic: identical inputs always give identical output.

    Args:
        pick: The tracked pick (l10_average / avg_minutes used for fallbacks)
        snapshot: Halftime snapshot
        baseline: Historical half split for the player, if stored
        config: Regression heuristics

    Returns:
        HalftimeRecalibration
    """
    actual_1h = snapshot.current_value
    avg_minutes = pick.avg_minutes
    if avg_minutes is None:
        # Minutes at the half, doubled, stand in for the season average
        avg_minutes = (snapshot.minutes_played or 0.0) * 2

    expected_1h, rate_1h, regression, source = _baseline_terms(pick, baseline, avg_minutes, config)

    variance_1h_pct = safe_divide(actual_1h - expected_1h, expected_1h) * 100
    rate_2h = rate_1h * regression
    pace_adj = pace_adjustment(snapshot.pace_rating, config)
    fatigue_adj = config.fatigue_adjustment

    linear = actual_1h + snapshot.rate_per_minute * HALF_MINUTES
    recalibrated = (actual_1h + rate_2h * HALF_MINUTES) * (1 + fatigue_adj) * (1 + pace_adj)

    boost = confidence_boost(variance_1h_pct, pick.side, config)
    adjusted_confidence = clamp(
        snapshot.confidence + boost, config.min_confidence, config.max_confidence
    )

    return HalftimeRecalibration(
        actual_1h=actual_1h,
        expected_1h=round(expected_1h, 2),
        variance_1h_pct=round1(variance_1h_pct),
        historical_1h_rate=round(rate_1h, 4),
        historical_2h_rate=round(rate_2h, 4),
        regression_factor=round(regression, 4),
        pace_adjustment=round(pace_adj, 4),
        fatigue_adjustment=fatigue_adj,
        linear_projection=round1(linear),
        recalibrated_projection=round1(recalibrated),
        confidence_boost=boost,
        adjusted_confidence=adjusted_confidence,
        baseline_source=source,
        insight=_halftime_insight(variance_1h_pct, regression, config),
    )


class HalftimeRecalibrator:
    """
    Applies the halftime recalibration once per pick per half.

    The first halftime snapshot for a pick computes and stores the result;
    later halftime snapshots get the stored result re-attached without a
    second computation. While the break lasts the recalibrated projection
    replaces the feed's projected final and the adjusted confidence
    replaces the feed's confidence.
    """

    def __init__(
        self,
        baseline_lookup: Optional[BaselineLookup] = None,
        config: HalftimeConfig = HALFTIME_CONFIG,
    ):
        self.baseline_lookup = baseline_lookup
        self.config = config
        self._results: Dict[str, HalftimeRecalibration] = {}
        self._lock = Lock()

    def has_recalibrated(self, pick_id: str) -> bool:
        return pick_id in self._results

    def get(self, pick_id: str) -> Optional[HalftimeRecalibration]:
        return self._results.get(pick_id)

    def apply(self, pick: Pick, snapshot: LiveSnapshot) -> LiveSnapshot:
        """Return the snapshot with the halftime recalibration merged in (halftime only)."""
        if snapshot.game_status is not GameStatus.HALFTIME:
            return snapshot

        with self._lock:
            recalibration = self._results.get(pick.id)
            if recalibration is None:
                baseline = None
                if self.baseline_lookup is not None:
                    baseline = self.baseline_lookup(pick.player_name, pick.prop_type)
                recalibration = calculate_halftime_recalibration(pick, snapshot, baseline, self.config)
                self._results[pick.id] = recalibration
                logger.info(
                    f"Halftime recalibration for pick {pick.id} ({recalibration.baseline_source.value}): "
                    f"{recalibration.linear_projection} linear -> "
                    f"{recalibration.recalibrated_projection} recalibrated, "
                    f"confidence {recalibration.confidence_boost:+.0f}"
                )

        return snapshot.model_copy(
            update={
                "halftime_recalibration": recalibration,
                "projected_final": recalibration.recalibrated_projection,
                "confidence": recalibration.adjusted_confidence,
            }
        )

    def release(self, pick_id: str) -> None:
        with self._lock:
            self._results.pop(pick_id, None)
