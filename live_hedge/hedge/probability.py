"""
Hit probability, dynamic hedge thresholds and hedge sizing.

The probability is a bucketed read of the projected buffer over the line
at rotation-aware remaining minutes, shifted by the shot zone matchup when
one exists. It is a heuristic on a 5-95 scale, not a calibrated model.
"""
from __future__ import annotations

from typing import Dict, Optional, Tuple

from live_hedge.config import HEDGE_THRESHOLDS, HedgeThresholdConfig
from live_hedge.models.enums import BetSide
from live_hedge.models.outputs import HedgeThresholds
from live_hedge.utils.numeric import clamp, ensure_exhaustive, first_matching

# (minimum buffer, probability) bands, checked top down
PROBABILITY_BANDS: Dict[BetSide, Tuple[Tuple[float, float], ...]] = {
    BetSide.OVER: ((3, 85), (1, 70), (0, 55), (-1, 40), (-2, 25)),
    BetSide.UNDER: ((3, 85), (1, 70), (0, 55), (-1, 40)),
}

# Probability below every band
PROBABILITY_FLOOR: Dict[BetSide, float] = {
    BetSide.OVER: 15,
    BetSide.UNDER: 25,
}

ensure_exhaustive(PROBABILITY_BANDS, BetSide, "PROBABILITY_BANDS")
ensure_exhaustive(PROBABILITY_FLOOR, BetSide, "PROBABILITY_FLOOR")


def projected_buffer(
    current_value: float,
    line: float,
    rate_per_minute: float,
    minutes_remaining: float,
    side: BetSide,
) -> float:
    """Projected margin in the bet's favour: positive is good for the side."""
    projected = current_value + rate_per_minute * max(0.0, minutes_remaining)
    if side is BetSide.OVER:
        return projected - line
    return line - projected


def zone_modifier(zone_score: float, config: HedgeThresholdConfig = HEDGE_THRESHOLDS) -> float:
    """Probability points from the matchup score, before the side's sign is applied."""
    cap = config.zone_modifier_cap
    return clamp(zone_score * config.zone_modifier_scale, -cap, cap)


def hit_probability(
    current_value: float,
    line: float,
    rate_per_minute: float,
    minutes_remaining: float,
    side: BetSide,
    zone_score: Optional[float] = None,
    config: HedgeThresholdConfig = HEDGE_THRESHOLDS,
) -> float:
    """
    Probability (%) that the pick cashes.

    Args:
        current_value: Stat value so far
        line: Effective line
        rate_per_minute: Live production rate
        minutes_remaining: Rotation-aware on-court minutes left
        side: Bet side
        zone_score: Overall shot zone matchup score; None omits the zone term
        config: Threshold configuration

    Returns:
        Probability clamped to [min_probability, max_probability]
    """
    buffer = projected_buffer(current_value, line, rate_per_minute, minutes_remaining, side)
    probability = first_matching(buffer, PROBABILITY_BANDS[side], PROBABILITY_FLOOR[side])

    if zone_score is not None:
        modifier = zone_modifier(zone_score, config)
        # A good scoring matchup helps an over and hurts an under
        probability += modifier if side is BetSide.OVER else -modifier

    return clamp(probability, config.min_probability, config.max_probability)


def has_zone_edge(zone_score: Optional[float], config: HedgeThresholdConfig = HEDGE_THRESHOLDS) -> Tuple[bool, bool]:
    """(advantage, disadvantage) for the player; both False without a matchup."""
    if zone_score is None:
        return False, False
    return zone_score > config.zone_edge_score, zone_score < -config.zone_edge_score


def dynamic_thresholds(
    side: BetSide,
    in_rest_window: bool,
    approaching_rest: bool,
    zone_score: Optional[float] = None,
    config: HedgeThresholdConfig = HEDGE_THRESHOLDS,
) -> HedgeThresholds:
    """
    Urgent/alert/monitor probability thresholds for one evaluation.

    Rest shifts only apply to overs: a benched player cannot add to an over
    but helps an under. Zone shifts raise the thresholds when the matchup
    works against the bet and lower them when it works for it.
    """
    urgent, alert, monitor = config.urgent_base, config.alert_base, config.monitor_base

    if side is BetSide.OVER:
        if in_rest_window:
            shift = config.rest_shift
        elif approaching_rest:
            shift = config.approaching_rest_shift
        else:
            shift = (0.0, 0.0, 0.0)
        urgent, alert, monitor = urgent + shift[0], alert + shift[1], monitor + shift[2]

    advantage, disadvantage = has_zone_edge(zone_score, config)
    if advantage or disadvantage:
        against_bet = (side is BetSide.OVER) == disadvantage
        sign = 1.0 if against_bet else -1.0
        urgent += sign * config.zone_shift[0]
        alert += sign * config.zone_shift[1]
        monitor += sign * config.zone_shift[2]

    return HedgeThresholds(urgent=urgent, alert=alert, monitor=monitor)


def hedge_sizing(probability: float) -> str:
    """Suggested hedge stake by hit probability."""
    if probability >= 70:
        return "No hedge needed"
    if probability >= 50:
        return "$10-25 (light hedge)"
    if probability >= 30:
        return "$25-50 (moderate)"
    return "$50-100 (strong hedge)"
