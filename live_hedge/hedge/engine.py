"""
Hedge decision engine.

Fuses the live snapshot (already carrying any quarter and halftime
adjustments), the rotation estimate and the optional shot zone matchup into
one HedgeAction per pick:

    1. resolve the effective line and its movement
    2. middle opportunity            -> profit_lock, stop
    3. already decided               -> on_track / urgent, stop
    4. gap to line, rates
    5. hit probability (+ zone modifier)
    6. dynamic thresholds
    7. first matching rule in HEDGE_RULES
    8. assemble the action

Pure: no I/O, no shared state.
"""
from __future__ import annotations

from typing import Optional

from live_hedge.analysis.rotation import estimate, estimate_for_snapshot, is_approaching_rest_window
from live_hedge.analysis.shot_zones import ZONE_NAMES
from live_hedge.config import HEDGE_THRESHOLDS, HedgeThresholdConfig
from live_hedge.hedge.middle import find_middle_opportunity
from live_hedge.hedge.probability import (
    dynamic_thresholds,
    has_zone_edge,
    hit_probability,
    zone_modifier,
)
from live_hedge.hedge.rules import HedgeContext, select_rule
from live_hedge.models.enums import (
    SEVERE_RISK_FLAGS,
    BetSide,
    CurrentPhase,
    GameStatus,
    HedgeStatus,
    PlayerTier,
    Trend,
    TrendDirection,
    Urgency,
)
from live_hedge.models.inputs import LiveSnapshot, Pick
from live_hedge.models.lines import LiveLine
from live_hedge.models.outputs import HedgeAction, RotationEstimate, ShotZoneMatchup
from live_hedge.utils.logging import get_logger
from live_hedge.utils.numeric import GAME_MINUTES, parse_clock_minutes, parse_quarter, round1, safe_divide

logger = get_logger(__name__)


def effective_line(pick: Pick, live_line: Optional[LiveLine] = None) -> float:
    """Live line feed first, then the pick's tracked live book line, then the original."""
    if live_line is not None:
        return live_line.line
    if pick.live_book_line is not None:
        return pick.live_book_line
    return pick.line


def trend_direction(trend: Trend, side: BetSide) -> TrendDirection:
    """Map the raw stat trend onto the bet: rising helps an over, falling helps an under."""
    if trend is Trend.STABLE:
        return TrendDirection.STABLE
    rising = trend is Trend.UP
    if rising == (side is BetSide.OVER):
        return TrendDirection.IMPROVING
    return TrendDirection.WORSENING


def format_time_remaining(period: str, clock: str, game_progress: float) -> str:
    if clock and period:
        label = f"Q{period}" if period.isdigit() else period
        return f"{clock} left in {label}"
    minutes_left = max(0.0, GAME_MINUTES * (1 - game_progress / 100))
    if minutes_left < 1:
        return "< 1 min left"
    return f"~{minutes_left:.0f} min remaining"


def zone_insight(matchup: Optional[ShotZoneMatchup], config: HedgeThresholdConfig = HEDGE_THRESHOLDS) -> Optional[str]:
    """One-line read of the primary zone when the matchup has a clear edge."""
    if matchup is None or not matchup.zones:
        return None
    primary = next((zone for zone in matchup.zones if zone.zone is matchup.primary_zone), None)
    if primary is None:
        return None

    advantage, disadvantage = has_zone_edge(matchup.overall_matchup_score, config)
    if not (advantage or disadvantage):
        return None

    label = "advantage" if advantage else "disadvantage"
    shot_pct = round(matchup.primary_zone_pct * 100)
    return (
        f"Zone {label} in {ZONE_NAMES[matchup.primary_zone]} "
        f"({shot_pct}% of shots vs #{primary.defense_rank} defense)"
    )


def pre_game_action(pick: Pick, live_line: Optional[LiveLine] = None) -> HedgeAction:
    """Hold recommendation before any live data exists."""
    line = effective_line(pick, live_line)
    return HedgeAction(
        status=HedgeStatus.ON_TRACK,
        headline="Pre-Game",
        message="Game has not started yet. Waiting for live data.",
        action="Hold position - monitor at tip-off",
        urgency=Urgency.NONE,
        hit_probability=50.0,
        time_remaining="Not started",
        original_line=pick.line,
        effective_line=line,
        line_movement=round(line - pick.line, 2),
        rule="pre_game",
        live_line=live_line,
    )


def _rotation_for(
    pick: Pick,
    snapshot: LiveSnapshot,
    rotation: Optional[RotationEstimate],
    tier: Optional[PlayerTier],
) -> RotationEstimate:
    if rotation is not None:
        return rotation
    if tier is None:
        return estimate_for_snapshot(snapshot, pick.avg_minutes)
    return estimate(
        tier,
        parse_quarter(snapshot.period) or 1,
        parse_clock_minutes(snapshot.clock),
        snapshot.score_differential,
        snapshot.minutes_played or 0.0,
    )


def evaluate_hedge(
    pick: Pick,
    snapshot: Optional[LiveSnapshot],
    rotation: Optional[RotationEstimate] = None,
    tier: Optional[PlayerTier] = None,
    zone_matchup: Optional[ShotZoneMatchup] = None,
    live_line: Optional[LiveLine] = None,
    config: HedgeThresholdConfig = HEDGE_THRESHOLDS,
) -> HedgeAction:
    """
    Produce the hedge recommendation for one pick.

    Args:
        pick: The tracked pick
        snapshot: Live snapshot with upstream adjustments merged; None before tip-off
        rotation: Precomputed rotation estimate; estimated from the snapshot when omitted
        tier: Known player tier (e.g. from a roster feed). Ignored when rotation
            is given; with neither, the tier is inferred from the pick's season
            average or the snapshot minutes.
        zone_matchup: Shot zone matchup; None omits the zone terms entirely
        live_line: Live line overlay from the live line feed
        config: Threshold configuration

    Returns:
        HedgeAction
    """
    if snapshot is None or snapshot.game_status is GameStatus.SCHEDULED:
        return pre_game_action(pick, live_line)

    side = pick.side
    hedge_label = side.opposite.value.upper()
    line = effective_line(pick, live_line)
    movement = round(line - pick.line, 2)
    current = snapshot.current_value
    direction = trend_direction(snapshot.trend, side)
    time_left = format_time_remaining(snapshot.period, snapshot.clock, snapshot.game_progress)

    base = dict(
        original_line=pick.line,
        effective_line=line,
        line_movement=movement,
        trend_direction=direction,
        time_remaining=time_left,
        current_rate=snapshot.rate_per_minute,
        live_line=live_line,
    )

    # Middle opportunity outranks everything else
    middle = find_middle_opportunity(pick.line, line, side)
    if middle is not None:
        logger.debug(f"Pick {pick.id}: middle opportunity {middle.lower_bound}-{middle.upper_bound}")
        return HedgeAction(
            status=HedgeStatus.PROFIT_LOCK,
            headline="MIDDLE OPPORTUNITY",
            message=(
                f"Line moved {movement:+g} ({pick.line:g} -> {line:g}). "
                f"A {hedge_label} {line:g} bet wins alongside your {side.value.upper()} {pick.line:g} "
                f"if the final lands between {middle.lower_bound:g} and {middle.upper_bound:g}."
            ),
            action=f"BET {hedge_label} {line:g} NOW - middle window of {middle.window_size:g}",
            urgency=Urgency.HIGH,
            hit_probability=50.0,
            rule="middle_opportunity",
            middle_opportunity=middle,
            **base,
        )

    # The wager settles against its own line, whatever the market has moved to
    if current >= pick.line:
        if side is BetSide.OVER:
            return HedgeAction(
                status=HedgeStatus.ON_TRACK,
                headline="ALREADY HIT",
                message=f"Current {current:g} already clears line {pick.line:g}. The OVER has cashed.",
                action="No action needed. Bet already won.",
                urgency=Urgency.NONE,
                hit_probability=100.0,
                gap_to_line=round1(current - pick.line),
                rule="already_hit",
                **base,
            )
        return HedgeAction(
            status=HedgeStatus.URGENT,
            headline="LINE EXCEEDED",
            message=f"Current {current:g} is already at or past line {pick.line:g}. The UNDER cannot win.",
            action="No hedge can recover this bet. Stop tracking.",
            urgency=Urgency.HIGH,
            hit_probability=0.0,
            gap_to_line=round1(pick.line - current),
            rule="line_exceeded",
            **base,
        )

    rotation = _rotation_for(pick, snapshot, rotation, tier)
    minutes_remaining = rotation.expected_remaining
    quarter = parse_quarter(snapshot.period) or 1
    clock_minutes = parse_clock_minutes(snapshot.clock)
    in_rest = rotation.current_phase is CurrentPhase.REST
    approaching = is_approaching_rest_window(rotation.tier, quarter, clock_minutes)

    projected = snapshot.projected_final
    gap = projected - line if side is BetSide.OVER else line - projected
    needed = line - current if side is BetSide.OVER else 0.0
    rate_needed = safe_divide(needed, minutes_remaining)

    zone_score = zone_matchup.overall_matchup_score if zone_matchup is not None else None
    probability = hit_probability(
        current, line, snapshot.rate_per_minute, minutes_remaining, side, zone_score, config
    )
    thresholds = dynamic_thresholds(side, in_rest, approaching, zone_score, config)
    advantage, disadvantage = has_zone_edge(zone_score, config)

    ctx = HedgeContext(
        pick=pick,
        snapshot=snapshot,
        line=line,
        hit_probability=probability,
        thresholds=thresholds,
        gap_to_line=gap,
        rate_needed=rate_needed,
        current_rate=snapshot.rate_per_minute,
        minutes_remaining=minutes_remaining,
        linear_minutes=max(0.0, GAME_MINUTES * (1 - snapshot.game_progress / 100)),
        rotation=rotation,
        in_rest_window=in_rest,
        approaching_rest=approaching,
        severe_risk_count=len(snapshot.risk_flags & SEVERE_RISK_FLAGS),
        zone_advantage=advantage,
        zone_disadvantage=disadvantage,
        zone_insight=zone_insight(zone_matchup, config),
        zone_matchup=zone_matchup,
        trend_direction=direction,
        config=config,
    )
    rule, outcome = select_rule(ctx)

    logger.debug(
        f"Pick {pick.id}: rule={rule.name} status={outcome.status.value} "
        f"p={probability:.0f} thresholds={thresholds.urgent:.0f}/{thresholds.alert:.0f}/{thresholds.monitor:.0f}"
    )

    zone_term = None
    if zone_score is not None:
        modifier = zone_modifier(zone_score, config)
        zone_term = modifier if side is BetSide.OVER else -modifier

    return HedgeAction(
        status=outcome.status,
        headline=outcome.headline,
        message=outcome.message,
        action=outcome.action,
        urgency=outcome.urgency,
        hit_probability=probability,
        gap_to_line=round1(gap),
        rate_needed=round(rate_needed, 3),
        rule=rule.name,
        zone_modifier=zone_term,
        thresholds=thresholds,
        player_tier=rotation.tier,
        rotation=rotation,
        rotation_minutes=minutes_remaining,
        **base,
    )
