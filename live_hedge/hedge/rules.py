"""
The hedge state cascade as an ordered rule list.

Thresholds overlap on purpose, so exactly the first matching rule wins and
the order below must not change:

    1. bench_behind_over       player resting, over, probability < 60      -> urgent
    2. hedge_now               2+ severe risks, below urgent, late blowout -> urgent
    3. rest_approaching        rest window close, over, probability < 55   -> alert
    4. hedge_alert             1 severe risk, below alert, slow pace,
                               zone disadvantage                           -> alert
    5. monitor                 below monitor, or just short of the line    -> monitor
    6. on_track                everything else                             -> on_track
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from live_hedge.config import HEDGE_THRESHOLDS, HedgeThresholdConfig
from live_hedge.exceptions import LiveHedgeError
from live_hedge.hedge.probability import hedge_sizing
from live_hedge.models.enums import BetSide, HedgeStatus, RiskFlag, TrendDirection, Urgency
from live_hedge.models.inputs import LiveSnapshot, Pick
from live_hedge.models.outputs import HedgeThresholds, RotationEstimate, ShotZoneMatchup


@dataclass(frozen=True)
class HedgeContext:
    """Everything a rule may read, computed once per evaluation."""

    pick: Pick
    snapshot: LiveSnapshot
    line: float
    hit_probability: float
    thresholds: HedgeThresholds
    gap_to_line: float
    rate_needed: float
    current_rate: float
    minutes_remaining: float
    linear_minutes: float
    rotation: RotationEstimate
    in_rest_window: bool
    approaching_rest: bool
    severe_risk_count: int
    zone_advantage: bool
    zone_disadvantage: bool
    zone_insight: Optional[str]
    zone_matchup: Optional[ShotZoneMatchup]
    trend_direction: TrendDirection
    config: HedgeThresholdConfig = HEDGE_THRESHOLDS

    @property
    def side(self) -> BetSide:
        return self.pick.side

    @property
    def is_over(self) -> bool:
        return self.pick.side is BetSide.OVER

    @property
    def hedge_label(self) -> str:
        return self.pick.side.opposite.value.upper()

    @property
    def slow_pace(self) -> bool:
        return self.is_over and self.snapshot.pace_rating < self.config.slow_pace_rating

    def has_flag(self, flag: RiskFlag) -> bool:
        return self.snapshot.has_flag(flag)


@dataclass(frozen=True)
class RuleOutcome:
    status: HedgeStatus
    headline: str
    message: str
    action: str
    urgency: Urgency


@dataclass(frozen=True)
class HedgeRule:
    priority: int
    name: str
    predicate: Callable[[HedgeContext], bool]
    producer: Callable[[HedgeContext], RuleOutcome]


def _fmt_line(line: float) -> str:
    return f"{line:g}"


def _rate_clause(ctx: HedgeContext) -> str:
    if ctx.is_over:
        return f"Producing {ctx.current_rate:.2f}/min, need {ctx.rate_needed:.2f}/min"
    return f"Producing {ctx.current_rate:.2f}/min against a {_fmt_line(ctx.line)} ceiling"


def _trend_description(ctx: HedgeContext) -> str:
    if ctx.trend_direction is TrendDirection.IMPROVING:
        return "Trending in your favour."
    if ctx.trend_direction is TrendDirection.WORSENING:
        return "Trending against you."
    return "Holding steady."


# ============================================================================
# RULE 1: BENCHED WHILE BEHIND ON AN OVER
# ============================================================================

def _bench_behind_over(ctx: HedgeContext) -> bool:
    return (
        ctx.in_rest_window
        and ctx.is_over
        and ctx.hit_probability < ctx.config.bench_probability_ceiling
    )


def _bench_outcome(ctx: HedgeContext) -> RuleOutcome:
    rotation = ctx.rotation
    return RuleOutcome(
        status=HedgeStatus.URGENT,
        headline="PLAYER BENCHED",
        message=(
            f"Currently on bench ({rotation.rotation_phase.value} rotation rest). "
            f"{rotation.next_transition}. {_rate_clause(ctx)} "
            f"with ~{ctx.minutes_remaining:.0f} play minutes remaining."
        ),
        action=f"BET {ctx.hedge_label} {_fmt_line(ctx.line)} NOW - Limited remaining court time",
        urgency=Urgency.HIGH,
    )


# ============================================================================
# RULE 2: MULTIPLE RISKS OR VERY LOW PROBABILITY
# ============================================================================

def _hedge_now(ctx: HedgeContext) -> bool:
    late_blowout = (
        ctx.has_flag(RiskFlag.BLOWOUT)
        and ctx.snapshot.game_progress > ctx.config.blowout_progress_pct
    )
    return (
        ctx.severe_risk_count >= 2
        or ctx.hit_probability < ctx.thresholds.urgent
        or late_blowout
    )


def _hedge_now_outcome(ctx: HedgeContext) -> RuleOutcome:
    snapshot = ctx.snapshot
    if ctx.has_flag(RiskFlag.BLOWOUT):
        message = (
            f"Blowout detected ({snapshot.game_progress:.0f}% through game). High chance starters sit. "
            f"Only {ctx.minutes_remaining:.0f} min of meaningful play remaining."
        )
    elif ctx.has_flag(RiskFlag.FOUL_TROUBLE):
        message = (
            f"Player in foul trouble. Minutes at risk. Current: {snapshot.current_value:g}, "
            f"line {_fmt_line(ctx.line)}. {ctx.hit_probability:.0f}% chance to hit."
        )
    else:
        message = (
            f"Only {ctx.hit_probability:.0f}% chance to hit {_fmt_line(ctx.line)}. "
            f"{_rate_clause(ctx)} with {ctx.minutes_remaining:.0f} min left."
        )

    if ctx.zone_insight and ctx.zone_disadvantage:
        message += f" {ctx.zone_insight} amplifies risk."

    return RuleOutcome(
        status=HedgeStatus.URGENT,
        headline="HEDGE NOW",
        message=message,
        action=f"BET {ctx.hedge_label} {_fmt_line(ctx.line)} NOW - {hedge_sizing(ctx.hit_probability)}",
        urgency=Urgency.HIGH,
    )


# ============================================================================
# RULE 3: REST WINDOW APPROACHING ON AN OVER
# ============================================================================

def _rest_approaching(ctx: HedgeContext) -> bool:
    return (
        ctx.approaching_rest
        and ctx.is_over
        and ctx.hit_probability < ctx.config.approaching_rest_probability_ceiling
    )


def _rest_approaching_outcome(ctx: HedgeContext) -> RuleOutcome:
    message = (
        f"Approaching bench rotation. Current: {ctx.snapshot.current_value:g}, need {_fmt_line(ctx.line)}. "
        f"Only ~{ctx.minutes_remaining:.0f} play minutes projected (vs {ctx.linear_minutes:.0f} linear)."
    )
    if ctx.zone_insight:
        message += f" {ctx.zone_insight}."

    return RuleOutcome(
        status=HedgeStatus.ALERT,
        headline="REST APPROACHING",
        message=message,
        action=f"Prepare {ctx.hedge_label} {_fmt_line(ctx.line)} hedge before rest window",
        urgency=Urgency.MEDIUM,
    )


# ============================================================================
# RULE 4: SINGLE RISK OR MODERATE CONCERN
# ============================================================================

def _hedge_alert(ctx: HedgeContext) -> bool:
    return (
        ctx.severe_risk_count >= 1
        or ctx.hit_probability < ctx.thresholds.alert
        or ctx.slow_pace
        or ctx.zone_disadvantage
    )


def _hedge_alert_outcome(ctx: HedgeContext) -> RuleOutcome:
    snapshot = ctx.snapshot
    if ctx.slow_pace:
        message = (
            f"Slow pace ({snapshot.pace_rating:.0f}) reducing possessions. "
            f"Projected {snapshot.projected_final:.1f} vs line {_fmt_line(ctx.line)}. "
            f"Gap: {ctx.gap_to_line:.1f}"
        )
    elif ctx.zone_disadvantage and ctx.zone_matchup is not None:
        message = (
            f"Shot chart mismatch: {ctx.zone_matchup.recommendation}. "
            f"Projected {snapshot.projected_final:.1f} vs line {_fmt_line(ctx.line)}."
        )
    else:
        message = (
            f"Trailing by {abs(ctx.gap_to_line):.1f} with {ctx.minutes_remaining:.0f} min left. "
            f"{_rate_clause(ctx)}."
        )

    if ctx.zone_insight:
        message += f" {ctx.zone_insight}."

    return RuleOutcome(
        status=HedgeStatus.ALERT,
        headline="HEDGE ALERT",
        message=message,
        action=f"Consider {ctx.hedge_label} {_fmt_line(ctx.line)} - {hedge_sizing(ctx.hit_probability)}",
        urgency=Urgency.MEDIUM,
    )


# ============================================================================
# RULE 5: SLIGHTLY OFF PACE
# ============================================================================

def _monitor(ctx: HedgeContext) -> bool:
    small_gap = -ctx.config.small_negative_gap < ctx.gap_to_line < 0
    return ctx.hit_probability < ctx.thresholds.monitor or small_gap


def _monitor_outcome(ctx: HedgeContext) -> RuleOutcome:
    message = (
        f"Slightly off pace. Projected {ctx.snapshot.projected_final:.1f} vs line {_fmt_line(ctx.line)} "
        f"({ctx.hit_probability:.0f}% probability). {_trend_description(ctx)}"
    )
    if ctx.zone_insight:
        message += f" {ctx.zone_insight}."

    return RuleOutcome(
        status=HedgeStatus.MONITOR,
        headline="MONITOR CLOSELY",
        message=message,
        action=(
            f"Watch the next {ctx.minutes_remaining / 4:.0f} minutes. "
            f"Prepare {ctx.hedge_label} hedge if trend worsens."
        ),
        urgency=Urgency.LOW,
    )


# ============================================================================
# RULE 6: DEFAULT
# ============================================================================

def _always(ctx: HedgeContext) -> bool:
    return True


def _on_track_outcome(ctx: HedgeContext) -> RuleOutcome:
    direction = "exceeds" if ctx.is_over else "stays under"
    message = (
        f"Projected {ctx.snapshot.projected_final:.1f} {direction} line {_fmt_line(ctx.line)} "
        f"by {ctx.gap_to_line:.1f}. {ctx.hit_probability:.0f}% probability. "
        f"Rate: {ctx.current_rate:.2f}/min."
    )
    if ctx.zone_insight and ctx.zone_advantage:
        message += f" {ctx.zone_insight} provides additional support."

    return RuleOutcome(
        status=HedgeStatus.ON_TRACK,
        headline="ON TRACK",
        message=message,
        action="Hold position. No hedge needed currently.",
        urgency=Urgency.NONE,
    )


HEDGE_RULES: List[HedgeRule] = sorted(
    [
        HedgeRule(1, "bench_behind_over", _bench_behind_over, _bench_outcome),
        HedgeRule(2, "hedge_now", _hedge_now, _hedge_now_outcome),
        HedgeRule(3, "rest_approaching", _rest_approaching, _rest_approaching_outcome),
        HedgeRule(4, "hedge_alert", _hedge_alert, _hedge_alert_outcome),
        HedgeRule(5, "monitor", _monitor, _monitor_outcome),
        HedgeRule(6, "on_track", _always, _on_track_outcome),
    ],
    key=lambda rule: rule.priority,
)


def select_rule(ctx: HedgeContext, rules: Optional[List[HedgeRule]] = None) -> Tuple[HedgeRule, RuleOutcome]:
    """First rule whose predicate holds, with its outcome."""
    for rule in rules or HEDGE_RULES:
        if rule.predicate(ctx):
            return rule, rule.producer(ctx)
    raise LiveHedgeError("No hedge rule matched; the rule list needs a default rule")
