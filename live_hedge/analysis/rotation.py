"""
NBA rotation model.

Estimates when a player is on or off the court from typical coaching
patterns by tier:
- Stars: ~34-38 min, one rest window per half, close out games
- Starters: ~28-32 min, one slightly longer rest window per half
- Role players: <24 min, short stints while the starters rest

Remaining-minute projections feed the hedge probability; rest windows
feed the hedge thresholds.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from live_hedge.config import settings
from live_hedge.models.enums import CurrentPhase, PlayerTier, RotationPhase
from live_hedge.models.inputs import LiveSnapshot
from live_hedge.models.outputs import MinutesBreakdown, RotationEstimate
from live_hedge.utils.logging import get_logger
from live_hedge.utils.numeric import (
    GAME_MINUTES,
    QUARTER_MINUTES,
    clamp,
    ensure_exhaustive,
    parse_clock_minutes,
    parse_quarter,
    round1,
    safe_divide,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class RotationWindow:
    """A stint on or off the court, bounded by (quarter, minutes left on clock)."""

    start_quarter: int
    start_clock: float  # 12 = start of quarter, 0 = end
    end_quarter: int
    end_clock: float
    on_court: bool
    expected_minutes: float

    @property
    def start(self) -> float:
        return window_to_game_minutes(self.start_quarter, self.start_clock)

    @property
    def end(self) -> float:
        return window_to_game_minutes(self.end_quarter, self.end_clock)

    def contains(self, game_minutes: float) -> bool:
        return self.start <= game_minutes < self.end


# Stars: play the start of Q1 and Q3, sit mid-Q2 and mid-Q4, close out
STAR_WINDOWS: Tuple[RotationWindow, ...] = (
    RotationWindow(1, 12, 1, 5, True, 7),
    RotationWindow(1, 5, 2, 8, False, 0),
    RotationWindow(2, 8, 2, 0, True, 8),
    RotationWindow(3, 12, 3, 5, True, 7),
    RotationWindow(3, 5, 4, 8, False, 0),
    RotationWindow(4, 8, 4, 0, True, 8),
)

# Starters: same shape, shorter stints
STARTER_WINDOWS: Tuple[RotationWindow, ...] = (
    RotationWindow(1, 12, 1, 6, True, 6),
    RotationWindow(1, 6, 2, 6, False, 0),
    RotationWindow(2, 6, 2, 0, True, 6),
    RotationWindow(3, 12, 3, 6, True, 6),
    RotationWindow(3, 6, 4, 6, False, 0),
    RotationWindow(4, 6, 4, 0, True, 6),
)

# Role players: on the floor while the starters rest
ROLE_PLAYER_WINDOWS: Tuple[RotationWindow, ...] = (
    RotationWindow(1, 12, 1, 6, False, 0),
    RotationWindow(1, 6, 2, 6, True, 6),
    RotationWindow(2, 6, 2, 0, False, 0),
    RotationWindow(3, 12, 3, 6, False, 0),
    RotationWindow(3, 6, 4, 6, True, 6),
    RotationWindow(4, 6, 4, 0, False, 0),
)

ROTATION_WINDOWS: Dict[PlayerTier, Tuple[RotationWindow, ...]] = {
    PlayerTier.STAR: STAR_WINDOWS,
    PlayerTier.STARTER: STARTER_WINDOWS,
    PlayerTier.ROLE_PLAYER: ROLE_PLAYER_WINDOWS,
}

# Typical full-game minutes ceiling
MAX_EXPECTED_MINUTES: Dict[PlayerTier, float] = {
    PlayerTier.STAR: 38.0,
    PlayerTier.STARTER: 32.0,
    PlayerTier.ROLE_PLAYER: 20.0,
}

# +/- share of the remaining-minutes estimate
UNCERTAINTY_PCT: Dict[PlayerTier, float] = {
    PlayerTier.STAR: 0.15,
    PlayerTier.STARTER: 0.20,
    PlayerTier.ROLE_PLAYER: 0.25,
}

# Remaining-minutes multiplier in a blowout
BLOWOUT_MULTIPLIER: Dict[PlayerTier, float] = {
    PlayerTier.STAR: 0.5,
    PlayerTier.STARTER: 0.6,
    PlayerTier.ROLE_PLAYER: 1.3,
}

TIER_LABELS: Dict[PlayerTier, str] = {
    PlayerTier.STAR: "Star",
    PlayerTier.STARTER: "Starter",
    PlayerTier.ROLE_PLAYER: "Role player",
}

for _name, _table in (
    ("ROTATION_WINDOWS", ROTATION_WINDOWS),
    ("MAX_EXPECTED_MINUTES", MAX_EXPECTED_MINUTES),
    ("UNCERTAINTY_PCT", UNCERTAINTY_PCT),
    ("BLOWOUT_MULTIPLIER", BLOWOUT_MULTIPLIER),
    ("TIER_LABELS", TIER_LABELS),
):
    ensure_exhaustive(_table, PlayerTier, _name)

BLOWOUT_SCORE_DIFF = 20.0
BLOWOUT_START_QUARTER = 3
CLOSE_GAME_SCORE_DIFF = 8.0
CLOSE_GAME_STAR_BONUS = 3.0
# Minutes after a rest window ends during which the player still reads as returning
RETURN_GRACE_MINUTES = 2.0


def window_to_game_minutes(quarter: int, clock_minutes: float) -> float:
    return (quarter - 1) * QUARTER_MINUTES + (QUARTER_MINUTES - clock_minutes)


def _clamp_position(quarter: int, clock_minutes: float) -> Tuple[int, float]:
    quarter = int(clamp(quarter, 1, 4))
    clock_minutes = clamp(clock_minutes, 0.0, QUARTER_MINUTES)
    return quarter, clock_minutes


def game_minutes_elapsed(quarter: int, clock_minutes: float) -> float:
    """Convert quarter + clock to game minutes elapsed (0-48)."""
    quarter, clock_minutes = _clamp_position(quarter, clock_minutes)
    return window_to_game_minutes(quarter, clock_minutes)


def _current_window(tier: PlayerTier, game_minutes: float) -> Optional[RotationWindow]:
    for window in ROTATION_WINDOWS[tier]:
        if window.contains(game_minutes):
            return window
    return None


def _remaining_play_minutes(tier: PlayerTier, game_minutes: float) -> float:
    total = 0.0
    for window in ROTATION_WINDOWS[tier]:
        if window.end <= game_minutes or not window.on_court:
            continue
        if game_minutes >= window.start:
            total += window.end - game_minutes
        else:
            total += window.expected_minutes
    return total


def _next_transition(tier: PlayerTier, game_minutes: float) -> Tuple[float, bool]:
    """Minutes until the current window ends, and whether the player goes to the bench then."""
    window = _current_window(tier, game_minutes)
    if window is None:
        return 0.0, False
    return window.end - game_minutes, window.on_court


def _just_left_rest(tier: PlayerTier, game_minutes: float) -> bool:
    for window in ROTATION_WINDOWS[tier]:
        if not window.on_court and 0 <= game_minutes - window.end < RETURN_GRACE_MINUTES:
            return True
    return False


def rotation_phase_for(quarter: int, clock_minutes: float) -> RotationPhase:
    """Map the game clock to the coaching rotation phase."""
    if quarter <= 1:
        return RotationPhase.FIRST
    if quarter == 2:
        return RotationPhase.FIRST if clock_minutes >= 6 else RotationPhase.SECOND
    if quarter == 3:
        return RotationPhase.THIRD
    if quarter == 4:
        if clock_minutes <= 5:
            return RotationPhase.CLOSER
        return RotationPhase.THIRD if clock_minutes >= 6 else RotationPhase.FOURTH
    return RotationPhase.FOURTH


def infer_tier(
    minutes_played: float,
    game_progress: float,
    avg_minutes: Optional[float] = None,
) -> PlayerTier:
    """
    Infer a player's tier.

    Season average minutes win when known. Otherwise minutes played are
    normalized by game progress to a full-game pace.

    Args:
        minutes_played: Minutes logged so far
        game_progress: Percent of the game elapsed (0-100)
        avg_minutes: Season average minutes, if known

    Returns:
        PlayerTier (starter at tip-off, when nothing can be inferred)
    """
    if avg_minutes is not None:
        if avg_minutes >= 32:
            return PlayerTier.STAR
        if avg_minutes >= 24:
            return PlayerTier.STARTER
        return PlayerTier.ROLE_PLAYER

    progress = clamp(game_progress, 0.0, 100.0)
    expected_game_minutes = progress / 100.0 * GAME_MINUTES
    if expected_game_minutes <= 0:
        return PlayerTier.STARTER

    minutes_share = safe_divide(max(0.0, minutes_played or 0.0), expected_game_minutes)
    if minutes_share >= 0.75:
        return PlayerTier.STAR
    if minutes_share >= 0.55:
        return PlayerTier.STARTER
    return PlayerTier.ROLE_PLAYER


def estimate(
    tier: PlayerTier,
    quarter: int,
    clock_minutes: float,
    score_diff: float = 0.0,
    minutes_played: float = 0.0,
) -> RotationEstimate:
    """
    Rotation-aware estimate of the rest of a player's game.

    Out-of-domain inputs are clamped: quarter to 1-4, clock to 0-12,
    minutes played to >= 0.

    Args:
        tier: Player tier
        quarter: Current quarter
        clock_minutes: Minutes left on the quarter clock
        score_diff: Score differential (either sign)
        minutes_played: Minutes logged so far

    Returns:
        RotationEstimate
    """
    quarter, clock_minutes = _clamp_position(quarter, clock_minutes)
    minutes_played = max(0.0, minutes_played or 0.0)
    margin = abs(score_diff or 0.0)

    game_minutes = window_to_game_minutes(quarter, clock_minutes)
    window = _current_window(tier, game_minutes)
    remaining = _remaining_play_minutes(tier, game_minutes)
    minutes_until, going_to_bench = _next_transition(tier, game_minutes)
    lead = settings.rest_lead_minutes

    if window is not None and not window.on_court:
        phase = CurrentPhase.RETURNING if minutes_until < lead else CurrentPhase.REST
    elif _just_left_rest(tier, game_minutes):
        phase = CurrentPhase.RETURNING
    else:
        phase = CurrentPhase.ACTIVE

    closer_eligible = tier in (PlayerTier.STAR, PlayerTier.STARTER)

    if quarter == 4 and margin <= CLOSE_GAME_SCORE_DIFF and tier is PlayerTier.STAR:
        remaining += min(CLOSE_GAME_STAR_BONUS, GAME_MINUTES - game_minutes)
        closer_eligible = True

    if margin >= BLOWOUT_SCORE_DIFF and quarter >= BLOWOUT_START_QUARTER:
        remaining *= BLOWOUT_MULTIPLIER[tier]
        if tier is not PlayerTier.ROLE_PLAYER:
            closer_eligible = False

    remaining = min(remaining, max(0.0, MAX_EXPECTED_MINUTES[tier] - minutes_played))
    remaining = max(0.0, remaining)

    spread = UNCERTAINTY_PCT[tier]
    uncertainty = (round1(max(0.0, remaining * (1 - spread))), round1(remaining * (1 + spread)))

    if phase is CurrentPhase.REST:
        insight = f"{TIER_LABELS[tier]} in typical rest window."
        next_text = f"Returns in ~{math.ceil(minutes_until)} min"
    elif phase is CurrentPhase.RETURNING:
        insight = "About to re-enter game." if window is not None else "Back from rest window."
        next_text = "Entering game soon" if window is not None else "Just returned from rest"
    elif going_to_bench and minutes_until < 4:
        insight = f"Approaching bench rotation in {math.ceil(minutes_until)} min."
        next_text = f"Rest window in ~{math.ceil(minutes_until)} min"
    else:
        insight = f"Active in rotation. ~{round(remaining)} min remaining."
        if minutes_until > 0:
            state = "Rest" if going_to_bench else "Playing"
            next_text = f"{state} for ~{math.ceil(minutes_until)} more min"
        else:
            next_text = ""

    if quarter == 4 and clock_minutes <= 8 and closer_eligible:
        insight += " Closer-eligible for crunch time."

    logger.debug(
        f"Rotation {tier.value} Q{quarter} {clock_minutes:.1f}m: phase={phase.value}, "
        f"remaining={remaining:.1f}"
    )
    return RotationEstimate(
        tier=tier,
        current_phase=phase,
        rotation_phase=rotation_phase_for(quarter, clock_minutes),
        expected_remaining=round1(remaining),
        uncertainty_range=uncertainty,
        rest_window_remaining=round1(minutes_until) if phase is CurrentPhase.REST else 0.0,
        closer_eligible=closer_eligible,
        is_in_rest_window=phase is CurrentPhase.REST,
        next_transition=next_text,
        rotation_insight=insight,
    )


def is_approaching_rest_window(
    tier: PlayerTier,
    quarter: int,
    clock_minutes: float,
    lead_minutes: Optional[float] = None,
) -> bool:
    """True when an on-court stint ends within lead_minutes (default 3)."""
    lead = settings.rest_lead_minutes if lead_minutes is None else lead_minutes
    game_minutes = game_minutes_elapsed(quarter, clock_minutes)
    window = _current_window(tier, game_minutes)
    if window is None or not window.on_court:
        return False
    # The final stint ends the game, not in a rest window
    if window.end >= GAME_MINUTES:
        return False
    until_rest = window.end - game_minutes
    return 0 < until_rest <= lead


def minutes_breakdown(tier: PlayerTier, quarter: int, clock_minutes: float) -> MinutesBreakdown:
    """Remaining on-court minutes grouped by the quarter each stint ends in."""
    quarter, clock_minutes = _clamp_position(quarter, clock_minutes)
    game_minutes = window_to_game_minutes(quarter, clock_minutes)
    buckets = {"this_quarter": 0.0, "q2": 0.0, "q3": 0.0, "q4": 0.0, "closer": 0.0}

    for window in ROTATION_WINDOWS[tier]:
        if not window.on_court or window.end <= game_minutes:
            continue
        minutes = window.end - max(window.start, game_minutes)
        if window.end_quarter == quarter:
            buckets["this_quarter"] += minutes
        elif window.end_quarter == 2:
            buckets["q2"] += minutes
        elif window.end_quarter == 3:
            buckets["q3"] += minutes
        elif window.end_clock <= 5:
            buckets["closer"] += minutes
        else:
            buckets["q4"] += minutes

    return MinutesBreakdown(**{key: round1(value) for key, value in buckets.items()})


def estimate_for_snapshot(snapshot: LiveSnapshot, avg_minutes: Optional[float] = None) -> RotationEstimate:
    """Infer the tier from a live snapshot and estimate from its clock and score."""
    tier = infer_tier(snapshot.minutes_played or 0.0, snapshot.game_progress, avg_minutes)
    quarter = parse_quarter(snapshot.period) or 1
    return estimate(
        tier,
        quarter,
        parse_clock_minutes(snapshot.clock),
        snapshot.score_differential,
        snapshot.minutes_played or 0.0,
    )
