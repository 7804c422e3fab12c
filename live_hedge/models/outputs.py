"""
Pydantic models for the objects the core exposes per pick.

All models are frozen; consumers serialize with ``model_dump()``.
"""

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from live_hedge.models.enums import (
    BaselineSource,
    BetSide,
    CurrentPhase,
    HedgeStatus,
    MatchupGrade,
    PlayerTier,
    PropType,
    RotationPhase,
    TransitionStatus,
    TrendDirection,
    Urgency,
    ZoneType,
)
from live_hedge.models.lines import LiveLine


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class RotationEstimate(_Frozen):
    """Rotation-aware playing time projection, recomputed every snapshot."""

    tier: PlayerTier
    current_phase: CurrentPhase
    rotation_phase: RotationPhase
    expected_remaining: float = Field(ge=0)
    uncertainty_range: Tuple[float, float]
    rest_window_remaining: float = Field(default=0.0, ge=0)
    closer_eligible: bool
    is_in_rest_window: bool
    next_transition: str = ""
    rotation_insight: str = ""


class MinutesBreakdown(_Frozen):
    """Remaining on-court minutes bucketed by the quarter they fall in."""

    this_quarter: float = 0.0
    q2: float = 0.0
    q3: float = 0.0
    q4: float = 0.0
    closer: float = 0.0


class QuarterTransitionAlert(_Frozen):
    """Pace check fired when a quarter (or the first half) completes."""

    quarter: int = Field(ge=1, le=4)
    headline: str
    status: TransitionStatus
    quarter_value: float
    expected_quarter_value: float
    pace_gap_pct: float
    current_total: float
    projected_final: float
    required_remaining: float
    current_velocity: float
    required_velocity: float
    velocity_delta: float
    insight: str
    action: str
    urgency: Urgency


class HalftimeRecalibration(_Frozen):
    """Second-half projection rebuilt from first-half production."""

    actual_1h: float
    expected_1h: float
    variance_1h_pct: float
    historical_1h_rate: float
    historical_2h_rate: float
    regression_factor: float
    pace_adjustment: float
    fatigue_adjustment: float
    linear_projection: float
    recalibrated_projection: float
    confidence_boost: float
    adjusted_confidence: float = Field(ge=1, le=99)
    baseline_source: BaselineSource
    insight: str


class ZoneMatchup(_Frozen):
    zone: ZoneType
    frequency: float
    player_fg_pct: float
    defense_fg_pct: float
    defense_rank: int
    defense_rating: Optional[str] = None
    matchup_grade: MatchupGrade
    impact: int


class ShotZoneMatchup(_Frozen):
    """Player shot profile scored against an opponent's zone defense."""

    player_name: str
    opponent: str
    prop_type: PropType
    zones: List[ZoneMatchup]
    overall_matchup_score: float
    primary_zone: ZoneType
    primary_zone_pct: float
    recommendation: str


class MiddleOpportunity(_Frozen):
    """Outcome window in which the original bet and a live opposing bet both win."""

    original_line: float
    live_line: float
    lower_bound: float
    upper_bound: float
    window_size: float
    hedge_side: BetSide


class HedgeThresholds(_Frozen):
    urgent: float
    alert: float
    monitor: float


class HedgeAction(_Frozen):
    """Final recommendation for a pick."""

    status: HedgeStatus
    headline: str
    message: str
    action: str
    urgency: Urgency
    trend_direction: TrendDirection = TrendDirection.STABLE
    hit_probability: float = Field(ge=0, le=100)
    gap_to_line: float = 0.0
    rate_needed: float = 0.0
    current_rate: float = 0.0
    time_remaining: str = ""
    original_line: float
    effective_line: float
    line_movement: float = 0.0
    rule: str
    zone_modifier: Optional[float] = None
    thresholds: Optional[HedgeThresholds] = None
    player_tier: Optional[PlayerTier] = None
    rotation: Optional[RotationEstimate] = None
    rotation_minutes: Optional[float] = None
    live_line: Optional[LiveLine] = None
    middle_opportunity: Optional[MiddleOpportunity] = None

