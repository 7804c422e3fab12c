"""Input and output data models for the live hedge core."""

from live_hedge.models.enums import (
    BaselineSource,
    BetSide,
    CurrentPhase,
    GameStatus,
    HedgeStatus,
    MatchupGrade,
    PlayerTier,
    PropType,
    RiskFlag,
    RotationPhase,
    TransitionStatus,
    Trend,
    TrendDirection,
    Urgency,
    ZoneType,
)
from live_hedge.models.inputs import (
    HalfBaseline,
    LiveSnapshot,
    Pick,
    PlayerZoneStat,
    TeamZoneDefense,
)
from live_hedge.models.lines import LiveLine
from live_hedge.models.outputs import (
    HalftimeRecalibration,
    HedgeAction,
    HedgeThresholds,
    MiddleOpportunity,
    MinutesBreakdown,
    QuarterTransitionAlert,
    RotationEstimate,
    ShotZoneMatchup,
    ZoneMatchup,
)

__all__ = [
    "BaselineSource",
    "BetSide",
    "CurrentPhase",
    "GameStatus",
    "HedgeStatus",
    "MatchupGrade",
    "PlayerTier",
    "PropType",
    "RiskFlag",
    "RotationPhase",
    "TransitionStatus",
    "Trend",
    "TrendDirection",
    "Urgency",
    "ZoneType",
    "HalfBaseline",
    "LiveSnapshot",
    "Pick",
    "PlayerZoneStat",
    "TeamZoneDefense",
    "LiveLine",
    "HalftimeRecalibration",
    "HedgeAction",
    "HedgeThresholds",
    "MiddleOpportunity",
    "MinutesBreakdown",
    "QuarterTransitionAlert",
    "RotationEstimate",
    "ShotZoneMatchup",
    "ZoneMatchup",
]
