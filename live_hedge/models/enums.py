"""Enumerations shared by inputs, outputs and the enum-indexed lookup tables."""
from enum import Enum


class BetSide(str, Enum):
    OVER = "over"
    UNDER = "under"

    @property
    def opposite(self) -> "BetSide":
        return BetSide.UNDER if self is BetSide.OVER else BetSide.OVER


class PropType(str, Enum):
    POINTS = "points"
    REBOUNDS = "rebounds"
    ASSISTS = "assists"
    THREES = "threes"
    STEALS = "steals"
    BLOCKS = "blocks"
    TURNOVERS = "turnovers"
    PRA = "pra"
    PTS_REBS = "pts_rebs"
    PTS_ASTS = "pts_asts"
    REBS_ASTS = "rebs_asts"


# Prop types driven by shot attempts, the only ones with a zone matchup
SCORING_PROP_TYPES = frozenset({PropType.POINTS, PropType.THREES})


class GameStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    HALFTIME = "halftime"
    FINAL = "final"


class Trend(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class TrendDirection(str, Enum):
    """Trend relative to the bet: improving means good for the pick's side."""

    IMPROVING = "improving"
    WORSENING = "worsening"
    STABLE = "stable"


class RiskFlag(str, Enum):
    BLOWOUT = "blowout"
    FOUL_TROUBLE = "foul_trouble"
    GARBAGE_TIME = "garbage_time"
    LOW_MINUTES = "low_minutes"


# Flags counted toward the multi-risk hedge trigger
SEVERE_RISK_FLAGS = frozenset({RiskFlag.BLOWOUT, RiskFlag.FOUL_TROUBLE, RiskFlag.GARBAGE_TIME})


class PlayerTier(str, Enum):
    STAR = "star"
    STARTER = "starter"
    ROLE_PLAYER = "role_player"


class CurrentPhase(str, Enum):
    ACTIVE = "active"
    REST = "rest"
    RETURNING = "returning"


class RotationPhase(str, Enum):
    FIRST = "first"
    SECOND = "second"
    THIRD = "third"
    FOURTH = "fourth"
    CLOSER = "closer"


class TransitionStatus(str, Enum):
    AHEAD = "ahead"
    ON_TRACK = "on_track"
    BEHIND = "behind"
    CRITICAL = "critical"


class Urgency(str, Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class HedgeStatus(str, Enum):
    ON_TRACK = "on_track"
    MONITOR = "monitor"
    ALERT = "alert"
    URGENT = "urgent"
    PROFIT_LOCK = "profit_lock"


class ZoneType(str, Enum):
    RESTRICTED_AREA = "restricted_area"
    PAINT = "paint"
    MID_RANGE = "mid_range"
    CORNER_3 = "corner_3"
    ABOVE_BREAK_3 = "above_break_3"


class MatchupGrade(str, Enum):
    ADVANTAGE = "advantage"
    NEUTRAL = "neutral"
    DISADVANTAGE = "disadvantage"


class BaselineSource(str, Enum):
    BASELINE = "baseline"
    TIER_HEURISTIC = "tier_heuristic"
