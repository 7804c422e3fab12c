"""
Pydantic models for collaborator payloads entering the core.

Validation happens here, at the boundary: out-of-range progress and
confidence values are clamped, unknown risk flags are dropped, and
malformed payloads raise ``pydantic.ValidationError``.
"""

from typing import Any, FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from live_hedge.models.enums import (
    BetSide,
    GameStatus,
    PropType,
    RiskFlag,
    Trend,
    ZoneType,
)
from live_hedge.models.outputs import HalftimeRecalibration, QuarterTransitionAlert
from live_hedge.utils.numeric import clamp

_KNOWN_RISK_FLAGS = {flag.value for flag in RiskFlag}


class Pick(BaseModel):
    """A tracked wager."""

    model_config = ConfigDict(frozen=True)

    id: str
    player_name: str
    prop_type: PropType
    line: float
    side: BetSide
    opponent: Optional[str] = None
    live_book_line: Optional[float] = None

    # Pre-game context used by the halftime recalibration
    l10_average: Optional[float] = Field(default=None, ge=0)
    avg_minutes: Optional[float] = Field(default=None, ge=0)


class LiveSnapshot(BaseModel):
    """Per-pick live state, replaced wholesale on every poll."""

    model_config = ConfigDict(frozen=True)

    is_live: bool = True
    game_status: GameStatus = GameStatus.IN_PROGRESS
    current_value: float = 0.0
    projected_final: float = 0.0
    game_progress: float = 0.0
    period: str = ""
    clock: str = ""
    pace_rating: float = 100.0
    minutes_played: Optional[float] = None
    rate_per_minute: float = 0.0
    trend: Trend = Trend.STABLE
    risk_flags: FrozenSet[RiskFlag] = frozenset()
    confidence: float = 50.0
    score_differential: float = 0.0

    # Merged upstream before the hedge engine runs
    current_quarter: Optional[int] = None
    quarter_transition: Optional[QuarterTransitionAlert] = None
    halftime_recalibration: Optional[HalftimeRecalibration] = None

    @field_validator("game_progress", mode="before")
    @classmethod
    def _clamp_progress(cls, value: Any) -> float:
        return clamp(float(value), 0.0, 100.0)

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: Any) -> float:
        return clamp(float(value), 1.0, 99.0)

    @field_validator("minutes_played", mode="before")
    @classmethod
    def _non_negative_minutes(cls, value: Any) -> Optional[float]:
        if value is None:
            return None
        return max(0.0, float(value))

    @field_validator("risk_flags", mode="before")
    @classmethod
    def _drop_unknown_flags(cls, value: Any) -> Any:
        if value is None:
            return frozenset()
        if isinstance(value, str):
            value = [value]
        return frozenset(
            flag for flag in value
            if isinstance(flag, RiskFlag) or str(flag) in _KNOWN_RISK_FLAGS
        )

    @field_validator("period", mode="before")
    @classmethod
    def _period_as_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    def has_flag(self, flag: RiskFlag) -> bool:
        return flag in self.risk_flags


class HalfBaseline(BaseModel):
    """Historical per-half production split for a (player, prop type)."""

    model_config = ConfigDict(frozen=True)

    player_name: str
    prop_type: PropType
    first_half_pct: float = Field(ge=0, le=1)
    second_half_pct: float = Field(ge=0, le=1)
    first_half_rate: float = Field(default=0.0, ge=0)
    second_half_rate: float = Field(default=0.0, ge=0)
    q1_pct: Optional[float] = None
    q2_pct: Optional[float] = None
    q3_pct: Optional[float] = None
    q4_pct: Optional[float] = None
    sample_size: int = 0


class PlayerZoneStat(BaseModel):
    """One row of the bulk player zone table."""

    model_config = ConfigDict(frozen=True)

    player_name: str
    zone: ZoneType
    fga: float = 0.0
    fgm: float = 0.0
    fg_pct: float
    frequency: float = Field(ge=0, le=1)


class TeamZoneDefense(BaseModel):
    """One row of the bulk team zone defense table."""

    model_config = ConfigDict(frozen=True)

    team_abbrev: str
    zone: ZoneType
    opp_fga: float = 0.0
    opp_fg_pct: float
    league_avg_pct: Optional[float] = None
    defense_rating: Optional[str] = None
    rank: int = Field(ge=1, le=30)
