"""
Shot zone matchup analysis.

Scores where a player takes his shots against how the opponent defends
those zones. Two bulk tables (player zone stats, team zone defense) are
loaded once and held for up to an hour; lookups never fetch.

Grading (per zone):
- advantage:    player FG% beats defense FG% allowed by > 5 pts, OR defense ranks 21-30
- disadvantage: player FG% trails by > 5 pts, OR defense ranks 1-9
- neutral:      otherwise

The FG-differential clause is checked first, so a hot shooter grades as an
advantage even against an elite (top third) zone defense.

The overall score sums impact x frequency, and impact already scales by
(1 + frequency). Frequency is therefore weighted twice; the hedge
thresholds downstream were tuned against this score as is.
"""
from __future__ import annotations

import math
import time
from threading import Lock
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

import pandas as pd
from pydantic import ValidationError

from live_hedge.config import settings
from live_hedge.exceptions import ZoneTableError
from live_hedge.models.enums import SCORING_PROP_TYPES, MatchupGrade, PropType, ZoneType
from live_hedge.models.inputs import PlayerZoneStat, TeamZoneDefense
from live_hedge.models.outputs import ShotZoneMatchup, ZoneMatchup
from live_hedge.utils.logging import get_logger
from live_hedge.utils.numeric import ensure_exhaustive
from live_hedge.utils.team_names import normalize_opponent

logger = get_logger(__name__)

ZONE_NAMES: Dict[ZoneType, str] = {
    ZoneType.RESTRICTED_AREA: "Restricted Area",
    ZoneType.PAINT: "Paint",
    ZoneType.MID_RANGE: "Mid-Range",
    ZoneType.CORNER_3: "Corner 3",
    ZoneType.ABOVE_BREAK_3: "Above Break 3",
}

BASE_IMPACT: Dict[MatchupGrade, int] = {
    MatchupGrade.ADVANTAGE: 5,
    MatchupGrade.NEUTRAL: 0,
    MatchupGrade.DISADVANTAGE: -5,
}

PROP_LABELS: Dict[PropType, str] = {
    PropType.POINTS: "PTS",
    PropType.THREES: "3PM",
}

ensure_exhaustive(ZONE_NAMES, ZoneType, "ZONE_NAMES")
ensure_exhaustive(BASE_IMPACT, MatchupGrade, "BASE_IMPACT")
for _prop in SCORING_PROP_TYPES:
    if _prop not in PROP_LABELS:
        raise LookupError(f"PROP_LABELS is missing scoring prop type: {_prop.value}")

FG_DIFFERENTIAL_EDGE = 0.05
# Ranks 1-9 are the top third of the league, 21-30 the bottom third
TOP_THIRD_MAX_RANK = 9
BOTTOM_THIRD_MIN_RANK = 21

PLAYER_ZONE_COLUMNS = ("player_name", "zone", "fg_pct", "frequency")
TEAM_DEFENSE_COLUMNS = ("team_abbrev", "zone", "opp_fg_pct", "rank")


# ============================================================================
# SCORING
# ============================================================================

def matchup_grade(player_fg_pct: float, defense_fg_pct: float, defense_rank: int) -> MatchupGrade:
    differential = player_fg_pct - defense_fg_pct
    if differential > FG_DIFFERENTIAL_EDGE or defense_rank >= BOTTOM_THIRD_MIN_RANK:
        return MatchupGrade.ADVANTAGE
    if differential < -FG_DIFFERENTIAL_EDGE or defense_rank <= TOP_THIRD_MAX_RANK:
        return MatchupGrade.DISADVANTAGE
    return MatchupGrade.NEUTRAL


def zone_impact(grade: MatchupGrade, frequency: float) -> int:
    """Impact in [-10, 10]: base impact scaled by (1 + frequency), rounded half up."""
    raw = BASE_IMPACT[grade] * (1 + frequency)
    # Halves round toward +infinity
    return int(math.floor(raw + 0.5))


def matchup_recommendation(score: float, primary_zone: Optional[ZoneType], prop_type: PropType) -> str:
    if primary_zone is None:
        return "Insufficient data"

    zone_name = ZONE_NAMES[primary_zone]
    label = PROP_LABELS.get(prop_type, "PTS")

    if score > 5:
        return f"Strong {label} matchup - {zone_name} advantage"
    if score > 0:
        return f"Favorable {label} matchup in {zone_name}"
    if score < -5:
        return f"Tough {label} matchup - {zone_name} disadvantage"
    if score < 0:
        return f"Slightly unfavorable {label} matchup"
    return f"Neutral {label} matchup"


def analyze_matchup(
    player_zones: List[PlayerZoneStat],
    defense_zones: List[TeamZoneDefense],
    player_name: str,
    opponent: str,
    prop_type: PropType,
) -> Optional[ShotZoneMatchup]:
    """
    Score one player's zones against one team's zone defense.

    Returns:
        ShotZoneMatchup, or None when either side has no rows
    """
    if not player_zones or not defense_zones:
        return None

    defense_by_zone = {row.zone: row for row in defense_zones}
    primary = max(player_zones, key=lambda row: row.frequency)

    zones: List[ZoneMatchup] = []
    total_score = 0.0
    for row in player_zones:
        defense = defense_by_zone.get(row.zone)
        if defense is None:
            continue

        grade = matchup_grade(row.fg_pct, defense.opp_fg_pct, defense.rank)
        impact = zone_impact(grade, row.frequency)
        zones.append(
            ZoneMatchup(
                zone=row.zone,
                frequency=row.frequency,
                player_fg_pct=row.fg_pct,
                defense_fg_pct=defense.opp_fg_pct,
                defense_rank=defense.rank,
                defense_rating=defense.defense_rating,
                matchup_grade=grade,
                impact=impact,
            )
        )
        total_score += impact * row.frequency

    return ShotZoneMatchup(
        player_name=player_name,
        opponent=opponent,
        prop_type=prop_type,
        zones=zones,
        overall_matchup_score=round(total_score, 1),
        primary_zone=primary.zone,
        primary_zone_pct=primary.frequency,
        recommendation=matchup_recommendation(total_score, primary.zone, prop_type),
    )


# ============================================================================
# BULK TABLES
# ============================================================================

TableInput = Union[pd.DataFrame, Iterable[dict]]


def _as_frame(rows: TableInput, required: Tuple[str, ...], table_name: str) -> pd.DataFrame:
    frame = rows if isinstance(rows, pd.DataFrame) else pd.DataFrame(list(rows))
    missing = [column for column in required if column not in frame.columns]
    if missing and not frame.empty:
        raise ZoneTableError(f"{table_name} is missing required columns: {', '.join(missing)}")
    return frame


def _index_rows(frame: pd.DataFrame, key: str, model: type) -> Dict[str, list]:
    """Group rows by key and validate each into its model."""
    indexed: Dict[str, list] = {}
    if frame.empty:
        return indexed
    for value, group in frame.groupby(key, sort=False):
        indexed[str(value)] = [model(**_clean_record(record)) for record in group.to_dict("records")]
    return indexed


class ZoneTables:
    """The two bulk zone tables, validated and indexed once."""

    def __init__(self, player_zones: TableInput, team_defense: TableInput):
        player_frame = _as_frame(player_zones, PLAYER_ZONE_COLUMNS, "player_zone_stats")
        defense_frame = _as_frame(team_defense, TEAM_DEFENSE_COLUMNS, "team_zone_defense")

        try:
            self._players = _index_rows(player_frame, "player_name", PlayerZoneStat)
            self._defenses = _index_rows(defense_frame, "team_abbrev", TeamZoneDefense)
        except ValidationError as e:
            error = e.errors()[0]
            field = ".".join(str(part) for part in error["loc"])
            raise ZoneTableError(f"Invalid zone table row ({field}): {error['msg']}") from e

    @property
    def player_count(self) -> int:
        return len(self._players)

    @property
    def team_count(self) -> int:
        return len(self._defenses)

    def player_zones(self, player_name: str) -> List[PlayerZoneStat]:
        return self._players.get(player_name, [])

    def defense_zones(self, team_abbrev: str) -> List[TeamZoneDefense]:
        return self._defenses.get(team_abbrev, [])


def _clean_record(record: dict) -> dict:
    """Drop NaN cells so optional model fields fall back to their defaults."""
    return {key: value for key, value in record.items() if not (isinstance(value, float) and pd.isna(value))}


class ZoneTableCache:
    """
    Holds ZoneTables for up to ttl_seconds (default one hour).

    The loader is a caller-supplied callable returning
    (player_zone_rows, team_defense_rows); it only runs on refresh.
    """

    def __init__(
        self,
        loader: Optional[Callable[[], Tuple[TableInput, TableInput]]] = None,
        ttl_seconds: Optional[float] = None,
    ):
        self.loader = loader
        self.ttl_seconds = settings.zone_cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._tables: Optional[ZoneTables] = None
        self._loaded_at: Optional[float] = None
        self._lock = Lock()

    def load(self, player_zones: TableInput, team_defense: TableInput, now: Optional[float] = None) -> ZoneTables:
        """Replace the cached tables with freshly supplied rows."""
        tables = ZoneTables(player_zones, team_defense)
        with self._lock:
            self._tables = tables
            self._loaded_at = time.time() if now is None else now
        logger.info(
            f"Loaded zone tables: {tables.player_count} players, {tables.team_count} team defenses"
        )
        return tables

    def is_stale(self, now: Optional[float] = None) -> bool:
        if self._tables is None or self._loaded_at is None:
            return True
        now = time.time() if now is None else now
        return now - self._loaded_at >= self.ttl_seconds

    def get(self, now: Optional[float] = None) -> Optional[ZoneTables]:
        """
        Current tables, refreshing through the loader when stale.

        Without a loader, stale tables are still served rather than dropped.
        A refresh that yields invalid tables keeps the last good tables (or
        None) and is retried on the next call.
        """
        if self.is_stale(now) and self.loader is not None:
            player_rows, defense_rows = self.loader()
            try:
                return self.load(player_rows, defense_rows, now)
            except ZoneTableError as e:
                logger.error(f"Zone table refresh rejected, keeping previous tables: {e}")
        return self._tables


class ShotZoneAnalyzer:
    """Memoized-table lookup of a player/opponent matchup."""

    def __init__(self, cache: ZoneTableCache):
        self.cache = cache

    def get_matchup(
        self,
        player_name: str,
        opponent_name: Optional[str],
        prop_type: PropType,
        now: Optional[float] = None,
    ) -> Optional[ShotZoneMatchup]:
        """
        Matchup for a scoring prop, or None when it does not apply or data is missing.
        """
        if prop_type not in SCORING_PROP_TYPES or not opponent_name:
            return None

        tables = self.cache.get(now)
        if tables is None:
            return None

        opponent = normalize_opponent(opponent_name)
        matchup = analyze_matchup(
            tables.player_zones(player_name),
            tables.defense_zones(opponent),
            player_name,
            opponent,
            prop_type,
        )
        if matchup is None:
            logger.debug(f"No zone data for {player_name} vs {opponent}")
        return matchup
