"""Live analyzers feeding the hedge engine."""

from live_hedge.analysis.halftime import HalftimeRecalibrator, calculate_halftime_recalibration
from live_hedge.analysis.quarter_transition import (
    AlertCache,
    QuarterTransitionTracker,
    calculate_halftime_transition,
    calculate_quarter_transition,
)
from live_hedge.analysis.rotation import (
    estimate,
    estimate_for_snapshot,
    infer_tier,
    is_approaching_rest_window,
    minutes_breakdown,
)
from live_hedge.analysis.shot_zones import ShotZoneAnalyzer, ZoneTableCache, ZoneTables, analyze_matchup

__all__ = [
    "HalftimeRecalibrator",
    "calculate_halftime_recalibration",
    "AlertCache",
    "QuarterTransitionTracker",
    "calculate_halftime_transition",
    "calculate_quarter_transition",
    "estimate",
    "estimate_for_snapshot",
    "infer_tier",
    "is_approaching_rest_window",
    "minutes_breakdown",
    "ShotZoneAnalyzer",
    "ZoneTableCache",
    "ZoneTables",
    "analyze_matchup",
]
