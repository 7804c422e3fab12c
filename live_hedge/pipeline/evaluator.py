"""
Per-poll evaluation of tracked picks.

Chains the analyzers in the order the hedge engine expects:

    snapshot -> quarter tracking -> halftime recalibration
             -> rotation + zone matchup -> hedge decision

The evaluator holds the only cross-poll state (alert cache, halftime
guard, zone table cache) and never schedules itself; the caller invokes
it once per poll cycle.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from live_hedge.analysis.halftime import BaselineLookup, HalftimeRecalibrator
from live_hedge.analysis.quarter_transition import QuarterTransitionTracker
from live_hedge.analysis.rotation import estimate_for_snapshot
from live_hedge.analysis.shot_zones import ShotZoneAnalyzer
from live_hedge.exceptions import LiveHedgeError
from live_hedge.hedge.engine import evaluate_hedge
from live_hedge.models.enums import GameStatus
from live_hedge.models.inputs import LiveSnapshot, Pick
from live_hedge.models.lines import LiveLine
from live_hedge.models.outputs import (
    HalftimeRecalibration,
    HedgeAction,
    QuarterTransitionAlert,
    RotationEstimate,
    ShotZoneMatchup,
)
from live_hedge.utils.logging import get_logger

logger = get_logger(__name__)

PollItem = Tuple[Pick, Optional[LiveSnapshot], Optional[LiveLine]]


@dataclass
class PickEvaluation:
    """Everything computed for one pick in one poll."""

    pick_id: str
    evaluated_at: float
    hedge: Optional[HedgeAction] = None
    snapshot: Optional[LiveSnapshot] = None
    rotation: Optional[RotationEstimate] = None
    zone_matchup: Optional[ShotZoneMatchup] = None
    error: Optional[str] = None

    @property
    def quarter_transition(self) -> Optional[QuarterTransitionAlert]:
        return self.snapshot.quarter_transition if self.snapshot else None

    @property
    def halftime_recalibration(self) -> Optional[HalftimeRecalibration]:
        return self.snapshot.halftime_recalibration if self.snapshot else None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class PollSummary:
    """Result of one evaluate_all call."""

    evaluations: List[PickEvaluation] = field(default_factory=list)
    alerts_evicted: int = 0

    @property
    def failed(self) -> List[PickEvaluation]:
        return [evaluation for evaluation in self.evaluations if not evaluation.ok]


class LivePickEvaluator:
    """
    Turns (pick, snapshot, live line) into a PickEvaluation.

    Usage:
        evaluator = LivePickEvaluator(
            zone_analyzer=ShotZoneAnalyzer(ZoneTableCache(loader=load_zone_tables)),
            baseline_lookup=store.half_baseline,
        )

        # Every poll
        summary = evaluator.evaluate_all(items)

        # Pick no longer tracked
        evaluator.release(pick_id)
    """

    def __init__(
        self,
        zone_analyzer: Optional[ShotZoneAnalyzer] = None,
        baseline_lookup: Optional[BaselineLookup] = None,
        tracker: Optional[QuarterTransitionTracker] = None,
        recalibrator: Optional[HalftimeRecalibrator] = None,
    ):
        self.zone_analyzer = zone_analyzer
        self.tracker = tracker or QuarterTransitionTracker()
        self.recalibrator = recalibrator or HalftimeRecalibrator(baseline_lookup=baseline_lookup)

    def _zone_matchup(self, pick: Pick, now: float) -> Optional[ShotZoneMatchup]:
        if self.zone_analyzer is None:
            return None
        return self.zone_analyzer.get_matchup(pick.player_name, pick.opponent, pick.prop_type, now)

    def evaluate(
        self,
        pick: Pick,
        snapshot: Optional[LiveSnapshot],
        live_line: Optional[LiveLine] = None,
        now: Optional[float] = None,
    ) -> PickEvaluation:
        """
        Evaluate one pick for the current poll.

        Args:
            pick: The tracked pick
            snapshot: Latest live snapshot; None before tip-off
            live_line: Latest live line overlay, if any
            now: Unix timestamp (defaults to time.time())

        Returns:
            PickEvaluation with the hedge recommendation
        """
        now = time.time() if now is None else now

        if snapshot is None or snapshot.game_status is GameStatus.SCHEDULED:
            return PickEvaluation(
                pick_id=pick.id,
                evaluated_at=now,
                hedge=evaluate_hedge(pick, None, live_line=live_line),
                snapshot=snapshot,
            )

        merged = self.tracker.track(pick, snapshot, now)
        merged = self.recalibrator.apply(pick, merged)

        rotation = estimate_for_snapshot(merged, pick.avg_minutes)
        zone_matchup = self._zone_matchup(pick, now)
        hedge = evaluate_hedge(
            pick,
            merged,
            rotation=rotation,
            zone_matchup=zone_matchup,
            live_line=live_line,
        )

        return PickEvaluation(
            pick_id=pick.id,
            evaluated_at=now,
            hedge=hedge,
            snapshot=merged,
            rotation=rotation,
            zone_matchup=zone_matchup,
        )

    def evaluate_all(self, items: Iterable[PollItem], now: Optional[float] = None) -> PollSummary:
        """
        Evaluate one poll cycle, then sweep expired alerts.

        A pick that fails with a LiveHedgeError is reported in the summary
        without stopping the others.
        """
        now = time.time() if now is None else now
        summary = PollSummary()

        for pick, snapshot, live_line in items:
            try:
                summary.evaluations.append(self.evaluate(pick, snapshot, live_line, now))
            except LiveHedgeError as e:
                logger.error(f"Evaluation failed for pick {pick.id}: {e}")
                summary.evaluations.append(PickEvaluation(pick_id=pick.id, evaluated_at=now, error=str(e)))

        summary.alerts_evicted = self.tracker.cache.maybe_sweep(now)
        if summary.failed:
            logger.warning(f"Poll cycle: {len(summary.failed)}/{len(summary.evaluations)} picks failed")
        return summary

    def release(self, pick_id: str) -> None:
        """Drop every piece of per-pick state."""
        self.tracker.release(pick_id)
        self.recalibrator.release(pick_id)
        logger.debug(f"Released pick {pick_id}")
