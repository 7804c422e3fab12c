"""
Quarter transition detection.

When a pick's quarter advances, the just-completed quarter is checked
against a linear pace to the line (line / 4 per quarter) and a
QuarterTransitionAlert is produced. Alerts stay attached to the pick for
three minutes, then fall out of the AlertCache.

The first halftime poll after Q2 gets a HALFTIME variant of the Q2 alert.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from threading import Lock
from typing import Dict, Optional, Set

from live_hedge.analysis.rotation import estimate_for_snapshot
from live_hedge.config import settings
from live_hedge.models.enums import BetSide, GameStatus, TransitionStatus, Urgency
from live_hedge.models.inputs import LiveSnapshot, Pick
from live_hedge.models.outputs import QuarterTransitionAlert, RotationEstimate
from live_hedge.utils.logging import get_logger
from live_hedge.utils.numeric import QUARTER_MINUTES, parse_quarter, round1, safe_divide

logger = get_logger(__name__)

# Share of the clock a player is assumed to have played when minutes are unknown
DEFAULT_MINUTES_SHARE = 0.75


# ============================================================================
# TRANSITION CALCULATION
# ============================================================================

def _classify(pace_gap_pct: float, side: BetSide) -> tuple[TransitionStatus, Urgency]:
    """Status and urgency for a pace gap; under mirrors and inverts the over bands."""
    if side is BetSide.OVER:
        if pace_gap_pct >= 20:
            return TransitionStatus.AHEAD, Urgency.NONE
        if pace_gap_pct >= -10:
            return TransitionStatus.ON_TRACK, Urgency.NONE
        if pace_gap_pct >= -25:
            return TransitionStatus.BEHIND, Urgency.MEDIUM
        return TransitionStatus.CRITICAL, Urgency.HIGH

    if pace_gap_pct <= -20:
        return TransitionStatus.AHEAD, Urgency.NONE
    if pace_gap_pct <= 10:
        return TransitionStatus.ON_TRACK, Urgency.NONE
    if pace_gap_pct <= 25:
        return TransitionStatus.BEHIND, Urgency.MEDIUM
    return TransitionStatus.CRITICAL, Urgency.HIGH


def quarter_insight(quarter: int, pace_gap_pct: float, side: BetSide) -> str:
    """Quarter-specific read on the pace gap."""
    over = side is BetSide.OVER

    if quarter == 1:
        if over:
            if pace_gap_pct >= 20:
                return "Strong Q1 start. If Q2 matches, watch for halftime profit lock."
            if pace_gap_pct >= 0:
                return "Solid pace. Stay patient through Q2."
            if pace_gap_pct >= -15:
                return "Slightly slow Q1. Common for pacing - monitor Q2 burst."
            return "Slow start. Need acceleration in Q2 or consider light hedge."
        if pace_gap_pct <= -20:
            return "Great Q1 for UNDER. Low usage trend looking favorable."
        if pace_gap_pct <= 10:
            return "On track for UNDER. Player pacing as expected."
        if pace_gap_pct >= 20:
            return "Warning: Q1 pace threatens UNDER. Watch for continuation."
        return "UNDER at risk. Player exceeding expected production."

    if quarter == 2:
        if over:
            if pace_gap_pct >= 15:
                return "Strong 1st half. Consider small profit lock on UNDER."
            if pace_gap_pct >= -10:
                return "On track at half. Q3 historically has highest scoring."
            if pace_gap_pct >= -20:
                return "Slightly behind at half. Q3 surge common for stars."
            return "Behind at halftime. Need big 2nd half or hedge now."
        if pace_gap_pct <= -15:
            return "UNDER looking strong. 1st half production well below line."
        if pace_gap_pct <= 10:
            return "UNDER on track. Monitor 2nd half pace carefully."
        return "UNDER at risk. May need hedge if Q3 continues this pace."

    if quarter == 3:
        if over:
            if pace_gap_pct >= 10:
                return "Cruising. Q4 is cushion territory."
            if pace_gap_pct >= -5:
                return "Close heading to Q4. Need strong finish."
            if pace_gap_pct < -15:
                return "Q4 crunch time. Stars usually close strong but hedge may be wise."
            return "Behind heading to Q4. Consider hedge before garbage time risk."
        if pace_gap_pct <= -10:
            return "UNDER looking safe. One quarter to go."
        if pace_gap_pct <= 5:
            return "UNDER manageable. Watch for late game situations."
        return "UNDER at risk in Q4. Garbage time could go either way."

    return "Tracking production. Continue monitoring."


def quarter_action(status: TransitionStatus, quarter: int) -> str:
    remaining = 4 - quarter
    plural = "s" if remaining > 1 else ""

    if status is TransitionStatus.AHEAD:
        if quarter >= 2:
            return f"Consider small profit lock on opposite side if {remaining}Q+ buffer"
        return f"HOLD - Strong position. {remaining} quarter{plural} remaining."
    if status is TransitionStatus.ON_TRACK:
        return f"HOLD - No action needed. {remaining} quarter{plural} remaining."
    if status is TransitionStatus.BEHIND:
        return f"Watch Q{quarter + 1} closely. Prepare hedge if trend continues."
    return f"HEDGE RECOMMENDED - {remaining} quarter{plural} may not be enough at current pace."


def calculate_quarter_transition(
    pick: Pick,
    snapshot: LiveSnapshot,
    completed_quarter: int,
    rotation: RotationEstimate,
) -> QuarterTransitionAlert:
    """
    Pace check for a just-completed quarter.

    Args:
        pick: The tracked pick
        snapshot: Live snapshot taken at (or just after) the boundary
        completed_quarter: Quarter that just ended (1-4)
        rotation: Rotation estimate used for the remaining-minutes denominator

    Returns:
        QuarterTransitionAlert
    """
    line = pick.line
    current_total = snapshot.current_value

    expected_per_quarter = line / 4
    expected_at_end = expected_per_quarter * completed_quarter
    pace_gap_pct = safe_divide(current_total - expected_at_end, expected_at_end) * 100

    minutes = snapshot.minutes_played
    if not minutes:
        minutes = completed_quarter * QUARTER_MINUTES * DEFAULT_MINUTES_SHARE
    current_velocity = safe_divide(current_total, minutes)

    remaining = line - current_total
    required_velocity = safe_divide(remaining, rotation.expected_remaining)
    velocity_delta = current_velocity - required_velocity

    status, urgency = _classify(pace_gap_pct, pick.side)

    return QuarterTransitionAlert(
        quarter=completed_quarter,
        headline=f"Q{completed_quarter} COMPLETE",
        status=status,
        quarter_value=round(safe_divide(current_total, completed_quarter), 2),
        expected_quarter_value=round(expected_per_quarter, 2),
        pace_gap_pct=round1(pace_gap_pct),
        current_total=current_total,
        projected_final=snapshot.projected_final,
        required_remaining=max(0.0, remaining),
        current_velocity=round(current_velocity, 3),
        required_velocity=round(required_velocity, 3),
        velocity_delta=round(velocity_delta, 3),
        insight=quarter_insight(completed_quarter, pace_gap_pct, pick.side),
        action=quarter_action(status, completed_quarter),
        urgency=urgency,
    )


def calculate_halftime_transition(
    pick: Pick,
    snapshot: LiveSnapshot,
    rotation: RotationEstimate,
) -> QuarterTransitionAlert:
    """The Q2 transition, relabelled for the halftime break."""
    transition = calculate_quarter_transition(pick, snapshot, 2, rotation)
    return transition.model_copy(
        update={
            "headline": "HALFTIME",
            "insight": transition.insight + " 2nd half adjustments common.",
        }
    )


# ============================================================================
# ALERT CACHE
# ============================================================================

@dataclass
class CachedAlert:
    """Alert plus the bookkeeping needed to expire it."""

    quarter: int
    created_at: float  # Unix timestamp
    alert: QuarterTransitionAlert


class AlertCache:
    """
    Per-pick store of the latest quarter alert.

    Entries expire ttl_seconds after creation. A newer quarter's alert
    replaces an older one; an alert for an earlier quarter than the one
    stored is ignored, so the quarter number per pick only moves forward.
    """

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        sweep_interval_seconds: Optional[float] = None,
    ):
        self.ttl_seconds = settings.alert_ttl_seconds if ttl_seconds is None else ttl_seconds
        self.sweep_interval_seconds = (
            settings.alert_sweep_seconds if sweep_interval_seconds is None else sweep_interval_seconds
        )
        self._entries: Dict[str, CachedAlert] = {}
        self._last_sweep: Optional[float] = None
        self._lock = Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, pick_id: str) -> bool:
        return pick_id in self._entries

    def _is_expired(self, entry: CachedAlert, now: float) -> bool:
        return now - entry.created_at >= self.ttl_seconds

    def put(self, pick_id: str, alert: QuarterTransitionAlert, now: Optional[float] = None) -> bool:
        """
        Store an alert for a pick.

        Returns:
            True if stored, False if an alert for a later quarter is already held
        """
        now = time.time() if now is None else now
        with self._lock:
            existing = self._entries.get(pick_id)
            if existing is not None and existing.quarter > alert.quarter:
                logger.debug(
                    f"Ignoring Q{alert.quarter} alert for {pick_id}: Q{existing.quarter} already stored"
                )
                return False
            self._entries[pick_id] = CachedAlert(quarter=alert.quarter, created_at=now, alert=alert)
        return True

    def get_entry(self, pick_id: str) -> Optional[CachedAlert]:
        return self._entries.get(pick_id)

    def get_active(self, pick_id: str, now: Optional[float] = None) -> Optional[QuarterTransitionAlert]:
        """The pick's alert if it has not yet expired."""
        now = time.time() if now is None else now
        entry = self._entries.get(pick_id)
        if entry is None or self._is_expired(entry, now):
            return None
        return entry.alert

    def sweep(self, now: Optional[float] = None) -> int:
        """Evict expired alerts. Returns the number evicted."""
        now = time.time() if now is None else now
        with self._lock:
            expired = [pick_id for pick_id, entry in self._entries.items() if self._is_expired(entry, now)]
            for pick_id in expired:
                del self._entries[pick_id]
            self._last_sweep = now
        if expired:
            logger.info(f"Alert cache sweep evicted {len(expired)} expired alert(s)")
        return len(expired)

    def maybe_sweep(self, now: Optional[float] = None) -> int:
        """Sweep if at least sweep_interval_seconds passed since the last sweep."""
        now = time.time() if now is None else now
        if self._last_sweep is not None and now - self._last_sweep < self.sweep_interval_seconds:
            return 0
        return self.sweep(now)

    def release(self, pick_id: str) -> bool:
        """Drop a pick's alert (pick no longer tracked)."""
        with self._lock:
            return self._entries.pop(pick_id, None) is not None


# ============================================================================
# TRACKER
# ============================================================================

class QuarterTransitionTracker:
    """
    Detects quarter boundaries per pick and attaches the active alert.

    Usage:
        tracker = QuarterTransitionTracker()

        # Every poll
        snapshot = tracker.track(pick, snapshot)
        snapshot.quarter_transition  # alert or None

        # Between poll cycles
        tracker.cache.maybe_sweep()
    """

    def __init__(self, cache: Optional[AlertCache] = None):
        self.cache = cache or AlertCache()
        self._previous_quarters: Dict[str, int] = {}
        self._halftime_fired: Set[str] = set()
        self._lock = Lock()

    def previous_quarter(self, pick_id: str) -> int:
        return self._previous_quarters.get(pick_id, 0)

    def track(self, pick: Pick, snapshot: LiveSnapshot, now: Optional[float] = None) -> LiveSnapshot:
        """
        Record the snapshot's quarter and attach any active transition alert.

        Snapshots that are neither live nor at halftime pass through unchanged.
        Quarters outside 1-4 never fire transitions and are not recorded.
        """
        at_halftime = snapshot.game_status is GameStatus.HALFTIME
        if not snapshot.is_live and not at_halftime:
            return snapshot

        now = time.time() if now is None else now
        current = parse_quarter(snapshot.period)
        in_range = 1 <= current <= 4

        with self._lock:
            previous = self._previous_quarters.get(pick.id, 0)

            if in_range and current > previous and 1 <= previous < 4:
                rotation = estimate_for_snapshot(snapshot, pick.avg_minutes)
                alert = calculate_quarter_transition(pick, snapshot, previous, rotation)
                if self.cache.put(pick.id, alert, now):
                    logger.info(
                        f"Q{previous} transition for pick {pick.id}: {alert.status.value} "
                        f"({alert.pace_gap_pct:+.1f}% vs pace)"
                    )

            if at_halftime and previous == 2 and pick.id not in self._halftime_fired:
                rotation = estimate_for_snapshot(snapshot, pick.avg_minutes)
                alert = calculate_halftime_transition(pick, snapshot, rotation)
                self.cache.put(pick.id, alert, now)
                self._halftime_fired.add(pick.id)
                logger.info(f"Halftime transition for pick {pick.id}: {alert.status.value}")

            if in_range and current >= previous:
                self._previous_quarters[pick.id] = current

        return snapshot.model_copy(
            update={
                "current_quarter": current if in_range else None,
                "quarter_transition": self.cache.get_active(pick.id, now),
            }
        )

    def release(self, pick_id: str) -> None:
        """Forget everything held for a pick."""
        with self._lock:
            self._previous_quarters.pop(pick_id, None)
            self._halftime_fired.discard(pick_id)
        self.cache.release(pick_id)
