"""Tests for the per-poll pick evaluator."""
import pytest

from live_hedge.analysis.shot_zones import ShotZoneAnalyzer, ZoneTableCache
from live_hedge.exceptions import LiveHedgeError
from live_hedge.models import HedgeStatus, LiveLine
from live_hedge.pipeline import LivePickEvaluator

T0 = 1_000.0


def zone_rows():
    players = [
        {"player_name": "Jayson Tatum", "zone": "restricted_area", "fg_pct": 0.68, "frequency": 0.6},
        {"player_name": "Jayson Tatum", "zone": "corner_3", "fg_pct": 0.42, "frequency": 0.4},
    ]
    defense = [
        {"team_abbrev": "MIA", "zone": "restricted_area", "opp_fg_pct": 0.60, "rank": 26},
        {"team_abbrev": "MIA", "zone": "corner_3", "opp_fg_pct": 0.35, "rank": 24},
    ]
    return players, defense


@pytest.fixture
def evaluator():
    return LivePickEvaluator(zone_analyzer=ShotZoneAnalyzer(ZoneTableCache(loader=zone_rows)))


class TestEvaluate:
    """Tests for single-pick evaluation."""

    def test_pre_game(self, evaluator, make_pick):
        evaluation = evaluator.evaluate(make_pick(), None, now=T0)
        assert evaluation.ok
        assert evaluation.hedge.rule == "pre_game"
        assert evaluation.rotation is None
        assert evaluation.quarter_transition is None

    def test_scheduled_snapshot_is_pre_game(self, evaluator, make_pick, make_snapshot):
        evaluation = evaluator.evaluate(make_pick(), make_snapshot(game_status="scheduled", is_live=False), now=T0)
        assert evaluation.hedge.rule == "pre_game"

    def test_live_evaluation(self, evaluator, make_pick, make_snapshot):
        evaluation = evaluator.evaluate(make_pick(), make_snapshot(period="2", clock="6:00"), now=T0)

        assert evaluation.ok
        assert evaluation.rotation is not None
        assert evaluation.snapshot.current_quarter == 2
        assert evaluation.zone_matchup is not None
        assert evaluation.zone_matchup.opponent == "MIA"
        assert evaluation.hedge.zone_modifier == 15.0
        assert evaluation.hedge.player_tier is evaluation.rotation.tier

    def test_non_scoring_prop_has_no_zone_matchup(self, evaluator, make_pick, make_snapshot):
        evaluation = evaluator.evaluate(make_pick(prop_type="rebounds", line=8.5), make_snapshot(current_value=4), now=T0)
        assert evaluation.zone_matchup is None
        assert evaluation.hedge.zone_modifier is None

    def test_live_line_flows_to_hedge(self, evaluator, make_pick, make_snapshot):
        live_line = LiveLine(pick_id="pick-1", line=27.5, bookmaker="fanduel")
        evaluation = evaluator.evaluate(make_pick(), make_snapshot(), live_line=live_line, now=T0)
        assert evaluation.hedge.status is HedgeStatus.PROFIT_LOCK
        assert evaluation.hedge.effective_line == 27.5

    def test_quarter_alert_attached(self, evaluator, make_pick, make_snapshot):
        pick = make_pick()
        evaluator.evaluate(pick, make_snapshot(period="1", clock="2:00", current_value=5), now=T0)
        evaluation = evaluator.evaluate(pick, make_snapshot(period="2", clock="11:30", current_value=6), now=T0 + 20)

        alert = evaluation.quarter_transition
        assert alert is not None
        assert alert.quarter == 1
        assert alert.headline == "Q1 COMPLETE"

    def test_halftime_recalibration(self, evaluator, make_pick, make_snapshot):
        pick = make_pick(avg_minutes=36, l10_average=26.0)
        evaluator.evaluate(pick, make_snapshot(period="2", clock="3:00", current_value=11), now=T0)
        halftime = make_snapshot(period="2", clock="0:00", game_status="halftime", is_live=False, current_value=12)

        first = evaluator.evaluate(pick, halftime, now=T0 + 60)
        recalibration = first.halftime_recalibration
        assert recalibration is not None
        assert first.snapshot.projected_final == recalibration.recalibrated_projection
        assert first.snapshot.confidence == recalibration.adjusted_confidence
        assert first.quarter_transition.headline == "HALFTIME"
        assert evaluator.recalibrator.has_recalibrated(pick.id)

        second = evaluator.evaluate(pick, halftime, now=T0 + 90)
        assert second.halftime_recalibration == recalibration

    def test_halftime_override_ends_with_break(self, evaluator, make_pick, make_snapshot):
        pick = make_pick(avg_minutes=36)
        evaluator.evaluate(pick, make_snapshot(period="2", clock="0:00", game_status="halftime", is_live=False), now=T0)
        evaluation = evaluator.evaluate(pick, make_snapshot(period="3", clock="11:00", projected_final=30.0), now=T0 + 30)

        assert evaluation.halftime_recalibration is None
        assert evaluation.snapshot.projected_final == 30.0

    def test_release(self, evaluator, make_pick, make_snapshot):
        pick = make_pick(avg_minutes=36)
        evaluator.evaluate(pick, make_snapshot(period="2", clock="3:00"), now=T0)
        evaluator.evaluate(pick, make_snapshot(period="2", clock="0:00", game_status="halftime", is_live=False), now=T0 + 10)

        evaluator.release(pick.id)

        assert not evaluator.recalibrator.has_recalibrated(pick.id)
        assert evaluator.tracker.previous_quarter(pick.id) == 0
        assert pick.id not in evaluator.tracker.cache


class TestEvaluateAll:
    """Tests for whole poll cycles."""

    def test_summary(self, evaluator, make_pick, make_snapshot):
        items = [
            (make_pick(id="a"), make_snapshot(), None),
            (make_pick(id="b", player_name="Bam Adebayo", prop_type="rebounds", line=9.5), make_snapshot(current_value=5), None),
            (make_pick(id="c"), None, None),
        ]
        summary = evaluator.evaluate_all(items, now=T0)

        assert [evaluation.pick_id for evaluation in summary.evaluations] == ["a", "b", "c"]
        assert summary.failed == []
        assert all(evaluation.evaluated_at == T0 for evaluation in summary.evaluations)

    def test_expired_alerts_swept(self, evaluator, make_pick, make_snapshot):
        pick = make_pick()
        evaluator.evaluate_all([(pick, make_snapshot(period="1", clock="1:00", current_value=5), None)], now=T0)
        summary = evaluator.evaluate_all([(pick, make_snapshot(period="2", clock="11:00", current_value=6), None)], now=T0 + 10)
        assert summary.evaluations[0].quarter_transition is not None
        assert summary.alerts_evicted == 0

        summary = evaluator.evaluate_all([(pick, make_snapshot(period="2", clock="5:00", current_value=9), None)], now=T0 + 200)
        assert summary.evaluations[0].quarter_transition is None
        assert summary.alerts_evicted == 1
        assert pick.id not in evaluator.tracker.cache

    def test_bad_zone_tables_drop_zone_term(self, make_pick, make_snapshot):
        def broken_loader():
            players, _ = zone_rows()
            return players, [{"team_abbrev": "MIA", "zone": "paint"}]

        evaluator = LivePickEvaluator(zone_analyzer=ShotZoneAnalyzer(ZoneTableCache(loader=broken_loader)))
        items = [
            (make_pick(id="points"), make_snapshot(), None),
            (make_pick(id="rebounds", prop_type="rebounds", line=8.5), make_snapshot(current_value=4), None),
        ]
        summary = evaluator.evaluate_all(items, now=T0)

        assert summary.failed == []
        points, rebounds = summary.evaluations
        assert points.zone_matchup is None
        assert points.hedge.zone_modifier is None
        assert rebounds.hedge is not None

    def test_out_of_range_zone_row_does_not_abort_poll(self, make_pick, make_snapshot):
        def loader():
            players, defense = zone_rows()
            players[0]["frequency"] = 1.02
            return players, defense

        evaluator = LivePickEvaluator(zone_analyzer=ShotZoneAnalyzer(ZoneTableCache(loader=loader)))
        summary = evaluator.evaluate_all([(make_pick(), make_snapshot(), None)], now=T0)

        evaluation = summary.evaluations[0]
        assert evaluation.ok
        assert evaluation.hedge.zone_modifier is None

    def test_failure_isolated_per_pick(self, make_pick, make_snapshot):
        class FailingAnalyzer(ShotZoneAnalyzer):
            def get_matchup(self, player_name, opponent_name, prop_type, now=None):
                if player_name == "Broken Player":
                    raise LiveHedgeError("zone lookup failed")
                return super().get_matchup(player_name, opponent_name, prop_type, now)

        evaluator = LivePickEvaluator(zone_analyzer=FailingAnalyzer(ZoneTableCache(loader=zone_rows)))
        items = [
            (make_pick(id="broken", player_name="Broken Player"), make_snapshot(), None),
            (make_pick(id="fine"), make_snapshot(), None),
        ]
        summary = evaluator.evaluate_all(items, now=T0)

        failed, succeeded = summary.evaluations
        assert not failed.ok
        assert failed.hedge is None
        assert failed.error == "zone lookup failed"
        assert succeeded.ok
        assert succeeded.hedge.zone_modifier == 15.0
        assert summary.failed == [failed]
