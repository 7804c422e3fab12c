"""Tests for the hedge decision engine."""
import pytest

from live_hedge.hedge.engine import (
    effective_line,
    evaluate_hedge,
    format_time_remaining,
    trend_direction,
)
from live_hedge.models import (
    BetSide,
    CurrentPhase,
    HedgeStatus,
    LiveLine,
    MatchupGrade,
    PlayerTier,
    PropType,
    RotationEstimate,
    RotationPhase,
    ShotZoneMatchup,
    Trend,
    TrendDirection,
    Urgency,
    ZoneMatchup,
    ZoneType,
)


def make_rotation(phase=CurrentPhase.ACTIVE, remaining=10.0, tier=PlayerTier.STAR):
    resting = phase is CurrentPhase.REST
    return RotationEstimate(
        tier=tier,
        current_phase=phase,
        rotation_phase=RotationPhase.THIRD,
        expected_remaining=remaining,
        uncertainty_range=(remaining * 0.85, remaining * 1.15),
        rest_window_remaining=4.0 if resting else 0.0,
        closer_eligible=True,
        is_in_rest_window=resting,
        next_transition="Returns in ~4 min" if resting else "",
        rotation_insight="",
    )


def make_matchup(score, grade=MatchupGrade.ADVANTAGE):
    return ShotZoneMatchup(
        player_name="Jayson Tatum",
        opponent="MIA",
        prop_type=PropType.POINTS,
        zones=[
            ZoneMatchup(
                zone=ZoneType.PAINT,
                frequency=0.4,
                player_fg_pct=0.6,
                defense_fg_pct=0.5,
                defense_rank=25 if grade is MatchupGrade.ADVANTAGE else 3,
                matchup_grade=grade,
                impact=7 if grade is MatchupGrade.ADVANTAGE else -7,
            )
        ],
        overall_matchup_score=score,
        primary_zone=ZoneType.PAINT,
        primary_zone_pct=0.4,
        recommendation="Strong PTS matchup - Paint advantage" if score > 0 else "Tough PTS matchup - Paint disadvantage",
    )


@pytest.fixture
def live(make_snapshot):
    """Q3 10:00 for a star: mid-stint, not near a rest window. 10 minutes left to play at 0.6/min."""

    def _make(current_value, **overrides):
        fields = {
            "period": "3",
            "clock": "10:00",
            "current_value": current_value,
            "rate_per_minute": 0.6,
            "projected_final": current_value + 6.0,
            "game_progress": 54.0,
            "minutes_played": 20.0,
        }
        fields.update(overrides)
        return make_snapshot(**fields)

    return _make


class TestShortCircuits:
    """Tests for the pre-rule exits."""

    def test_already_hit_over(self, make_pick, live):
        pick = make_pick(line=20)
        action = evaluate_hedge(
            pick,
            live(22, risk_flags=["blowout", "foul_trouble"], pace_rating=80),
            rotation=make_rotation(CurrentPhase.REST),
        )
        assert action.headline == "ALREADY HIT"
        assert action.status is HedgeStatus.ON_TRACK
        assert action.hit_probability == 100.0
        assert action.urgency is Urgency.NONE
        assert action.rule == "already_hit"

    def test_line_exceeded_under(self, make_pick, live):
        action = evaluate_hedge(make_pick(line=20, side="under"), live(20), rotation=make_rotation())
        assert action.headline == "LINE EXCEEDED"
        assert action.status is HedgeStatus.URGENT
        assert action.hit_probability == 0.0
        assert action.urgency is Urgency.HIGH

    def test_pre_game_without_snapshot(self, make_pick):
        action = evaluate_hedge(make_pick(), None)
        assert action.headline == "Pre-Game"
        assert action.hit_probability == 50.0
        assert action.rule == "pre_game"
        assert action.time_remaining == "Not started"

    def test_scheduled_game_is_pre_game(self, make_pick, make_snapshot):
        action = evaluate_hedge(make_pick(), make_snapshot(game_status="scheduled", is_live=False))
        assert action.rule == "pre_game"


class TestMiddleOpportunity:
    """Tests for line-movement middles."""

    def _live_line(self, line):
        return LiveLine(pick_id="pick-1", line=line, bookmaker="fanduel", over_price=-110, under_price=-110)

    def test_over_line_moves_up(self, make_pick, live):
        action = evaluate_hedge(make_pick(line=24.5), live(15), rotation=make_rotation(), live_line=self._live_line(27))

        assert action.status is HedgeStatus.PROFIT_LOCK
        assert action.rule == "middle_opportunity"
        assert action.hit_probability == 50.0
        middle = action.middle_opportunity
        assert middle.lower_bound == 24.5
        assert middle.upper_bound == 27
        assert middle.window_size == 2.5
        assert middle.hedge_side is BetSide.UNDER
        assert action.line_movement == 2.5
        assert action.live_line.bookmaker == "fanduel"

    def test_under_line_moves_down(self, make_pick, live):
        action = evaluate_hedge(
            make_pick(line=24.5, side="under"), live(15), rotation=make_rotation(), live_line=self._live_line(22)
        )
        middle = action.middle_opportunity
        assert (middle.lower_bound, middle.upper_bound) == (22, 24.5)
        assert middle.hedge_side is BetSide.OVER

    def test_bounds_within_both_lines(self, make_pick, live):
        for original, moved in [(24.5, 27.0), (10.5, 14.5), (30.0, 32.0)]:
            action = evaluate_hedge(
                make_pick(line=original), live(1), rotation=make_rotation(), live_line=self._live_line(moved)
            )
            middle = action.middle_opportunity
            low, high = min(original, moved), max(original, moved)
            assert middle.lower_bound < middle.upper_bound
            assert low <= middle.lower_bound <= high
            assert low <= middle.upper_bound <= high

    def test_small_move_is_not_a_middle(self, make_pick, live):
        action = evaluate_hedge(make_pick(line=24.5), live(20), rotation=make_rotation(), live_line=self._live_line(26))
        assert action.middle_opportunity is None
        assert action.effective_line == 26

    def test_wrong_direction_is_not_a_middle(self, make_pick, live):
        action = evaluate_hedge(make_pick(line=24.5), live(15), rotation=make_rotation(), live_line=self._live_line(21))
        assert action.middle_opportunity is None

    def test_tracked_live_book_line(self, make_pick, live):
        action = evaluate_hedge(make_pick(line=24.5, live_book_line=27), live(15), rotation=make_rotation())
        assert action.status is HedgeStatus.PROFIT_LOCK


class TestRuleCascade:
    """Tests for each rule of the state cascade."""

    def test_on_track(self, make_pick, live):
        action = evaluate_hedge(make_pick(line=24.5), live(20), rotation=make_rotation())
        assert action.status is HedgeStatus.ON_TRACK
        assert action.rule == "on_track"
        assert action.hit_probability == 70.0
        assert action.gap_to_line == 1.5
        assert action.thresholds.urgent == 25.0
        assert action.zone_modifier is None

    def test_monitor(self, make_pick, live):
        action = evaluate_hedge(make_pick(line=24.5), live(19), rotation=make_rotation())
        assert action.status is HedgeStatus.MONITOR
        assert action.hit_probability == 55.0
        assert action.urgency is Urgency.LOW

    def test_monitor_on_small_negative_gap(self, make_pick, live):
        action = evaluate_hedge(make_pick(line=24.5), live(20, projected_final=23.5), rotation=make_rotation())
        assert action.hit_probability == 70.0
        assert action.status is HedgeStatus.MONITOR

    def test_alert_below_alert_threshold(self, make_pick, live):
        action = evaluate_hedge(make_pick(line=24.5), live(18), rotation=make_rotation())
        assert action.status is HedgeStatus.ALERT
        assert action.hit_probability == 40.0
        assert action.rule == "hedge_alert"
        assert "UNDER 24.5" in action.action

    def test_urgent_below_urgent_threshold(self, make_pick, live):
        action = evaluate_hedge(make_pick(line=24.5), live(15.5), rotation=make_rotation())
        assert action.status is HedgeStatus.URGENT
        assert action.rule == "hedge_now"
        assert action.hit_probability == 15.0
        assert "$50-100" in action.action

    def test_multiple_severe_risks(self, make_pick, live):
        action = evaluate_hedge(
            make_pick(line=24.5), live(20, risk_flags=["blowout", "foul_trouble"], game_progress=40), rotation=make_rotation()
        )
        assert action.rule == "hedge_now"
        assert "Blowout" in action.message

    def test_late_blowout_alone_is_urgent(self, make_pick, live):
        action = evaluate_hedge(make_pick(line=24.5), live(20, risk_flags=["blowout"], game_progress=70), rotation=make_rotation())
        assert action.rule == "hedge_now"

    def test_early_blowout_alone_is_alert(self, make_pick, live):
        action = evaluate_hedge(make_pick(line=24.5), live(20, risk_flags=["blowout"], game_progress=50), rotation=make_rotation())
        assert action.rule == "hedge_alert"

    def test_low_minutes_is_not_severe(self, make_pick, live):
        action = evaluate_hedge(make_pick(line=24.5), live(20, risk_flags=["low_minutes"]), rotation=make_rotation())
        assert action.rule == "on_track"

    def test_slow_pace_alerts_over_only(self, make_pick, live):
        over = evaluate_hedge(make_pick(line=24.5), live(20, pace_rating=90), rotation=make_rotation())
        assert over.rule == "hedge_alert"
        assert "Slow pace" in over.message

        under = evaluate_hedge(make_pick(line=30.5, side="under"), live(20, pace_rating=90), rotation=make_rotation())
        assert under.rule == "on_track"

    def test_benched_over(self, make_pick, live):
        action = evaluate_hedge(make_pick(line=24.5), live(19), rotation=make_rotation(CurrentPhase.REST))
        assert action.rule == "bench_behind_over"
        assert action.headline == "PLAYER BENCHED"
        assert "Returns in ~4 min" in action.message
        assert action.thresholds.urgent == 40.0

    def test_benched_over_with_good_probability_monitors(self, make_pick, live):
        action = evaluate_hedge(make_pick(line=24.5), live(20), rotation=make_rotation(CurrentPhase.REST))
        # 70% clears the bench ceiling but not the raised monitor threshold (75)
        assert action.rule == "monitor"

    def test_benched_under_is_unaffected(self, make_pick, live):
        action = evaluate_hedge(make_pick(line=30.5, side="under"), live(20), rotation=make_rotation(CurrentPhase.REST))
        assert action.rule == "on_track"
        assert action.thresholds.urgent == 25.0

    def test_rest_approaching(self, make_pick, live):
        # Star at Q1 6:00 leaves the floor at Q1 5:00
        action = evaluate_hedge(make_pick(line=24.5), live(18, period="1", clock="6:00"), rotation=make_rotation())
        assert action.rule == "rest_approaching"
        assert action.status is HedgeStatus.ALERT
        assert action.thresholds.urgent == 33.0


class TestZoneInfluence:
    """Tests for the shot zone terms."""

    def test_advantage_helps_over(self, make_pick, live):
        action = evaluate_hedge(make_pick(line=24.5), live(19), rotation=make_rotation(), zone_matchup=make_matchup(5.0))
        assert action.hit_probability == 70.0
        assert action.zone_modifier == 15.0
        assert action.thresholds.urgent == 15.0
        assert action.rule == "on_track"
        assert "Zone advantage in Paint" in action.message

    def test_advantage_hurts_under(self, make_pick, live):
        action = evaluate_hedge(
            make_pick(line=24.5, side="under"), live(19), rotation=make_rotation(), zone_matchup=make_matchup(5.0)
        )
        assert action.hit_probability == 25.0
        assert action.zone_modifier == -15.0
        assert action.thresholds.urgent == 35.0
        assert action.rule == "hedge_now"

    def test_disadvantage_alerts_over(self, make_pick, live):
        action = evaluate_hedge(
            make_pick(line=24.5),
            live(20),
            rotation=make_rotation(),
            zone_matchup=make_matchup(-5.0, MatchupGrade.DISADVANTAGE),
        )
        assert action.hit_probability == 55.0
        assert action.rule == "hedge_alert"
        assert "Shot chart mismatch" in action.message

    def test_small_score_moves_probability_not_thresholds(self, make_pick, live):
        action = evaluate_hedge(make_pick(line=24.5), live(19), rotation=make_rotation(), zone_matchup=make_matchup(2.0))
        assert action.hit_probability == 61.0
        assert action.thresholds.urgent == 25.0

    def test_probability_clamped(self, make_pick, live):
        high = evaluate_hedge(make_pick(line=24.5), live(24), rotation=make_rotation(), zone_matchup=make_matchup(6.0))
        assert high.hit_probability == 95.0

        low = evaluate_hedge(
            make_pick(line=24.5),
            live(10),
            rotation=make_rotation(),
            zone_matchup=make_matchup(-6.0, MatchupGrade.DISADVANTAGE),
        )
        assert low.hit_probability == 5.0


class TestInvariants:
    """Property checks across a grid of inputs."""

    def test_probability_always_bounded(self, make_pick, live):
        for side in ("over", "under"):
            for current in (0, 5, 10, 15, 20, 24):
                for rate in (0.0, 0.3, 0.9, 2.0):
                    for score in (None, -8.0, -2.0, 0.0, 4.0, 9.0):
                        matchup = None if score is None else make_matchup(score)
                        action = evaluate_hedge(
                            make_pick(line=24.5, side=side),
                            live(current, rate_per_minute=rate),
                            rotation=make_rotation(),
                            zone_matchup=matchup,
                        )
                        assert 5.0 <= action.hit_probability <= 95.0

    def test_over_monotonic_in_current_value(self, make_pick, live):
        probabilities = [
            evaluate_hedge(make_pick(line=24.5), live(current), rotation=make_rotation()).hit_probability
            for current in (12, 15, 16.5, 17.5, 18.5, 20, 22)
        ]
        assert probabilities == sorted(probabilities)
        assert probabilities == [15.0, 15.0, 25.0, 40.0, 55.0, 70.0, 85.0]

    def test_under_monotonic_in_current_value(self, make_pick, live):
        probabilities = [
            evaluate_hedge(make_pick(line=24.5, side="under"), live(current), rotation=make_rotation()).hit_probability
            for current in (12, 15, 17.5, 18.5, 19, 22)
        ]
        assert probabilities == [85.0, 85.0, 70.0, 55.0, 40.0, 25.0]


class TestHelpers:
    """Tests for engine helpers."""

    def test_effective_line_priority(self, make_pick):
        live_line = LiveLine(pick_id="pick-1", line=26.5, bookmaker="draftkings")
        assert effective_line(make_pick(line=24.5), live_line) == 26.5
        assert effective_line(make_pick(line=24.5, live_book_line=25.5)) == 25.5
        assert effective_line(make_pick(line=24.5)) == 24.5

    @pytest.mark.parametrize(
        "trend,side,expected",
        [
            (Trend.UP, BetSide.OVER, TrendDirection.IMPROVING),
            (Trend.UP, BetSide.UNDER, TrendDirection.WORSENING),
            (Trend.DOWN, BetSide.OVER, TrendDirection.WORSENING),
            (Trend.DOWN, BetSide.UNDER, TrendDirection.IMPROVING),
            (Trend.STABLE, BetSide.OVER, TrendDirection.STABLE),
        ],
    )
    def test_trend_direction(self, trend, side, expected):
        assert trend_direction(trend, side) is expected

    def test_format_time_remaining(self):
        assert format_time_remaining("2", "6:30", 40) == "6:30 left in Q2"
        assert format_time_remaining("OT", "2:00", 100) == "2:00 left in OT"
        assert format_time_remaining("", "", 50) == "~24 min remaining"
        assert format_time_remaining("", "", 99) == "< 1 min left"

    def test_rotation_estimated_when_omitted(self, make_pick, live):
        action = evaluate_hedge(make_pick(line=24.5, avg_minutes=35), live(20))
        assert action.player_tier is PlayerTier.STAR
        assert action.rotation is not None
        assert action.rotation_minutes == action.rotation.expected_remaining

    def test_tier_override(self, make_pick, live):
        action = evaluate_hedge(make_pick(line=24.5), live(20), tier=PlayerTier.ROLE_PLAYER)
        assert action.player_tier is PlayerTier.ROLE_PLAYER

    def test_tier_override_beats_season_average(self, make_pick, live):
        action = evaluate_hedge(make_pick(line=24.5, avg_minutes=36), live(20), tier=PlayerTier.STARTER)
        assert action.player_tier is PlayerTier.STARTER

    def test_rotation_wins_over_tier(self, make_pick, live):
        action = evaluate_hedge(make_pick(line=24.5), live(20), rotation=make_rotation(), tier=PlayerTier.ROLE_PLAYER)
        assert action.player_tier is PlayerTier.STAR
        assert action.rotation_minutes == 10.0
