"""
Tests for session composite scoring, session-type weights and the grade hierarchy.
"""
import pytest

from services.grade_hierarchy import GRADE_PRECEDENCE, grade_source, resolve_effective_grade
from services.session_scoring import (
    bp_power_trend,
    clean_micro_rep,
    compute_session_composite,
    is_high_velocity_band,
    normalize_grade,
    pro_readiness_velocity,
    velocity_band_upper,
)
from services.session_weighting import (
    NEUTRAL_SESSION_WEIGHTS,
    SESSION_TYPE_WEIGHTS,
    get_session_weights,
    is_game_session,
)

BLOCKS = [
    {"drill_type": "tee", "intent": "game_intent", "volume": 10, "execution_grade": 50},
    {"drill_type": "front_toss", "volume": 10, "execution_grade": 80},
]


def session(session_type="personal_practice", blocks=BLOCKS, **extra):
    return {"session_type": session_type, "drill_blocks": blocks, "sport": "baseball", **extra}


class TestSessionWeights:

    def test_game_types_amplify_competition_and_discount_volume(self):
        for session_type in ("game", "live_scrimmage"):
            weights = get_session_weights(session_type)
            assert weights.competitive_execution > 1.0
            assert weights.decision_index > 1.0
            assert weights.volume < 1.0

    def test_rehab_heavily_discounted(self):
        weights = SESSION_TYPE_WEIGHTS["rehab_session"]
        assert all(0.3 <= w <= 0.5 for w in weights.as_dict().values())

    def test_unknown_type_is_neutral(self):
        assert get_session_weights("yoga") == NEUTRAL_SESSION_WEIGHTS
        assert get_session_weights(None) == NEUTRAL_SESSION_WEIGHTS

    def test_is_game_session(self):
        assert is_game_session("game")
        assert is_game_session("live_scrimmage")
        assert not is_game_session("bullpen")
        assert not is_game_session(None)


class TestGradeHierarchy:

    def test_precedence_order(self):
        assert GRADE_PRECEDENCE == ("coach_override_grade", "coach_grade", "scout_grade", "player_grade")

    def test_override_wins(self):
        grades = {"coach_override_grade": 70, "coach_grade": 60, "scout_grade": 55, "player_grade": 50}
        assert resolve_effective_grade(grades) == 70
        assert grade_source(grades) == "coach_override_grade"

    def test_coach_beats_scout_and_player(self):
        grades = {"coach_grade": 60, "scout_grade": 55, "player_grade": 50}
        assert resolve_effective_grade(grades) == 60

    def test_player_grade_last(self):
        assert resolve_effective_grade({"player_grade": 45}) == 45
        assert grade_source({"player_grade": 45}) == "player_grade"

    def test_fallback_when_no_grades(self):
        assert resolve_effective_grade({}, fallback=52.5) == 52.5
        assert resolve_effective_grade({}) is None
        assert grade_source({}) is None

    def test_zero_is_a_grade(self):
        assert resolve_effective_grade({"coach_grade": 0, "player_grade": 50}) == 0


class TestHelpers:

    def test_normalize_grade(self):
        assert normalize_grade(20) == 0
        assert normalize_grade(50) == 50
        assert normalize_grade(80) == 100
        assert normalize_grade(95) == 100
        assert normalize_grade(5) == 0

    def test_velocity_band_upper(self):
        assert velocity_band_upper("100-110") == 110
        assert velocity_band_upper("75+") == 75
        assert velocity_band_upper("<60") == 60

    def test_high_velocity_is_sport_relative(self):
        assert is_high_velocity_band("90-100", "baseball")
        assert not is_high_velocity_band("80-90", "baseball")
        assert is_high_velocity_band("60-70", "softball")
        assert is_high_velocity_band("65+", "softball")

    def test_clean_micro_rep_drops_unknown_enums(self):
        rep = {"batted_ball_type": "popup", "swing_intent": "mechanical", "machine_velocity_band": "fast"}
        cleaned = clean_micro_rep(rep)
        assert "batted_ball_type" not in cleaned
        assert "machine_velocity_band" not in cleaned
        assert cleaned["swing_intent"] == "mechanical"


class TestComputeSessionComposite:

    def test_rep_weighted_average_and_intent(self):
        result = compute_session_composite(session())

        assert result.avg_execution == 65
        assert result.total_reps == 20
        assert result.intent_compliance_pct == 50
        assert result.normalized_score == pytest.approx(75)

    def test_practice_indexes(self):
        indexes = compute_session_composite(session()).indexes

        assert indexes["bqi"] == pytest.approx(75)
        assert indexes["fqi"] == pytest.approx(67.5)
        assert indexes["pei"] == pytest.approx(78.75)
        assert indexes["decision"] == pytest.approx(75)
        assert indexes["competitive_execution"] == pytest.approx(75)
        assert indexes["skill_refinement"] == pytest.approx(78.75)
        assert indexes["intent_compliance"] == pytest.approx(50)
        assert indexes["volume_adjusted"] == pytest.approx(20)
        assert indexes["is_game"] is False

    def test_game_weights(self):
        indexes = compute_session_composite(session("game")).indexes

        assert indexes["competitive_execution"] == pytest.approx(93.75)
        assert indexes["decision"] == pytest.approx(88.5)
        assert indexes["volume_adjusted"] == pytest.approx(14)
        assert indexes["is_game"] is True

    def test_rehab_discounted(self):
        indexes = compute_session_composite(session("rehab_session")).indexes
        assert indexes["competitive_execution"] == pytest.approx(22.5)

    def test_indexes_capped_at_100(self):
        blocks = [{"drill_type": "live_ab", "volume": 5, "execution_grade": 80}]
        indexes = compute_session_composite(session("game", blocks)).indexes

        assert indexes["competitive_execution"] == 100
        assert indexes["decision"] == 100

    def test_defaults_for_empty_session(self):
        result = compute_session_composite(session(blocks=[]))

        assert result.avg_execution == 50
        assert result.total_reps == 0
        assert result.intent_compliance_pct == 0
        assert result.effective_grade == 50

    def test_missing_grade_and_volume_use_defaults(self):
        result = compute_session_composite(session(blocks=[{"drill_type": "tee"}]))

        assert result.avg_execution == 50
        assert result.total_reps == 1

    def test_micro_reps_blend_into_bqi(self):
        micro = [
            {"execution_score": 8, "batted_ball_type": "barrel"},
            {"execution_score": 8, "batted_ball_type": "ground"},
        ]
        indexes = compute_session_composite(session(micro_layer_data=micro)).indexes

        # 75 * 0.7 + 80 * 0.3 = 76.5, plus 50% barrels * 0.1
        assert indexes["bqi"] == pytest.approx(81.5)
        assert indexes["barrel_pct"] == pytest.approx(50)
        assert indexes["hard_contact_pct"] == pytest.approx(50)

    def test_high_machine_velocity_raises_difficulty(self):
        micro = [{"machine_velocity_band": "100-110"}]
        indexes = compute_session_composite(session(micro_layer_data=micro)).indexes

        assert indexes["velocity_difficulty_mult"] == pytest.approx(1.15)
        assert indexes["bqi"] == pytest.approx(75 * 1.15)

    def test_pitch_mix_scales_pei(self):
        micro = [{"pitch_type": "slider"}, {"pitch_type": "four_seam"}]
        indexes = compute_session_composite(session("bullpen", micro_layer_data=micro)).indexes

        assert indexes["pitch_type_mult"] == pytest.approx(1.075)
        assert indexes["pei"] == pytest.approx(78.75 * 1.075)

    def test_effective_grade_follows_precedence(self):
        result = compute_session_composite(session(player_grade=70, coach_grade=55))
        assert result.effective_grade == 55

    def test_effective_grade_falls_back_to_execution(self):
        assert compute_session_composite(session()).effective_grade == 65

    def test_overall_is_mean_of_graded_indexes(self):
        result = compute_session_composite(session())
        assert result.overall == pytest.approx((75 + 67.5 + 78.75 + 75 + 75) / 5)

    def test_fatigue_state_discounts_volume_only(self):
        tired = session(fatigue_state={"sleep_quality": 1, "stress_level": 5})
        indexes = compute_session_composite(tired).indexes

        assert indexes["fatigue_multiplier"] == 0.88
        assert indexes["fatigue_readiness"] == 0
        assert indexes["fatigue_flags"] == ["poor_sleep", "high_stress"]
        assert indexes["volume_adjusted"] == pytest.approx(20 * 0.88)
        assert indexes["bqi"] == pytest.approx(75)

    def test_no_fatigue_state_is_neutral(self):
        indexes = compute_session_composite(session()).indexes

        assert indexes["fatigue_multiplier"] == 1.0
        assert indexes["fatigue_readiness"] is None
        assert indexes["fatigue_flags"] == []

    def test_micro_trend_aggregates_stored(self):
        micro = [{"bp_distance_ft": d} for d in (200, 210, 220, 230, 300, 310)]
        indexes = compute_session_composite(session(micro_layer_data=micro)).indexes

        assert indexes["bp_power_trend"] == "improving"
        assert indexes["pro_readiness_velocity"] is False


class TestMicroTrends:

    def distances(self, *feet):
        return [{"bp_distance_ft": d} for d in feet]

    def test_bp_power_needs_five_distances(self):
        assert bp_power_trend(self.distances(300, 310, 320, 330)) is None
        assert bp_power_trend([{"bp_distance_ft": "far"}] * 6) is None

    def test_bp_power_improving_when_later_reps_carry(self):
        reps = self.distances(200, 210, 220, 230, 300, 310, 320, 330)
        assert bp_power_trend(reps) == "improving"

    def test_bp_power_stable_when_later_reps_fade(self):
        reps = self.distances(300, 310, 320, 330, 200, 210, 220, 230)
        assert bp_power_trend(reps) == "stable"

    def high_velocity(self, contact):
        rep = {"machine_velocity_band": "100-110"}
        rep.update(contact)
        return rep

    def test_pro_readiness_above_forty_percent(self):
        reps = [self.high_velocity({"batted_ball_type": "barrel"})] * 3 + [self.high_velocity({})] * 2
        assert pro_readiness_velocity(reps, "baseball") is True

    def test_pro_readiness_needs_more_than_forty_percent(self):
        reps = [self.high_velocity({"contact_quality": "hard"})] * 2 + [self.high_velocity({})] * 3
        assert pro_readiness_velocity(reps, "baseball") is False

    def test_pro_readiness_needs_five_high_velocity_reps(self):
        reps = [self.high_velocity({"batted_ball_type": "line"})] * 4 + [{"machine_velocity_band": "60-70"}]
        assert pro_readiness_velocity(reps, "baseball") is False
