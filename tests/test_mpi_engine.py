"""
Tests for MPI composition, gates, ranking and trend.
"""
import pytest
from datetime import date, timedelta
from uuid import uuid4

from services.mpi_engine import (
    AthleteMpiInputs,
    ProStatusInput,
    RankingGateConfig,
    compute_athlete_mpi,
    delta_maturity_index,
    development_prompts,
    game_practice_ratio,
    injury_hold_active,
    rank_athletes,
    ranking_gates,
    trend_for,
)

AS_OF = date(2026, 6, 30)


def make_sessions(count=60, level=60.0, session_type="team_practice", player_grade=55, coach_grade=55):
    return [
        {
            "session_type": session_type,
            "session_date": AS_OF - timedelta(days=i),
            "player_grade": player_grade,
            "coach_grade": coach_grade,
            "composite_indexes": {
                "bqi": level,
                "fqi": level,
                "pei": level,
                "decision": level,
                "competitive_execution": level,
            },
        }
        for i in range(count)
    ]


def make_inputs(**overrides):
    fields = {
        "athlete_id": uuid4(),
        "sport": "baseball",
        "as_of": AS_OF,
        "sessions": make_sessions(),
    }
    fields.update(overrides)
    return AthleteMpiInputs(**fields)


class TestComposition:

    def test_no_sessions_is_insufficient_data(self):
        assert compute_athlete_mpi(make_inputs(sessions=[])) is None

    def test_neutral_athlete(self):
        result = compute_athlete_mpi(make_inputs())

        assert result.raw_score == pytest.approx(60)
        assert result.score == pytest.approx(60)
        assert result.integrity_score == 100
        assert result.damping_multiplier == 1.0
        assert result.consistency is None
        assert result.pro_probability == pytest.approx(32)
        assert result.sessions_count == 60

    def test_composite_weights(self):
        sessions = make_sessions(count=1)
        sessions[0]["composite_indexes"] = {
            "bqi": 100, "fqi": 0, "pei": 0, "decision": 0, "competitive_execution": 0,
        }
        result = compute_athlete_mpi(make_inputs(sessions=sessions))
        assert result.raw_score == pytest.approx(25)

    def test_tier_age_and_position(self):
        result = compute_athlete_mpi(make_inputs(league_tier="college_d1", age=25, primary_position="SS"))
        assert result.score == pytest.approx(60 * 1.05 * 1.0 * 1.06)

    def test_young_athlete_discounted(self):
        result = compute_athlete_mpi(make_inputs(age=16))
        assert result.score == pytest.approx(60 * 0.92)

    def test_verified_boost_added(self):
        result = compute_athlete_mpi(make_inputs(
            verified_profiles=[{"profile_type": "mlb", "confidence_weight": 100}],
        ))
        assert result.verified_boost == 22
        assert result.score == pytest.approx(82)

    def test_scout_blend(self):
        result = compute_athlete_mpi(make_inputs(scout_grades=[80]))
        assert result.score == pytest.approx(64)

    def test_released_contract_penalised(self):
        result = compute_athlete_mpi(make_inputs(
            pro_status=ProStatusInput(contract_status="released", release_count=1),
        ))
        assert result.score == pytest.approx(60 * 0.88)

    def test_retired_contract_freezes_score(self):
        result = compute_athlete_mpi(make_inputs(pro_status=ProStatusInput(contract_status="retired")))
        assert result.contract_modifier == 0.0
        assert result.score == pytest.approx(60)

    def test_integrity_scales_score(self):
        result = compute_athlete_mpi(make_inputs(
            sessions=make_sessions(coach_grade=None),
            active_flags=[{"rule_id": "manual_admin_flag"}],
        ))
        assert result.integrity_score == 85
        assert result.score == pytest.approx(51)

    def test_consistency_damping(self):
        logs = [
            {"entry_date": AS_OF - timedelta(days=d), "day_status": "missed" if d < 14 else "full_training"}
            for d in range(30)
        ]
        result = compute_athlete_mpi(make_inputs(daily_logs=logs))

        assert result.consistency.consistency_score == 53
        assert result.damping_multiplier == 0.85
        assert result.score == pytest.approx(51)

    def test_score_clamped(self):
        result = compute_athlete_mpi(make_inputs(sessions=make_sessions(level=100), league_tier="mlb"))
        assert result.score == 100
        assert result.pro_probability == pytest.approx(99)
        assert result.pro_probability_capped

    def test_verified_pro_reaches_hof(self):
        pro = ProStatusInput(
            contract_status="active",
            roster_verified=True,
            current_league="mlb",
            seasons_by_league={"mlb": 5},
        )
        result = compute_athlete_mpi(make_inputs(pro_status=pro))

        assert result.pro_probability == 100
        assert result.hof.eligible
        assert result.delta_maturity == 0
        assert result.hof_probability == pytest.approx(5 * 3 + 60 * 0.3 + 10)

    def test_unverified_never_hof(self):
        pro = ProStatusInput(seasons_by_league={"mlb": 10})
        result = compute_athlete_mpi(make_inputs(sessions=make_sessions(level=100), pro_status=pro))

        assert not result.hof.eligible
        assert result.hof_probability is None

    def test_segment(self):
        assert compute_athlete_mpi(make_inputs(league_tier="hs_jv")).segment == "hs"


class TestGates:

    def test_all_gates_met(self):
        gates = ranking_gates(make_sessions(), 100, False, RankingGateConfig())
        assert gates["ranking_eligible"]

    def test_too_few_sessions(self):
        gates = ranking_gates(make_sessions(count=20), 100, False, RankingGateConfig())

        assert not gates["games_minimum_met"]
        assert gates["data_span_met"]
        assert not gates["ranking_eligible"]

    def test_integrity_gate(self):
        gates = ranking_gates(make_sessions(), 79, False, RankingGateConfig())
        assert not gates["integrity_threshold_met"]

    def test_coach_validation_only_with_coach(self):
        sessions = make_sessions(count=40, coach_grade=None) + make_sessions(count=20)

        assert ranking_gates(sessions, 100, False, RankingGateConfig())["coach_validation_met"]
        assert not ranking_gates(sessions, 100, True, RankingGateConfig())["coach_validation_met"]

    def test_configurable_minimum(self):
        gates = ranking_gates(make_sessions(count=20), 100, False, RankingGateConfig(min_sessions=20))
        assert gates["ranking_eligible"]


class TestRanking:

    def result(self, level, count=60):
        return compute_athlete_mpi(make_inputs(sessions=make_sessions(count=count, level=level)))

    def test_descending_rank_and_percentile(self):
        low, mid, high = self.result(40), self.result(60), self.result(80)

        ranked = rank_athletes([low, high, mid])

        assert [r.result for r in ranked] == [high, mid, low]
        assert [r.rank for r in ranked] == [1, 2, 3]
        assert [r.percentile for r in ranked] == [100, 50, 0]
        assert all(r.pool_size == 3 for r in ranked)

    def test_ineligible_not_ranked(self):
        ranked = rank_athletes([self.result(80, count=10), self.result(50)])

        assert len(ranked) == 1
        assert ranked[0].pool_size == 1
        assert ranked[0].percentile == 100


class TestTrend:

    @pytest.mark.parametrize("current,previous,direction", [
        (62.5, 60, "rising"),
        (62, 60, "stable"),
        (58, 60, "stable"),
        (57, 60, "dropping"),
    ])
    def test_direction(self, current, previous, direction):
        assert trend_for(current, previous)[0] == direction

    def test_no_history(self):
        assert trend_for(70, None) == ("stable", 0.0)


class TestHelpers:

    def test_injury_hold_active(self):
        logs = [{"entry_date": AS_OF - timedelta(days=3), "day_status": "injury_hold"}]
        assert injury_hold_active(logs, AS_OF)

    def test_old_injury_ignored(self):
        logs = [{"entry_date": AS_OF - timedelta(days=10), "day_status": "injury_hold"}]
        assert not injury_hold_active(logs, AS_OF)

    def test_injury_flag_on_other_status(self):
        logs = [{"entry_date": AS_OF, "day_status": "recovery_only", "injury_mode": True}]
        assert injury_hold_active(logs, AS_OF)

    def test_game_practice_ratio(self):
        sessions = make_sessions(count=2, session_type="game") + make_sessions(count=4)
        assert game_practice_ratio(sessions) == 0.5
        assert game_practice_ratio(make_sessions(count=3, session_type="game")) is None

    def test_delta_maturity_needs_three_samples(self):
        assert delta_maturity_index(make_sessions(count=2)) is None
        sessions = make_sessions(count=2, player_grade=60, coach_grade=50) + make_sessions(count=2)
        assert delta_maturity_index(sessions) == 5.0

    def test_development_prompts_capped(self):
        composites = {"bqi": 40, "fqi": 70, "pei": 65, "decision": 62, "competitive": 66}

        prompts = development_prompts(composites, 75, "rising", 10)

        assert len(prompts) == 4
        assert prompts[0].startswith("Focus on Bat Quality")
        assert prompts[1].startswith("Fielding Quality is your strength")
        assert "integrity" in prompts[2]

    def test_development_prompts_session_countdown(self):
        prompts = development_prompts({"bqi": 50}, 100, "stable", 45)
        assert prompts[-1].startswith("15 sessions until ranking eligibility")
