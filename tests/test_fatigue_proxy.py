"""
Tests for the fatigue proxy and the fatigue-correlation flag.
"""
import pytest

from services.fatigue_proxy import (
    calculate_fatigue_proxy,
    fatigue_correlation_flag,
    is_fatigued_state,
    proxy_from_state,
)


class TestFatigueProxy:

    def test_all_inputs_missing_is_none(self):
        assert calculate_fatigue_proxy() is None

    def test_well_rested(self):
        result = calculate_fatigue_proxy(sleep_quality=5, stress_level=1)

        assert result.readiness == 100
        assert result.multiplier == 1.0
        assert result.flags == []

    @pytest.mark.parametrize("sleep,stress,expected", [
        (4, 2, 1.0),    # readiness 75
        (3, 3, 0.97),   # 50
        (3, 4, 0.93),   # 40
        (2, 4, 0.88),   # 25
    ])
    def test_ladder(self, sleep, stress, expected):
        assert calculate_fatigue_proxy(sleep, stress).multiplier == expected

    def test_inputs_clamped_to_scale(self):
        assert calculate_fatigue_proxy(9, -4).readiness == calculate_fatigue_proxy(5, 1).readiness

    def test_flags(self):
        result = calculate_fatigue_proxy(2, 5, {"body": 1})
        assert result.flags == ["poor_sleep", "high_stress", "low_body_state"]

    def test_single_input_uses_neutral_for_other(self):
        result = calculate_fatigue_proxy(sleep_quality=5)
        # 0.6 * 100 + 0.4 * 60
        assert result.readiness == 84


class TestFatigueCorrelation:

    def fatigued(self, grade):
        return {"fatigue_state": {"overall": 2}, "effective_grade": grade}

    def test_is_fatigued_state(self):
        assert is_fatigued_state({"body": 2})
        assert is_fatigued_state({"overall": 1})
        assert not is_fatigued_state({"body": 3, "overall": 4})
        assert not is_fatigued_state(None)

    def test_is_fatigued_state_coerces_client_values(self):
        assert is_fatigued_state({"body": "2"})
        assert is_fatigued_state({"overall": 1.6})
        assert not is_fatigued_state({"body": "tired", "overall": None})
        assert not is_fatigued_state(["body", 1])

    def test_needs_three_fatigued_sessions(self):
        assert not fatigue_correlation_flag([self.fatigued(70), self.fatigued(70)])

    def test_fires_above_sixty_percent(self):
        sessions = [self.fatigued(70), self.fatigued(65), self.fatigued(62), self.fatigued(40)]
        assert fatigue_correlation_flag(sessions)

    def test_quiet_at_or_below_sixty_percent(self):
        sessions = [
            self.fatigued(70), self.fatigued(65), self.fatigued(62),
            self.fatigued(40), self.fatigued(45),
        ]
        assert not fatigue_correlation_flag(sessions)


class TestProxyFromState:

    def test_reads_sleep_and_stress_from_session_state(self):
        result = proxy_from_state({"sleep_quality": 1, "stress_level": 5})
        assert result.multiplier == 0.88
        assert result.flags == ["poor_sleep", "high_stress"]

    def test_fatigued_body_flagged(self):
        result = proxy_from_state({"sleep_quality": "5", "stress_level": "1", "body": "2"})
        assert result.multiplier == 1.0
        assert result.flags == ["low_body_state"]

    def test_rested_body_alone_is_no_signal(self):
        assert proxy_from_state({"body": 4, "overall": 5}) is None
        assert proxy_from_state(None) is None
