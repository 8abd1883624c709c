"""
Tests for the integrity rule table, score and condition detectors.
"""
import pytest

from services import integrity_detection as detect
from services.integrity_rules import (
    INTEGRITY_RULES,
    SEVERITIES,
    SEVERITY_INFO,
    calculate_integrity_score,
    deduction_for,
    get_rule,
)


class TestRuleTable:

    def test_known_rule(self):
        rule = get_rule("inflated_grading")
        assert rule.severity == "warning"
        assert rule.deduction_pct == 5.0
        assert rule.label

    def test_manual_admin_flag_is_critical(self):
        rule = get_rule("manual_admin_flag")
        assert rule.severity == "critical"
        assert rule.deduction_pct == 15.0

    def test_unknown_rule(self):
        assert get_rule("time_travel") is None
        assert get_rule(None) is None
        assert deduction_for("time_travel") == 0.0

    def test_two_informational_rules_carry_no_deduction(self):
        zero = sorted(r.rule_id for r in INTEGRITY_RULES.values() if r.deduction_pct == 0)
        assert zero == ["arbitration_request", "grade_override_logged"]
        assert all(INTEGRITY_RULES[r].severity == SEVERITY_INFO for r in zero)

    def test_every_rule_has_known_severity(self):
        assert all(r.severity in SEVERITIES for r in INTEGRITY_RULES.values())


class TestIntegrityScore:

    def test_clean_record(self):
        assert calculate_integrity_score([]) == 100

    def test_deductions_stack(self):
        flags = [{"rule_id": "inflated_grading"}, {"rule_id": "manual_admin_flag"}, {"rule_id": "volume_spike"}]
        assert calculate_integrity_score(flags) == 78

    def test_recorded_deduction_wins(self):
        assert calculate_integrity_score([{"rule_id": "inflated_grading", "deduction_pct": 7}]) == 93

    def test_verified_sessions_recover(self):
        flags = [{"rule_id": "manual_admin_flag"}]
        assert calculate_integrity_score(flags, verified_session_count=10) == 90

    def test_capped_at_100(self):
        assert calculate_integrity_score([{"rule_id": "volume_spike"}], verified_session_count=50) == 100

    def test_floored_at_zero(self):
        flags = [{"rule_id": "manual_admin_flag"}] * 10
        assert calculate_integrity_score(flags) == 0

    def test_informational_flags_free(self):
        assert calculate_integrity_score([{"rule_id": "arbitration_request"}]) == 100


class TestDetectors:

    def test_inflated_grading(self):
        assert detect.detect_inflated_grading(70, 55).rule_id == "inflated_grading"
        assert detect.detect_inflated_grading(67, 55) is None
        assert detect.detect_inflated_grading(70, None) is None

    def test_volume_spike(self):
        assert detect.detect_volume_spike(100, [20, 30, 25]).rule_id == "volume_spike"
        assert detect.detect_volume_spike(100, [40, 40, 40]) is None

    def test_volume_spike_needs_history(self):
        assert detect.detect_volume_spike(100, [10, 10]) is None

    def test_fatigue_inconsistency(self):
        condition = detect.detect_fatigue_inconsistency({"body": 2}, 65)
        assert condition.rule_id == "fatigue_inconsistency_hrv"
        assert detect.detect_fatigue_inconsistency({"body": 2}, 55) is None
        assert detect.detect_fatigue_inconsistency({"body": 4}, 75) is None

    def test_retroactive_abuse(self):
        assert detect.detect_retroactive_abuse(True, 4).rule_id == "retroactive_abuse"
        assert detect.detect_retroactive_abuse(True, 3) is None
        assert detect.detect_retroactive_abuse(False, 9) is None

    def test_grade_consistency(self):
        narrow = [50, 52, 51, 53, 55, 50, 54, 52, 51, 50]
        assert detect.detect_grade_consistency(narrow).rule_id == "grade_consistency"
        assert detect.detect_grade_consistency(narrow[:9]) is None
        assert detect.detect_grade_consistency([40] + narrow[:9]) is None

    def test_rapid_improvement(self):
        assert detect.detect_rapid_improvement(61, 50).rule_id == "rapid_improvement"
        assert detect.detect_rapid_improvement(60, 50) is None
        assert detect.detect_rapid_improvement(90, None) is None

    def test_game_inflation(self):
        assert detect.detect_game_inflation(True, 70, [50, 52, 54]).rule_id == "game_inflation"
        assert detect.detect_game_inflation(True, 70, [50, 52]) is None
        assert detect.detect_game_inflation(False, 70, [50, 52, 54]) is None

    def test_grade_reversal(self):
        assert detect.detect_grade_reversal(65, 40).rule_id == "grade_reversal"
        assert detect.detect_grade_reversal(60, 45) is None   # only 15 apart
        assert detect.detect_grade_reversal(75, 55) is None   # same side of 50

    def test_grade_override(self):
        assert detect.detect_grade_override(60, 50).rule_id == "grade_override_logged"
        assert detect.detect_grade_override(None, 50) is None
        assert detect.detect_grade_override(60, None) is None

    def test_low_integrity(self):
        assert detect.detect_low_integrity(79.5, 80).rule_id == "low_integrity"
        assert detect.detect_low_integrity(80, 80) is None

    def test_collect_drops_none(self):
        found = detect.collect(None, detect.detect_inflated_grading(70, 55), None)
        assert [c.rule_id for c in found] == ["inflated_grading"]

    def test_detected_rules_exist_in_table(self):
        conditions = [
            detect.detect_inflated_grading(70, 55),
            detect.detect_volume_spike(100, [20, 30, 25]),
            detect.detect_fatigue_inconsistency({"body": 2}, 65),
            detect.detect_retroactive_abuse(True, 4),
            detect.detect_grade_consistency([50] * 10),
            detect.detect_rapid_improvement(61, 50),
            detect.detect_game_inflation(True, 70, [50, 52, 54]),
            detect.detect_grade_reversal(65, 40),
            detect.detect_grade_override(60, 50),
            detect.detect_low_integrity(10, 80),
        ]
        assert all(get_rule(c.rule_id) is not None for c in conditions)
