"""
Integrity Rules

Static rule table mapping a detected condition to its label, severity and
score deduction. Detection lives elsewhere (services/integrity_detection.py
and admin actions); this module only says what a condition costs.

Integrity score:
    100 - sum(deductions of active flags) + 0.5 per verified session
clamped to [0, 100]. Deductions stack across simultaneously active flags.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

SEVERITY_INFO = "info"
SEVERITY_WARNING = "warning"
SEVERITY_CRITICAL = "critical"
SEVERITIES = (SEVERITY_INFO, SEVERITY_WARNING, SEVERITY_CRITICAL)

MAX_INTEGRITY = 100.0
MIN_INTEGRITY = 0.0
VERIFIED_SESSION_RECOVERY = 0.5


@dataclass(frozen=True)
class IntegrityRule:
    rule_id: str
    label: str
    severity: str
    deduction_pct: float
    description: str


def _rule(rule_id, label, severity, deduction_pct, description) -> IntegrityRule:
    return IntegrityRule(rule_id, label, severity, deduction_pct, description)


INTEGRITY_RULES: Mapping[str, IntegrityRule] = MappingProxyType({
    r.rule_id: r for r in (
        _rule("inflated_grading", "Inflated Self-Grading", SEVERITY_WARNING, 5.0,
              "Player self-grade exceeds the coach grade by more than 12 points."),
        _rule("volume_spike", "Suspicious Volume Spike", SEVERITY_INFO, 2.0,
              "Session volume is more than three times the 14-day average."),
        _rule("fatigue_inconsistency_hrv", "Fatigue Inconsistency", SEVERITY_INFO, 2.0,
              "High execution grade logged while reporting heavy fatigue."),
        _rule("retroactive_abuse", "Retroactive Logging Pattern", SEVERITY_WARNING, 5.0,
              "More than three retroactive sessions logged within 7 days."),
        _rule("grade_consistency", "Narrow Grade Band", SEVERITY_INFO, 2.0,
              "Last 10 self-grades fall within a 5-point band."),
        _rule("rapid_improvement", "Rapid Improvement", SEVERITY_INFO, 2.0,
              "Composite rose more than 20% over the score from 7 days ago."),
        _rule("game_inflation", "Game Grade Inflation", SEVERITY_WARNING, 5.0,
              "Game self-grade exceeds the 30-day practice average by more than 15 points."),
        _rule("low_integrity", "Low Integrity Threshold", SEVERITY_CRITICAL, 10.0,
              "Integrity score fell below the ranking gate."),
        _rule("grade_reversal", "Grade Reversal", SEVERITY_WARNING, 5.0,
              "Coach grade lands on the opposite side of average from the self-grade by a wide margin."),
        _rule("manual_admin_flag", "Manual Admin Flag", SEVERITY_CRITICAL, 15.0,
              "Raised by an administrator after review."),
        _rule("arbitration_request", "Arbitration Request", SEVERITY_INFO, 0.0,
              "Athlete asked for a grade dispute to be reviewed. Audit only."),
        _rule("grade_override_logged", "Grade Override Logged", SEVERITY_INFO, 0.0,
              "A coach override replaced an existing grade. Audit only."),
    )
})


def get_rule(rule_id: Optional[str]) -> Optional[IntegrityRule]:
    """Rule for a condition id, or None when the condition is not in the table."""
    if not rule_id:
        return None
    return INTEGRITY_RULES.get(rule_id)


def deduction_for(rule_id: Optional[str]) -> float:
    rule = get_rule(rule_id)
    return rule.deduction_pct if rule else 0.0


def calculate_integrity_score(
    active_flags: Iterable[Any],
    verified_session_count: int = 0,
) -> float:
    """
    Args:
        active_flags: pending IntegrityFlag rows or dicts with rule_id and an
                      optional recorded deduction_pct (the recorded value wins)
        verified_session_count: sessions with an independent (coach) grade
    """
    score = MAX_INTEGRITY
    for flag in active_flags:
        if isinstance(flag, dict):
            recorded = flag.get("deduction_pct")
            rule_id = flag.get("rule_id")
        else:
            recorded = getattr(flag, "deduction_pct", None)
            rule_id = getattr(flag, "rule_id", None)
        score -= recorded if recorded is not None else deduction_for(rule_id)

    score += max(0, verified_session_count) * VERIFIED_SESSION_RECOVERY
    return max(MIN_INTEGRITY, min(MAX_INTEGRITY, score))
