"""
Integrity condition detectors.

Each detector is a pure function over data the caller has already fetched and
returns a DetectedCondition (rule id + evidence) or None. The penalty for a
condition comes from services/integrity_rules.py, not from here.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from services.fatigue_proxy import is_fatigued_state

INFLATED_GRADING_DELTA = 12
VOLUME_SPIKE_FACTOR = 3
VOLUME_SPIKE_MIN_SESSIONS = 3  # more than two recent sessions
FATIGUE_EXECUTION_GRADE = 60
RETROACTIVE_MAX_PER_WEEK = 3
GRADE_BAND_SAMPLE = 10
GRADE_BAND_WIDTH = 5
RAPID_IMPROVEMENT_PCT = 20
GAME_INFLATION_DELTA = 15
GAME_INFLATION_MIN_PRACTICES = 3
GRADE_REVERSAL_MARGIN = 20
GRADE_MIDPOINT = 50


@dataclass
class DetectedCondition:
    rule_id: str
    details: Dict[str, Any] = field(default_factory=dict)


def detect_inflated_grading(player_grade, coach_grade) -> Optional[DetectedCondition]:
    if not player_grade or not coach_grade:
        return None
    delta = player_grade - coach_grade
    if delta > INFLATED_GRADING_DELTA:
        return DetectedCondition("inflated_grading", {
            "player_grade": player_grade, "coach_grade": coach_grade, "delta": delta,
        })
    return None


def detect_volume_spike(current_volume: int, recent_volumes: Sequence[int]) -> Optional[DetectedCondition]:
    """recent_volumes: total reps of each session in the last 14 days."""
    if len(recent_volumes) < VOLUME_SPIKE_MIN_SESSIONS:
        return None
    avg_volume = sum(recent_volumes) / len(recent_volumes)
    if avg_volume > 0 and current_volume > avg_volume * VOLUME_SPIKE_FACTOR:
        return DetectedCondition("volume_spike", {
            "current_volume": current_volume, "avg_volume": round(avg_volume, 1),
        })
    return None


def detect_fatigue_inconsistency(fatigue_state: Optional[dict], avg_execution: float) -> Optional[DetectedCondition]:
    if is_fatigued_state(fatigue_state) and avg_execution > FATIGUE_EXECUTION_GRADE:
        return DetectedCondition("fatigue_inconsistency_hrv", {
            "fatigue_state": fatigue_state, "execution_grade": avg_execution,
        })
    return None


def detect_retroactive_abuse(is_retroactive: bool, retroactive_count_7d: int) -> Optional[DetectedCondition]:
    if is_retroactive and retroactive_count_7d > RETROACTIVE_MAX_PER_WEEK:
        return DetectedCondition("retroactive_abuse", {"retroactive_count_7d": retroactive_count_7d})
    return None


def detect_grade_consistency(recent_player_grades: Sequence[float]) -> Optional[DetectedCondition]:
    """recent_player_grades: newest first; only the last 10 are considered."""
    grades = list(recent_player_grades)[:GRADE_BAND_SAMPLE]
    if len(grades) < GRADE_BAND_SAMPLE:
        return None
    low, high = min(grades), max(grades)
    if high - low <= GRADE_BAND_WIDTH:
        return DetectedCondition("grade_consistency", {
            "min_grade": low, "max_grade": high, "range": high - low,
        })
    return None


def detect_rapid_improvement(current_composite: float, week_ago_score: Optional[float]) -> Optional[DetectedCondition]:
    if not week_ago_score:
        return None
    pct_change = (current_composite - week_ago_score) / week_ago_score * 100
    if pct_change > RAPID_IMPROVEMENT_PCT:
        return DetectedCondition("rapid_improvement", {
            "pct_change": round(pct_change), "previous": week_ago_score,
        })
    return None


def detect_game_inflation(
    is_game: bool,
    player_grade,
    practice_grades: Sequence[float],
) -> Optional[DetectedCondition]:
    if not is_game or not player_grade or len(practice_grades) < GAME_INFLATION_MIN_PRACTICES:
        return None
    avg_practice = sum(practice_grades) / len(practice_grades)
    if player_grade - avg_practice > GAME_INFLATION_DELTA:
        return DetectedCondition("game_inflation", {
            "game_grade": player_grade,
            "avg_practice": round(avg_practice),
            "delta": round(player_grade - avg_practice),
        })
    return None


def detect_grade_reversal(player_grade, coach_grade) -> Optional[DetectedCondition]:
    """Self-grade and coach grade sit on opposite sides of 50, far apart."""
    if player_grade is None or coach_grade is None:
        return None
    opposite = (player_grade - GRADE_MIDPOINT) * (coach_grade - GRADE_MIDPOINT) < 0
    if opposite and abs(player_grade - coach_grade) > GRADE_REVERSAL_MARGIN:
        return DetectedCondition("grade_reversal", {
            "player_grade": player_grade, "coach_grade": coach_grade,
        })
    return None


def detect_grade_override(override_grade, replaced_grade) -> Optional[DetectedCondition]:
    """Audit-only record of a coach override replacing an existing grade."""
    if override_grade is None or replaced_grade is None:
        return None
    return DetectedCondition("grade_override_logged", {
        "override_grade": override_grade, "replaced_grade": replaced_grade,
    })


def detect_low_integrity(integrity_score: float, gate: float) -> Optional[DetectedCondition]:
    if integrity_score < gate:
        return DetectedCondition("low_integrity", {"integrity_score": integrity_score, "gate": gate})
    return None


def collect(*conditions: Optional[DetectedCondition]) -> List[DetectedCondition]:
    return [c for c in conditions if c is not None]
