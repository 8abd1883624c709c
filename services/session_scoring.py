"""
Session Composite Scoring

Turns one performance session into its composite indexes:

    drill blocks  -> rep-weighted execution average (20-80) -> normalized 0-100
    session type  -> five weighting multipliers
    micro reps    -> blended into BQI (batting), FQI (fielding), PEI (pitching)
    fatigue state -> readiness multiplier on the volume index

Every index is capped at 100. The function is pure: it reads the session's
fields and returns a result, the caller persists it.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import logging
import re

from services.fatigue_proxy import proxy_from_state
from services.grade_hierarchy import resolve_effective_grade
from services.session_weighting import get_session_weights, is_game_session
from services.weight_tables import get_pitch_type_weight

logger = logging.getLogger(__name__)

GRADE_FLOOR = 20.0
GRADE_CEILING = 80.0
DEFAULT_EXECUTION_GRADE = 50.0
DEFAULT_BLOCK_VOLUME = 1
INDEX_CAP = 100.0

VALID_SWING_INTENTS = {"mechanical", "game_intent", "situational", "hr_derby"}
VALID_BATTED_BALL_TYPES = {"ground", "line", "fly", "barrel"}
VALID_SPIN_DIRECTIONS = {"topspin", "backspin", "sidespin"}
VELOCITY_BAND_PATTERN = re.compile(r"^(\d+-\d+|\d+\+|<\d+)$")

# Share of high-velocity reps can raise BQI by up to 15%
VELOCITY_DIFFICULTY_MAX_BONUS = 0.15
HIGH_VELOCITY_FLOOR = {"baseball": 100, "softball": 70}

BP_TREND_MIN_REPS = 5
BP_TREND_ABOVE_SHARE = 0.25
PRO_READINESS_MIN_REPS = 5
PRO_READINESS_SUCCESS_SHARE = 0.4
SUCCESS_CONTACT = {"barrel", "hard", "line"}


@dataclass
class SessionComposite:
    avg_execution: float
    total_reps: int
    intent_compliance_pct: float
    normalized_score: float
    effective_grade: Optional[float]
    indexes: Dict[str, Any] = field(default_factory=dict)

    @property
    def overall(self) -> float:
        """Mean of the five graded indexes (used for rapid-improvement checks)."""
        keys = ("bqi", "fqi", "pei", "decision", "competitive_execution")
        return sum(self.indexes.get(k, 0.0) for k in keys) / len(keys)


def _get(source: Any, name: str, default=None):
    if isinstance(source, dict):
        return source.get(name, default)
    return getattr(source, name, default)


def normalize_grade(grade: float) -> float:
    """Map a 20-80 grade onto 0-100. Out-of-scale grades are clamped first."""
    grade = max(GRADE_FLOOR, min(GRADE_CEILING, float(grade)))
    return (grade - GRADE_FLOOR) / (GRADE_CEILING - GRADE_FLOOR) * 100.0


def clean_micro_rep(rep: Dict[str, Any]) -> Dict[str, Any]:
    """Drop enum-like fields that carry unrecognized values."""
    cleaned = dict(rep)
    if cleaned.get("swing_intent") and cleaned["swing_intent"] not in VALID_SWING_INTENTS:
        del cleaned["swing_intent"]
    if cleaned.get("batted_ball_type") and cleaned["batted_ball_type"] not in VALID_BATTED_BALL_TYPES:
        del cleaned["batted_ball_type"]
    if cleaned.get("spin_direction") and cleaned["spin_direction"] not in VALID_SPIN_DIRECTIONS:
        del cleaned["spin_direction"]
    for key in ("machine_velocity_band", "velocity_band"):
        band = cleaned.get(key)
        if band and not VELOCITY_BAND_PATTERN.match(str(band)):
            del cleaned[key]
    return cleaned


def velocity_band_upper(band: str) -> int:
    """Upper bound of a band: '100-110' -> 110, '75+' -> 75, '<60' -> 60."""
    if band.endswith("+"):
        return int(band[:-1])
    if band.startswith("<"):
        return int(band[1:])
    return int(band.split("-")[-1])


def is_high_velocity_band(band: str, sport: str) -> bool:
    if band.endswith("+") and sport == "softball":
        return True
    floor = HIGH_VELOCITY_FLOOR.get(sport, HIGH_VELOCITY_FLOOR["baseball"])
    return velocity_band_upper(band) >= floor


def _mean(values: List[float]) -> Optional[float]:
    return sum(values) / len(values) if values else None


def bp_power_trend(reps: List[Dict[str, Any]]) -> Optional[str]:
    """
    'improving' when more than a quarter of the later BP distances clear the
    75th percentile of the earlier ones, else 'stable'. None under five reps.
    """
    distances = [
        float(r["bp_distance_ft"]) for r in reps
        if isinstance(r.get("bp_distance_ft"), (int, float)) and r["bp_distance_ft"] > 0
    ]
    if len(distances) < BP_TREND_MIN_REPS:
        return None
    half = len(distances) // 2
    baseline = sorted(distances[:half])
    p75 = baseline[int(len(baseline) * 0.75)]
    later = distances[half:]
    above = sum(1 for d in later if d > p75) / len(later)
    return "improving" if above > BP_TREND_ABOVE_SHARE else "stable"


def pro_readiness_velocity(reps: List[Dict[str, Any]], sport: str) -> bool:
    """Hard contact on more than 40% of at least five high-velocity machine reps."""
    high = [
        r for r in reps
        if r.get("machine_velocity_band") and is_high_velocity_band(r["machine_velocity_band"], sport)
    ]
    if len(high) < PRO_READINESS_MIN_REPS:
        return False
    success = sum(1 for r in high if (r.get("contact_quality") or r.get("batted_ball_type")) in SUCCESS_CONTACT)
    return success / len(high) > PRO_READINESS_SUCCESS_SHARE


def _micro_aggregates(reps: List[Dict[str, Any]], sport: str) -> Dict[str, Any]:
    exec_scores = [r["execution_score"] for r in reps if r.get("execution_score")]
    batted = [r["batted_ball_type"] for r in reps if r.get("batted_ball_type")]
    velocity_reps = [r for r in reps if r.get("machine_velocity_band")]
    command = [r["pitch_command_grade"] for r in reps if r.get("pitch_command_grade")]
    throw_acc = [r["throw_accuracy"] for r in reps if r.get("throw_accuracy")]
    pitch_weights = [get_pitch_type_weight(r["pitch_type"]) for r in reps if r.get("pitch_type")]

    avg_exec = _mean(exec_scores)
    aggregates: Dict[str, Any] = {
        # execution_score is 1-10
        "avg_exec_score": avg_exec * 10 if avg_exec is not None else None,
        "barrel_pct": None,
        "line_drive_pct": None,
        "hard_contact_pct": None,
        "velocity_difficulty_mult": 1.0,
        "avg_command_grade": _mean(command),
        "avg_throw_accuracy": _mean(throw_acc),
        "pitch_type_mult": _mean(pitch_weights) or 1.0,
    }

    if batted:
        n = len(batted)
        aggregates["barrel_pct"] = batted.count("barrel") / n * 100
        aggregates["line_drive_pct"] = batted.count("line") / n * 100
        aggregates["hard_contact_pct"] = sum(1 for b in batted if b in ("barrel", "line")) / n * 100

    if velocity_reps:
        high = sum(1 for r in velocity_reps if is_high_velocity_band(r["machine_velocity_band"], sport))
        aggregates["velocity_difficulty_mult"] = 1.0 + high / len(velocity_reps) * VELOCITY_DIFFICULTY_MAX_BONUS

    aggregates["bp_power_trend"] = bp_power_trend(reps)
    aggregates["pro_readiness_velocity"] = pro_readiness_velocity(reps, sport)
    return aggregates


def compute_session_composite(session: Any, sport: Optional[str] = None) -> SessionComposite:
    """
    Score one session.

    Args:
        session: PerformanceSession row or dict with drill_blocks, session_type,
                 micro_layer_data and the grade fields
        sport: overrides session.sport (athlete MPI settings win over the row)
    """
    sport = (sport or _get(session, "sport") or "baseball").lower()
    blocks = _get(session, "drill_blocks") or []

    total_execution = 0.0
    total_reps = 0
    intent_reps = 0
    for block in blocks:
        execution = block.get("execution_grade") or DEFAULT_EXECUTION_GRADE
        reps = block.get("volume") or DEFAULT_BLOCK_VOLUME
        total_execution += execution * reps
        total_reps += reps
        if block.get("intent"):
            intent_reps += reps

    avg_execution = total_execution / total_reps if total_reps > 0 else DEFAULT_EXECUTION_GRADE
    intent_pct = intent_reps / total_reps * 100 if total_reps > 0 else 0.0
    normalized = normalize_grade(avg_execution)

    session_type = _get(session, "session_type")
    weights = get_session_weights(session_type)

    raw_reps = _get(session, "micro_layer_data") or []
    reps = [clean_micro_rep(r) for r in raw_reps if isinstance(r, dict)]
    micro = _micro_aggregates(reps, sport)

    # BQI: drill grade blended with micro execution, barrels and pitch velocity
    bqi = normalized * weights.competitive_execution
    if micro["avg_exec_score"] is not None:
        bqi = bqi * 0.7 + micro["avg_exec_score"] * 0.3
    if micro["barrel_pct"] is not None:
        bqi += micro["barrel_pct"] * 0.1
    bqi *= micro["velocity_difficulty_mult"]

    # FQI: blended with throw accuracy
    fqi = normalized * 0.9
    if micro["avg_throw_accuracy"] is not None:
        fqi = fqi * 0.6 + normalize_grade(micro["avg_throw_accuracy"]) * 0.4

    # PEI: blended with command grade, scaled by pitch-mix difficulty
    pei = normalized * 1.05
    if micro["avg_command_grade"] is not None:
        pei = pei * 0.6 + normalize_grade(micro["avg_command_grade"]) * 0.4
    pei *= micro["pitch_type_mult"]

    # self-reported readiness discounts the session load only
    fatigue = proxy_from_state(_get(session, "fatigue_state"))
    fatigue_multiplier = fatigue.multiplier if fatigue else 1.0

    indexes: Dict[str, Any] = {
        "bqi": min(INDEX_CAP, bqi),
        "fqi": min(INDEX_CAP, fqi),
        "pei": min(INDEX_CAP, pei),
        "decision": min(INDEX_CAP, normalized * weights.decision_index),
        "competitive_execution": min(INDEX_CAP, normalized * weights.competitive_execution),
        "skill_refinement": min(INDEX_CAP, normalized * weights.skill_refinement),
        "intent_compliance": min(INDEX_CAP, intent_pct * weights.intent_compliance),
        "volume_adjusted": total_reps * weights.volume * fatigue_multiplier,
        "barrel_pct": micro["barrel_pct"],
        "hard_contact_pct": micro["hard_contact_pct"],
        "line_drive_pct": micro["line_drive_pct"],
        "velocity_difficulty_mult": micro["velocity_difficulty_mult"],
        "pitch_type_mult": micro["pitch_type_mult"],
        "bp_power_trend": micro["bp_power_trend"],
        "pro_readiness_velocity": micro["pro_readiness_velocity"],
        "fatigue_multiplier": fatigue_multiplier,
        "fatigue_readiness": fatigue.readiness if fatigue else None,
        "fatigue_flags": fatigue.flags if fatigue else [],
        "is_game": is_game_session(session_type),
    }

    return SessionComposite(
        avg_execution=avg_execution,
        total_reps=total_reps,
        intent_compliance_pct=intent_pct,
        normalized_score=normalized,
        effective_grade=resolve_effective_grade(session, fallback=avg_execution),
        indexes=indexes,
    )
