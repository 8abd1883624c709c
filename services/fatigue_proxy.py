"""
Fatigue Proxy

Maps self-reported sleep quality and stress (both 1-5) to a fatigue
multiplier and a set of flags. There is no wearable data behind this; it is a
proxy, so the multiplier ladder is deliberately shallow.

    sleep 1-5   -> 0-100 (5 is best)
    stress 1-5  -> 0-100 inverted (1 is best)
    readiness   = 0.6 * sleep + 0.4 * stress

A missing input falls back to a neutral sub-score. With no input at all the
result is None.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional

SCALE_MIN = 1
SCALE_MAX = 5

SLEEP_WEIGHT = 0.6
STRESS_WEIGHT = 0.4
NEUTRAL_SLEEP_SCORE = 50.0
NEUTRAL_STRESS_SCORE = 60.0

# (readiness floor, multiplier), highest floor first
FATIGUE_LADDER = (
    (70.0, 1.00),
    (50.0, 0.97),
    (30.0, 0.93),
    (0.0, 0.88),
)

POOR_SLEEP_BELOW = 3
HIGH_STRESS_FROM = 4
LOW_BODY_STATE_AT_OR_BELOW = 2

# Session-level correlation: graded high while reporting fatigue
FATIGUE_CORRELATION_MIN_SESSIONS = 3
FATIGUE_CORRELATION_GRADE = 60
FATIGUE_CORRELATION_SHARE = 0.6


@dataclass
class FatigueProxyResult:
    multiplier: float
    readiness: float
    sleep_score: float
    stress_score: float
    flags: List[str] = field(default_factory=list)


def _clamp_scale(value) -> Optional[int]:
    if value is None:
        return None
    try:
        return max(SCALE_MIN, min(SCALE_MAX, int(round(float(value)))))
    except (TypeError, ValueError):
        return None


def is_fatigued_state(state: Optional[dict]) -> bool:
    """Body or overall fatigue self-report at or below 2 of 5."""
    if not isinstance(state, dict):
        return False
    for key in ("body", "overall"):
        value = _clamp_scale(state.get(key))
        if value is not None and value <= LOW_BODY_STATE_AT_OR_BELOW:
            return True
    return False


def proxy_from_state(state: Optional[dict]) -> Optional[FatigueProxyResult]:
    """Proxy for a session's fatigue_state self-report."""
    if not isinstance(state, dict):
        return None
    fatigued = state if is_fatigued_state(state) else None
    return calculate_fatigue_proxy(state.get("sleep_quality"), state.get("stress_level"), fatigued)


def calculate_fatigue_proxy(
    sleep_quality=None,
    stress_level=None,
    fatigue_state: Optional[dict] = None,
) -> Optional[FatigueProxyResult]:
    sleep = _clamp_scale(sleep_quality)
    stress = _clamp_scale(stress_level)
    if sleep is None and stress is None and not fatigue_state:
        return None

    sleep_score = (sleep - 1) / 4 * 100 if sleep is not None else NEUTRAL_SLEEP_SCORE
    stress_score = (5 - stress) / 4 * 100 if stress is not None else NEUTRAL_STRESS_SCORE
    readiness = SLEEP_WEIGHT * sleep_score + STRESS_WEIGHT * stress_score

    multiplier = FATIGUE_LADDER[-1][1]
    for floor, value in FATIGUE_LADDER:
        if readiness >= floor:
            multiplier = value
            break

    flags: List[str] = []
    if sleep is not None and sleep < POOR_SLEEP_BELOW:
        flags.append("poor_sleep")
    if stress is not None and stress >= HIGH_STRESS_FROM:
        flags.append("high_stress")
    if is_fatigued_state(fatigue_state):
        flags.append("low_body_state")

    return FatigueProxyResult(
        multiplier=multiplier,
        readiness=round(readiness, 1),
        sleep_score=round(sleep_score, 1),
        stress_score=round(stress_score, 1),
        flags=flags,
    )


def fatigue_correlation_flag(sessions: Iterable[Any]) -> bool:
    """
    True when an athlete keeps grading themselves high on fatigued days.

    Needs at least three fatigued sessions; fires when more than 60% of them
    carry an effective grade above 60.
    """
    fatigued = []
    for s in sessions:
        state = s.get("fatigue_state") if isinstance(s, dict) else getattr(s, "fatigue_state", None)
        if is_fatigued_state(state):
            fatigued.append(s)
    if len(fatigued) < FATIGUE_CORRELATION_MIN_SESSIONS:
        return False

    def grade(s):
        if isinstance(s, dict):
            return s.get("effective_grade") or s.get("player_grade") or 0
        return getattr(s, "effective_grade", None) or getattr(s, "player_grade", None) or 0

    high = sum(1 for s in fatigued if grade(s) > FATIGUE_CORRELATION_GRADE)
    return high / len(fatigued) > FATIGUE_CORRELATION_SHARE
