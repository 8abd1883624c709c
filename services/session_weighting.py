"""
Session-type weighting.

Each session type carries a bundle of five multipliers applied to the
per-block grades of that session:

    competitive_execution, decision_index, volume, skill_refinement, intent_compliance

Games and live scrimmages amplify competitive and decision weight while
discounting volume: a handful of competitive reps carries more signal than a
bucket of practice swings. Rehab sessions are heavily discounted across all
five dimensions because they say little about skill level.
"""

from dataclasses import dataclass, asdict
from types import MappingProxyType
from typing import Dict, Mapping, Optional

GAME_SESSION_TYPES = frozenset({"game", "live_scrimmage"})
REHAB_SESSION_TYPES = frozenset({"rehab_session"})

SESSION_TYPES = (
    "personal_practice",
    "team_practice",
    "coach_lesson",
    "game",
    "post_game_analysis",
    "bullpen",
    "live_scrimmage",
    "rehab_session",
)


@dataclass(frozen=True)
class SessionWeights:
    competitive_execution: float = 1.0
    decision_index: float = 1.0
    volume: float = 1.0
    skill_refinement: float = 1.0
    intent_compliance: float = 1.0

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


NEUTRAL_SESSION_WEIGHTS = SessionWeights()

SESSION_TYPE_WEIGHTS: Mapping[str, SessionWeights] = MappingProxyType({
    "personal_practice": SessionWeights(1.00, 1.00, 1.00, 1.05, 1.00),
    "team_practice": SessionWeights(1.05, 1.05, 0.95, 1.00, 1.00),
    "coach_lesson": SessionWeights(1.00, 1.00, 0.90, 1.15, 1.05),
    "game": SessionWeights(1.25, 1.18, 0.70, 0.90, 1.10),
    "post_game_analysis": SessionWeights(0.80, 1.10, 0.50, 1.00, 1.00),
    "bullpen": SessionWeights(1.05, 1.00, 0.90, 1.10, 1.00),
    "live_scrimmage": SessionWeights(1.25, 1.18, 0.70, 0.95, 1.05),
    "rehab_session": SessionWeights(0.30, 0.30, 0.30, 0.50, 0.40),
})


def get_session_weights(session_type: Optional[str]) -> SessionWeights:
    """Weights for a session type; unknown types are neutral."""
    return SESSION_TYPE_WEIGHTS.get((session_type or "").lower(), NEUTRAL_SESSION_WEIGHTS)


def is_game_session(session_type: Optional[str]) -> bool:
    return (session_type or "").lower() in GAME_SESSION_TYPES
