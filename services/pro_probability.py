"""
Pro-Probability Interpolator

Converts a 0-100 composite score into a probability (percent) of reaching
professional level. Tiers are contiguous from 0 to 100; inside a tier the
probability is interpolated linearly between the tier's bounds.

Tier ranges are [min_score, next tier's min_score); the top tier includes 100.
Interpolation uses the full width to the next tier, so the curve is
monotonically non-decreasing across tier boundaries.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import math

FLOOR_PROBABILITY = 0.1
UNVERIFIED_CAP = 99.0
VERIFIED_PRO_PROBABILITY = 100.0
VERIFIED_PRO_LEAGUES = frozenset({"mlb", "ausl"})


@dataclass(frozen=True)
class ProbabilityTier:
    name: str
    min_score: float
    max_score: float
    min_prob: float
    max_prob: float


# Highest tier first
PRO_PROBABILITY_TIERS: Tuple[ProbabilityTier, ...] = (
    ProbabilityTier("elite", 80.0, 100.0, 75.0, 99.0),
    ProbabilityTier("high", 65.0, 80.0, 45.0, 74.0),
    ProbabilityTier("above_average", 55.0, 65.0, 20.0, 44.0),
    ProbabilityTier("average", 45.0, 55.0, 8.0, 19.0),
    ProbabilityTier("developing", 30.0, 45.0, 2.0, 7.0),
    ProbabilityTier("entry", 0.0, 30.0, 0.1, 1.9),
)


def find_tier(score: float) -> Optional[ProbabilityTier]:
    top = PRO_PROBABILITY_TIERS[0]
    if score == top.max_score:
        return top
    for tier in PRO_PROBABILITY_TIERS:
        if tier.min_score <= score < tier.max_score:
            return tier
    return None


def interpolate_pro_probability(score) -> float:
    """
    Probability (0.1-99) for a composite score.

    Out-of-range scores are clamped to [0, 100]; a non-numeric score gets the
    floor probability.
    """
    try:
        score = float(score)
    except (TypeError, ValueError):
        return FLOOR_PROBABILITY
    if math.isnan(score):
        return FLOOR_PROBABILITY
    score = max(0.0, min(100.0, score))

    tier = find_tier(score)
    if tier is None:
        return FLOOR_PROBABILITY

    width = tier.max_score - tier.min_score
    ratio = (score - tier.min_score) / width if width > 0 else 0.0
    return tier.min_prob + ratio * (tier.max_prob - tier.min_prob)


def is_verified_pro(roster_verified: bool, current_league: Optional[str]) -> bool:
    return bool(roster_verified) and (current_league or "").lower() in VERIFIED_PRO_LEAGUES


def pro_probability_for(score, verified_pro: bool = False) -> float:
    """
    Final pro probability: a roster-verified MLB/AUSL athlete is a verified pro
    (100); everyone else is interpolated and capped at 99.
    """
    if verified_pro:
        return VERIFIED_PRO_PROBABILITY
    return min(UNVERIFIED_CAP, interpolate_pro_probability(score))
