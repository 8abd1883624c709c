"""
Competition tier, fielding position and pitch-type weights.

Three independent static tables. Every lookup is total: an unknown or missing
key is treated as neutral and returns the table default (1.0) instead of
raising, since these are advisory scoring heuristics, not validators.
"""

from types import MappingProxyType
from typing import Mapping, Optional

import logging

logger = logging.getLogger(__name__)

NEUTRAL_WEIGHT = 1.0

# Competition tier -> multiplier applied to the raw composite
TIER_MULTIPLIERS: Mapping[str, float] = MappingProxyType({
    "rec": 0.60,
    "travel": 0.75,
    "hs_jv": 0.80,
    "hs_varsity": 0.85,
    "college_d3": 0.90,
    "college_d2": 0.95,
    "college_d1": 1.05,
    "indie_pro": 1.10,
    "milb": 1.25,
    "mlb": 1.50,
    "ausl": 1.50,
})

# Fielding position -> positional difficulty weight
POSITION_WEIGHTS: Mapping[str, float] = MappingProxyType({
    "C": 1.08,
    "1B": 0.95,
    "2B": 1.02,
    "SS": 1.06,
    "3B": 1.00,
    "LF": 0.96,
    "CF": 1.04,
    "RF": 0.98,
    "P": 1.10,
    "DH": 0.90,
    "UT": 1.00,
    "DP": 0.90,  # softball designated player
})

# Pitch type -> difficulty tier. Baseline fastballs are 1.0.
PITCH_TYPE_WEIGHTS: Mapping[str, float] = MappingProxyType({
    # baseball
    "four_seam": 1.00,
    "two_seam": 1.00,
    "sinker": 1.05,
    "cutter": 1.10,
    "changeup": 1.10,
    "slider": 1.15,
    "curveball": 1.15,
    "sweeper": 1.20,
    "splitter": 1.25,
    "knuckle_curve": 1.25,
    "knuckleball": 1.35,
    # softball
    "fastball": 1.00,
    "drop": 1.15,
    "curve": 1.15,
    "change": 1.10,
    "screwball": 1.25,
    "drop_curve": 1.25,
    "rise": 1.30,
})

# Tier -> ranking segment
TIER_SEGMENTS: Mapping[str, str] = MappingProxyType({
    "rec": "youth",
    "travel": "youth",
    "hs_jv": "hs",
    "hs_varsity": "hs",
    "college_d3": "college",
    "college_d2": "college",
    "college_d1": "college",
    "indie_pro": "pro",
    "milb": "pro",
    "mlb": "pro",
    "ausl": "pro",
})


def _normalize(key: Optional[str], upper: bool = False) -> str:
    if not key:
        return ""
    key = str(key).strip()
    return key.upper() if upper else key.lower()


def get_tier_multiplier(tier: Optional[str]) -> float:
    multiplier = TIER_MULTIPLIERS.get(_normalize(tier))
    if multiplier is None:
        if tier:
            logger.debug(f"Unknown competition tier '{tier}', using neutral weight")
        return NEUTRAL_WEIGHT
    return multiplier


def get_position_weight(position: Optional[str]) -> float:
    return POSITION_WEIGHTS.get(_normalize(position, upper=True), NEUTRAL_WEIGHT)


def get_pitch_type_weight(pitch_type: Optional[str]) -> float:
    return PITCH_TYPE_WEIGHTS.get(_normalize(pitch_type), NEUTRAL_WEIGHT)


def tier_to_segment(tier: Optional[str]) -> str:
    """Ranking pool segment for a tier; 'general' when unknown."""
    return TIER_SEGMENTS.get(_normalize(tier), "general")
