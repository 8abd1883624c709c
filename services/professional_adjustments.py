"""
Verified-stat boosts and contract status modifiers.

Boosts are additive points on the adjusted composite, scaled by the profile's
confidence weight. Contract modifiers are multiplicative; a retired athlete's
score is frozen (modifier 0 means "do not apply").
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional


@dataclass(frozen=True)
class VerifiedStatBoost:
    competitive_boost: float
    validation_boost: float


VERIFIED_STAT_BOOSTS: Mapping[str, VerifiedStatBoost] = MappingProxyType({
    "mlb": VerifiedStatBoost(22, 15),
    "milb": VerifiedStatBoost(8, 5),
    "ncaa_d1": VerifiedStatBoost(12, 10),
    "ncaa_d2": VerifiedStatBoost(8, 7),
    "ncaa_d3": VerifiedStatBoost(5, 4),
    "naia": VerifiedStatBoost(4, 3),
    "ausl": VerifiedStatBoost(22, 15),
    "indie_pro": VerifiedStatBoost(6, 4),
    "foreign_pro": VerifiedStatBoost(10, 7),
})

# Release count -> penalty percent; four or more releases cost 30%
RELEASE_PENALTIES = {1: 12, 2: 18, 3: 25}
MAX_RELEASE_PENALTY = 30

FREE_AGENT_MODIFIER = 0.95
INJURED_LIST_MODIFIER = 0.90
RETIRED_MODIFIER = 0.0  # freeze


def release_penalty_pct(release_count: int) -> int:
    if release_count <= 0:
        return 0
    return RELEASE_PENALTIES.get(release_count, MAX_RELEASE_PENALTY)


def contract_modifier(contract_status: Optional[str], release_count: int = 0) -> float:
    status = (contract_status or "").lower()
    if status == "free_agent":
        return FREE_AGENT_MODIFIER
    if status == "released":
        return 1.0 - release_penalty_pct(release_count) / 100
    if status == "injured_list":
        return INJURED_LIST_MODIFIER
    if status == "retired":
        return RETIRED_MODIFIER
    return 1.0


def verified_boost_total(profiles: Iterable[Any]) -> float:
    """Sum of competitive boosts over verified profiles, each scaled by confidence (0-100)."""
    total = 0.0
    for profile in profiles:
        if isinstance(profile, dict):
            profile_type = profile.get("profile_type")
            weight = profile.get("confidence_weight")
        else:
            profile_type = getattr(profile, "profile_type", None)
            weight = getattr(profile, "confidence_weight", None)
        boost = VERIFIED_STAT_BOOSTS.get((profile_type or "").lower())
        if boost is None:
            continue
        total += boost.competitive_boost * ((weight if weight is not None else 100) / 100)
    return total
