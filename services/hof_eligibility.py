"""
Hall-of-Fame eligibility.

Requires fully verified professional status (pro probability of 100, not
merely a high probability) AND at least five eligible professional seasons.
Which leagues' seasons count depends on the sport.
"""

from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

HOF_MIN_SEASONS = 5
HOF_REQUIRED_PROBABILITY = 100.0

# Baseball: MLB seasons only. Softball: MLB and AUSL seasons summed.
HOF_ELIGIBLE_LEAGUES: Mapping[str, Tuple[str, ...]] = {
    "baseball": ("mlb",),
    "softball": ("mlb", "ausl"),
}

HOF_PROBABILITY_CAP = 99.0
HOF_SEASON_WEIGHT = 3.0
HOF_SCORE_WEIGHT = 0.3
HOF_MATURITY_BONUS = 10.0
HOF_MATURITY_THRESHOLD = 5.0


@dataclass
class HofEligibility:
    eligible: bool
    eligible_seasons: int
    seasons_remaining: int
    required_seasons: int = HOF_MIN_SEASONS


def eligible_season_count(sport: Optional[str], seasons_by_league: Mapping[str, int]) -> int:
    leagues = HOF_ELIGIBLE_LEAGUES.get((sport or "").lower(), HOF_ELIGIBLE_LEAGUES["baseball"])
    return sum(max(0, int(seasons_by_league.get(league) or 0)) for league in leagues)


def check_hof_eligibility(
    pro_probability: float,
    seasons_by_league: Mapping[str, int],
    sport: Optional[str],
) -> HofEligibility:
    seasons = eligible_season_count(sport, seasons_by_league)
    eligible = (
        pro_probability is not None
        and pro_probability >= HOF_REQUIRED_PROBABILITY
        and seasons >= HOF_MIN_SEASONS
    )
    return HofEligibility(
        eligible=eligible,
        eligible_seasons=seasons,
        seasons_remaining=max(0, HOF_MIN_SEASONS - seasons),
    )


def estimate_hof_probability(
    eligible_seasons: int,
    score: float,
    delta_maturity: Optional[float] = None,
) -> float:
    """Longevity plus current level, with a bonus for calibrated self-grading."""
    bonus = HOF_MATURITY_BONUS if delta_maturity is not None and delta_maturity < HOF_MATURITY_THRESHOLD else 0.0
    return min(HOF_PROBABILITY_CAP, eligible_seasons * HOF_SEASON_WEIGHT + score * HOF_SCORE_WEIGHT + bonus)
