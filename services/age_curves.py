"""
Age-Curve Multipliers

Maps an athlete's age to a sport-specific performance multiplier. The peak
bracket is exactly 1.0; brackets before and after it discount the composite
score so that a 16-year-old and a 26-year-old with identical raw composites
are not ranked as equals.

Brackets are inclusive on both ends and scanned in order. The final bracket
of each table is a catch-all (max_age=999), so the lookup is total over every
non-negative integer age.

Baseball peaks at 23-27, softball earlier at 22-28.
"""

from dataclasses import dataclass
from datetime import date
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class AgeBracket:
    min_age: int
    max_age: int
    multiplier: float


# ============================================================================
# AGE CURVE TABLES
# ============================================================================

BASEBALL_AGE_CURVE: Tuple[AgeBracket, ...] = (
    AgeBracket(0, 15, 0.85),
    AgeBracket(16, 18, 0.92),
    AgeBracket(19, 22, 0.97),
    AgeBracket(23, 27, 1.00),
    AgeBracket(28, 32, 0.98),
    AgeBracket(33, 36, 0.95),
    AgeBracket(37, 40, 0.90),
    AgeBracket(41, 999, 0.85),
)

SOFTBALL_AGE_CURVE: Tuple[AgeBracket, ...] = (
    AgeBracket(0, 14, 0.85),
    AgeBracket(15, 17, 0.92),
    AgeBracket(18, 21, 0.97),
    AgeBracket(22, 28, 1.00),
    AgeBracket(29, 33, 0.97),
    AgeBracket(34, 38, 0.93),
    AgeBracket(39, 999, 0.88),
)

AGE_CURVES: Dict[str, Tuple[AgeBracket, ...]] = {
    "baseball": BASEBALL_AGE_CURVE,
    "softball": SOFTBALL_AGE_CURVE,
}

DEFAULT_SPORT = "baseball"


def get_age_curve(sport: Optional[str]) -> Tuple[AgeBracket, ...]:
    """Return the bracket table for a sport; unknown sports use baseball."""
    return AGE_CURVES.get((sport or "").lower(), AGE_CURVES[DEFAULT_SPORT])


def get_age_multiplier(sport: Optional[str], age) -> float:
    """
    Look up the age multiplier for an athlete.

    Args:
        sport: 'baseball' or 'softball' (anything else falls back to baseball)
        age: Age in whole years. Negative or fractional values are clamped/floored.

    Returns:
        Multiplier in (0, 1.0]
    """
    curve = get_age_curve(sport)
    try:
        age_years = max(0, int(age))
    except (TypeError, ValueError):
        age_years = 0

    for bracket in curve:
        if bracket.min_age <= age_years <= bracket.max_age:
            return bracket.multiplier

    # Older than every bracket: the last one is the catch-all
    return curve[-1].multiplier


def age_on(birthdate: Optional[date], as_of: date) -> Optional[int]:
    """Whole years between birthdate and as_of, or None without a birthdate."""
    if birthdate is None:
        return None
    years = as_of.year - birthdate.year
    if (as_of.month, as_of.day) < (birthdate.month, birthdate.day):
        years -= 1
    return max(0, years)
