"""
Consistency & Streak Service

"Consistency is the leading indicator of success."

Two calculators over the athlete daily log:

1. Consistency window (trailing 30 days): logged/missed totals, current
   logged/missed streaks, recent-miss counts and a damping multiplier that the
   MPI composite is multiplied by.

2. Dual streaks (up to 365 days):
   - performance streak breaks only on an explicit 'missed' status
   - discipline streak breaks on a date with no log row at all
   This separates "trained lightly" from "didn't even check in".

Both calculators take an explicit as_of date and never read the wall clock,
so the same inputs always give the same answer.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, Iterable, Optional
from uuid import UUID

import logging

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

DAY_STATUSES = (
    "full_training",
    "game_only",
    "light_work",
    "recovery_only",
    "travel_day",
    "injury_hold",
    "voluntary_rest",
    "missed",
)

MISSED = "missed"
INJURY_HOLD = "injury_hold"

CONSISTENCY_WINDOW_DAYS = 30
RECENT_MISS_WINDOW_SHORT = 7
RECENT_MISS_WINDOW_LONG = 14
STREAK_LOOKBACK_DAYS = 365

# Damping ladder
DAMPING_NONE = 1.0
DAMPING_SHORT_MISSES = 0.95   # missed7 >= 2
DAMPING_LONG_MISSES = 0.85    # missed14 >= 4, overrides the short rule
SHORT_MISS_THRESHOLD = 2
LONG_MISS_THRESHOLD = 4
CONSISTENCY_RECOVERY_SCORE = 80  # at or above: no damping, whatever the recent misses


@dataclass
class ConsistencyResult:
    consistency_score: int          # 0-100
    logged_streak: int
    missed_streak: int
    total_logged: int
    total_missed: int
    injury_hold_days: int
    missed_last_7: int
    missed_last_14: int
    damping_multiplier: float       # 1.0 | 0.95 | 0.85

    def to_dict(self) -> Dict[str, Any]:
        return {
            "consistency_score": self.consistency_score,
            "logged_streak": self.logged_streak,
            "missed_streak": self.missed_streak,
            "total_logged": self.total_logged,
            "total_missed": self.total_missed,
            "injury_hold_days": self.injury_hold_days,
            "missed_last_7": self.missed_last_7,
            "missed_last_14": self.missed_last_14,
            "damping_multiplier": self.damping_multiplier,
        }


@dataclass
class DualStreakResult:
    performance_streak: int
    discipline_streak: int
    as_of: date


def _get(entry: Any, name: str, default=None):
    if isinstance(entry, dict):
        return entry.get(name, default)
    return getattr(entry, name, default)


def _index_by_date(entries: Iterable[Any]) -> Dict[date, Any]:
    """Map entry_date -> entry. Later duplicates win (one row per date is the invariant)."""
    by_date: Dict[date, Any] = {}
    for entry in entries:
        entry_date = _get(entry, "entry_date")
        if entry_date is None:
            continue
        by_date[entry_date] = entry
    return by_date


def _is_injury_day(entry: Any) -> bool:
    return _get(entry, "day_status") == INJURY_HOLD or bool(_get(entry, "injury_mode", False))


def damping_for(consistency_score: float, missed_last_7: int, missed_last_14: int) -> float:
    """Damping multiplier from the recent-miss counts and the window score."""
    multiplier = DAMPING_NONE
    if missed_last_7 >= SHORT_MISS_THRESHOLD:
        multiplier = DAMPING_SHORT_MISSES
    if missed_last_14 >= LONG_MISS_THRESHOLD:
        multiplier = DAMPING_LONG_MISSES
    if consistency_score >= CONSISTENCY_RECOVERY_SCORE:
        multiplier = DAMPING_NONE
    return multiplier


def calculate_consistency(
    entries: Iterable[Any],
    as_of: date,
    window_days: int = CONSISTENCY_WINDOW_DAYS,
) -> Optional[ConsistencyResult]:
    """
    Compute the consistency window ending on as_of (inclusive).

    A day is:
      - injury hold if its status is injury_hold or the injury flag is set.
        Injury days are excluded from the denominator and from the logged
        total, and neither extend nor break a streak.
      - logged if it has a row whose status is not 'missed'
      - missed if its status is 'missed' or there is no row for it

    Returns None when the window holds no log rows at all: an athlete who has
    never checked in has no consistency yet, not a consistency of zero.
    """
    by_date = _index_by_date(entries)
    window_start = as_of - timedelta(days=window_days - 1)
    if not any(window_start <= d <= as_of for d in by_date):
        return None

    total_logged = 0
    total_missed = 0
    injury_days = 0
    logged_streak = 0
    missed_streak = 0
    missed_7 = 0
    missed_14 = 0

    # Oldest day first so the streak counters end on as_of
    for days_ago in range(window_days - 1, -1, -1):
        day = as_of - timedelta(days=days_ago)
        entry = by_date.get(day)

        if entry is not None and _is_injury_day(entry):
            injury_days += 1
            continue

        if entry is not None and _get(entry, "day_status") != MISSED:
            total_logged += 1
            logged_streak += 1
            missed_streak = 0
        else:
            total_missed += 1
            missed_streak += 1
            logged_streak = 0
            if days_ago < RECENT_MISS_WINDOW_SHORT:
                missed_7 += 1
            if days_ago < RECENT_MISS_WINDOW_LONG:
                missed_14 += 1

    denominator = max(1, window_days - injury_days)
    consistency_score = int(round(100 * total_logged / denominator))
    consistency_score = max(0, min(100, consistency_score))

    return ConsistencyResult(
        consistency_score=consistency_score,
        logged_streak=logged_streak,
        missed_streak=missed_streak,
        total_logged=total_logged,
        total_missed=total_missed,
        injury_hold_days=injury_days,
        missed_last_7=missed_7,
        missed_last_14=missed_14,
        damping_multiplier=damping_for(consistency_score, missed_7, missed_14),
    )


def calculate_dual_streaks(
    entries: Iterable[Any],
    as_of: date,
    lookback_days: int = STREAK_LOOKBACK_DAYS,
) -> DualStreakResult:
    """
    Count both streaks backward from as_of, stopping each at its first break.

    Performance streak: +1 for every day with a non-missed row, unchanged for a
    day without a row, stops at the first 'missed'.
    Discipline streak: +1 for every day with any row (including 'missed'),
    stops at the first day with no row.
    """
    by_date = _index_by_date(entries)

    performance = 0
    performance_open = True
    discipline = 0
    discipline_open = True

    for days_ago in range(lookback_days):
        if not (performance_open or discipline_open):
            break
        entry = by_date.get(as_of - timedelta(days=days_ago))

        if discipline_open:
            if entry is None:
                discipline_open = False
            else:
                discipline += 1

        if performance_open and entry is not None:
            if _get(entry, "day_status") == MISSED:
                performance_open = False
            else:
                performance += 1

    return DualStreakResult(
        performance_streak=performance,
        discipline_streak=discipline,
        as_of=as_of,
    )


# ---------------------------------------------------------------------------
# Database-facing wrappers
# ---------------------------------------------------------------------------

def _load_entries(db: Session, athlete_id: UUID, start: date, end: date):
    from models import DailyLogEntry
    return db.query(DailyLogEntry).filter(
        DailyLogEntry.athlete_id == athlete_id,
        DailyLogEntry.entry_date >= start,
        DailyLogEntry.entry_date <= end,
    ).all()


def get_athlete_consistency(
    db: Session,
    athlete_id: UUID,
    as_of: date,
    window_days: int = CONSISTENCY_WINDOW_DAYS,
) -> Optional[ConsistencyResult]:
    entries = _load_entries(db, athlete_id, as_of - timedelta(days=window_days - 1), as_of)
    result = calculate_consistency(entries, as_of, window_days)
    if result is None:
        logger.debug(f"No daily log rows for athlete {athlete_id} in the {window_days}-day window")
    return result


def get_athlete_dual_streaks(
    db: Session,
    athlete_id: UUID,
    as_of: date,
    lookback_days: int = STREAK_LOOKBACK_DAYS,
) -> DualStreakResult:
    entries = _load_entries(db, athlete_id, as_of - timedelta(days=lookback_days - 1), as_of)
    return calculate_dual_streaks(entries, as_of, lookback_days)
