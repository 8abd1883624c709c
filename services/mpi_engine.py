"""
MPI (Metric Performance Index) Engine

Pure composition of the calculators into one athlete's headline score:

    session composites (90d avg) -> weighted raw score
        x competition tier x age curve x position weight
        + verified stat boosts
        x contract status modifier
        -> 80/20 blend with scout evaluations (when present)
        x integrity / 100 x consistency damping
        -> adjusted score, clamped to [0, 100]

    adjusted score -> pro probability -> HoF check
    sessions / integrity / coach grades -> ranking gates

Nothing here touches the database; services/mpi_service.py loads the inputs
and persists the snapshot.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence
from uuid import UUID

import statistics

from services.age_curves import get_age_multiplier
from services.consistency import ConsistencyResult, calculate_consistency, INJURY_HOLD
from services.fatigue_proxy import fatigue_correlation_flag
from services.hof_eligibility import HofEligibility, check_hof_eligibility, estimate_hof_probability
from services.integrity_rules import calculate_integrity_score
from services.pro_probability import UNVERIFIED_CAP, is_verified_pro, pro_probability_for
from services.professional_adjustments import contract_modifier, verified_boost_total
from services.session_weighting import is_game_session
from services.weight_tables import get_position_weight, get_tier_multiplier, tier_to_segment

COMPOSITE_WEIGHTS: Dict[str, float] = {
    "bqi": 0.25,
    "fqi": 0.15,
    "pei": 0.20,
    "decision": 0.20,
    "competitive": 0.20,
}

# Session composite_indexes key for each MPI composite
COMPOSITE_SOURCE_KEYS: Dict[str, str] = {
    "bqi": "bqi",
    "fqi": "fqi",
    "pei": "pei",
    "decision": "decision",
    "competitive": "competitive_execution",
}

COMPOSITE_LABELS: Dict[str, str] = {
    "bqi": "Bat Quality",
    "fqi": "Fielding Quality",
    "pei": "Pitching Execution",
    "decision": "Decision Making",
    "competitive": "Competitive Execution",
}

SCOUT_BLEND_WEIGHT = 0.2
INJURY_FREEZE_DAYS = 7
TREND_THRESHOLD = 2.0
COACH_VALIDATION_SHARE = 0.4
DELTA_MATURITY_MIN_SAMPLES = 3
MAX_DEVELOPMENT_PROMPTS = 4


@dataclass
class RankingGateConfig:
    min_sessions: int = 60
    data_span_min_sessions: int = 14
    integrity_gate: float = 80.0
    coach_validation_share: float = COACH_VALIDATION_SHARE


@dataclass
class ProStatusInput:
    contract_status: Optional[str] = None
    release_count: int = 0
    roster_verified: bool = False
    current_league: Optional[str] = None
    seasons_by_league: Dict[str, int] = field(default_factory=dict)


@dataclass
class AthleteMpiInputs:
    athlete_id: UUID
    sport: str
    as_of: date
    league_tier: Optional[str] = None
    primary_position: Optional[str] = None
    age: Optional[int] = None
    has_coach: bool = False
    sessions: Sequence[Any] = ()
    daily_logs: Sequence[Any] = ()
    active_flags: Sequence[Any] = ()
    verified_profiles: Sequence[Any] = ()
    scout_grades: Sequence[float] = ()
    pro_status: Optional[ProStatusInput] = None


@dataclass
class AthleteMpiResult:
    athlete_id: UUID
    sport: str
    score: float
    raw_score: float
    composites: Dict[str, float]
    sessions_count: int
    segment: str
    integrity_score: float
    consistency: Optional[ConsistencyResult]
    damping_multiplier: float
    verified_boost: float
    contract_modifier: float
    pro_probability: float
    pro_probability_capped: bool
    game_practice_ratio: Optional[float]
    delta_maturity: Optional[float]
    fatigue_correlation: bool
    hof: Optional[HofEligibility]
    hof_probability: Optional[float]
    gates: Dict[str, bool]

    @property
    def ranking_eligible(self) -> bool:
        return self.gates.get("ranking_eligible", False)


@dataclass
class RankedAthlete:
    result: AthleteMpiResult
    rank: int
    percentile: float
    pool_size: int


def _get(source: Any, name: str, default=None):
    if isinstance(source, dict):
        return source.get(name, default)
    return getattr(source, name, default)


def average_composites(sessions: Sequence[Any]) -> Dict[str, float]:
    totals = {key: 0.0 for key in COMPOSITE_WEIGHTS}
    for s in sessions:
        indexes = _get(s, "composite_indexes") or {}
        for key, source_key in COMPOSITE_SOURCE_KEYS.items():
            totals[key] += indexes.get(source_key) or 0.0
    count = len(sessions)
    return {key: total / count for key, total in totals.items()}


def weighted_raw_score(composites: Dict[str, float]) -> float:
    return sum(composites[key] * weight for key, weight in COMPOSITE_WEIGHTS.items())


def injury_hold_active(daily_logs: Iterable[Any], as_of: date, days: int = INJURY_FREEZE_DAYS) -> bool:
    """Any injury day within the last `days` days freezes the athlete's MPI."""
    cutoff = as_of - timedelta(days=days)
    for log in daily_logs:
        entry_date = _get(log, "entry_date")
        if entry_date is None or not (cutoff <= entry_date <= as_of):
            continue
        if _get(log, "injury_mode") or _get(log, "day_status") == INJURY_HOLD:
            return True
    return False


def game_practice_ratio(sessions: Sequence[Any]) -> Optional[float]:
    games = sum(1 for s in sessions if is_game_session(_get(s, "session_type")))
    practices = len(sessions) - games
    return games / practices if practices > 0 else None


def delta_maturity_index(sessions: Sequence[Any]) -> Optional[float]:
    """Population std-dev of (player - coach) grade deltas; lower is better calibrated."""
    deltas = [
        _get(s, "player_grade") - _get(s, "coach_grade")
        for s in sessions
        if _get(s, "player_grade") is not None and _get(s, "coach_grade") is not None
    ]
    if len(deltas) < DELTA_MATURITY_MIN_SAMPLES:
        return None
    return round(statistics.pstdev(deltas), 2)


def ranking_gates(
    sessions: Sequence[Any],
    integrity_score: float,
    has_coach: bool,
    config: RankingGateConfig,
) -> Dict[str, bool]:
    count = len(sessions)
    dual_graded = sum(1 for s in sessions if _get(s, "player_grade") and _get(s, "coach_grade"))
    gates = {
        "games_minimum_met": count >= config.min_sessions,
        "integrity_threshold_met": integrity_score >= config.integrity_gate,
        "coach_validation_met": dual_graded >= count * config.coach_validation_share if has_coach else True,
        "data_span_met": count >= config.data_span_min_sessions,
    }
    gates["ranking_eligible"] = all(gates.values())
    return gates


def compute_athlete_mpi(
    inputs: AthleteMpiInputs,
    gate_config: Optional[RankingGateConfig] = None,
) -> Optional[AthleteMpiResult]:
    """
    Compose one athlete's MPI.

    Returns None when there are no sessions to score: that is "not enough
    data yet", which callers must not render as a zero.
    """
    sessions = list(inputs.sessions)
    if not sessions:
        return None
    gate_config = gate_config or RankingGateConfig()

    composites = average_composites(sessions)
    raw = weighted_raw_score(composites)

    adjusted = raw * get_tier_multiplier(inputs.league_tier)
    if inputs.age is not None:
        adjusted *= get_age_multiplier(inputs.sport, inputs.age)
    adjusted *= get_position_weight(inputs.primary_position)

    boost = verified_boost_total(inputs.verified_profiles)
    adjusted += boost

    pro = inputs.pro_status
    modifier = contract_modifier(pro.contract_status, pro.release_count) if pro else 1.0
    # A zero modifier (retired) freezes the score rather than zeroing it
    if modifier > 0:
        adjusted *= modifier

    scout_grades = [g for g in inputs.scout_grades if g is not None]
    if scout_grades:
        avg_scout = sum(scout_grades) / len(scout_grades)
        adjusted = adjusted * (1 - SCOUT_BLEND_WEIGHT) + avg_scout * SCOUT_BLEND_WEIGHT

    verified_sessions = sum(1 for s in sessions if _get(s, "coach_grade") is not None)
    integrity = calculate_integrity_score(inputs.active_flags, verified_sessions)

    consistency = calculate_consistency(inputs.daily_logs, inputs.as_of) if inputs.daily_logs else None
    damping = consistency.damping_multiplier if consistency else 1.0

    score = adjusted * (integrity / 100) * damping
    score = max(0.0, min(100.0, score))

    verified_pro = bool(pro) and is_verified_pro(pro.roster_verified, pro.current_league)
    probability = pro_probability_for(score, verified_pro=verified_pro)

    maturity = delta_maturity_index(sessions)
    hof = None
    hof_probability = None
    if pro is not None:
        hof = check_hof_eligibility(probability, pro.seasons_by_league, inputs.sport)
        if hof.eligible:
            hof_probability = estimate_hof_probability(hof.eligible_seasons, score, maturity)

    return AthleteMpiResult(
        athlete_id=inputs.athlete_id,
        sport=inputs.sport,
        score=score,
        raw_score=raw,
        composites=composites,
        sessions_count=len(sessions),
        segment=tier_to_segment(inputs.league_tier),
        integrity_score=integrity,
        consistency=consistency,
        damping_multiplier=damping,
        verified_boost=boost,
        contract_modifier=modifier,
        pro_probability=probability,
        pro_probability_capped=probability >= UNVERIFIED_CAP,
        game_practice_ratio=game_practice_ratio(sessions),
        delta_maturity=maturity,
        fatigue_correlation=fatigue_correlation_flag(sessions),
        hof=hof,
        hof_probability=hof_probability,
        gates=ranking_gates(sessions, integrity, inputs.has_coach, gate_config),
    )


def rank_athletes(results: Iterable[AthleteMpiResult]) -> List[RankedAthlete]:
    """Rank ranking-eligible results by score, best first."""
    eligible = sorted(
        (r for r in results if r.ranking_eligible),
        key=lambda r: r.score,
        reverse=True,
    )
    pool = len(eligible)
    ranked = []
    for i, result in enumerate(eligible):
        rank = i + 1
        percentile = (pool - rank) / (pool - 1) * 100 if pool > 1 else 100.0
        ranked.append(RankedAthlete(result=result, rank=rank, percentile=percentile, pool_size=pool))
    return ranked


def trend_for(current: float, previous: Optional[float]) -> tuple:
    """(direction, delta) versus the previous snapshot; no history is 'stable'."""
    if previous is None:
        return "stable", 0.0
    delta = current - previous
    if delta > TREND_THRESHOLD:
        return "rising", delta
    if delta < -TREND_THRESHOLD:
        return "dropping", delta
    return "stable", delta


def development_prompts(
    composites: Dict[str, float],
    integrity_score: float,
    trend_direction: str,
    sessions_count: int,
) -> List[str]:
    prompts: List[str] = []
    if composites:
        ordered = sorted(composites.items(), key=lambda item: item[1])
        weakest_key, weakest = ordered[0]
        strongest_key, strongest = ordered[-1]
        prompts.append(
            f"Focus on {COMPOSITE_LABELS.get(weakest_key, weakest_key)}: "
            f"it's your lowest composite at {round(weakest)}"
        )
        if strongest > 60:
            prompts.append(
                f"{COMPOSITE_LABELS.get(strongest_key, strongest_key)} is your strength at "
                f"{round(strongest)}, leverage it in games"
            )
    if integrity_score < 80:
        prompts.append("Maintain consistent self-grading to boost your integrity score above 80")
    if trend_direction == "rising":
        prompts.append("Your trend is rising, maintain consistency to lock in your gains")
    elif trend_direction == "dropping":
        prompts.append("Your trend is dipping, review recent session footage and intensify quality reps")
    if sessions_count < 30:
        prompts.append(f"Log {30 - sessions_count} more sessions to strengthen your data profile")
    elif sessions_count < 60:
        prompts.append(f"{60 - sessions_count} sessions until ranking eligibility, keep building")
    return prompts[:MAX_DEVELOPMENT_PROMPTS]
