"""
MPI snapshot service.

Loads each athlete's scoring inputs, runs the pure engine
(services/mpi_engine.py), ranks the sport pool and persists one snapshot per
athlete per calculation date. Also answers the read-side questions (latest
score, history, HoF status).

Failure policy for the nightly run: one athlete failing to load or compute is
logged and skipped; the rest of the pool is still scored.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple
from uuid import UUID

import logging

from sqlalchemy.orm import Session

from core.config import settings
from core.logging import athlete_extra
from models import (
    Athlete,
    DailyLogEntry,
    IntegrityFlag,
    MpiScore,
    PerformanceSession,
    ProfessionalStatus,
    ScoutEvaluation,
    VerifiedStatProfile,
)
from services.age_curves import age_on
from services.hof_eligibility import HofEligibility, check_hof_eligibility, estimate_hof_probability
from services.integrity_detection import detect_low_integrity
from services.integrity_service import (
    STATUS_PENDING,
    active_flags,
    auto_resolve_stale_info_flags,
    create_flag,
)
from services.mpi_engine import (
    AthleteMpiInputs,
    AthleteMpiResult,
    ProStatusInput,
    RankedAthlete,
    RankingGateConfig,
    compute_athlete_mpi,
    development_prompts,
    injury_hold_active,
    rank_athletes,
    trend_for,
)
from services.session_service import lock_sessions

logger = logging.getLogger(__name__)

SPORTS = ("baseball", "softball")
DEFAULT_SCOUT_GRADE = 50.0
GATE_FIELDS = (
    "games_minimum_met",
    "integrity_threshold_met",
    "coach_validation_met",
    "data_span_met",
)


@dataclass
class SportRunSummary:
    sport: str
    athletes: int = 0
    scored: int = 0
    ranked: int = 0
    skipped_injury: int = 0
    skipped_no_data: int = 0
    failed: List[str] = field(default_factory=list)


def gate_config_from_settings() -> RankingGateConfig:
    return RankingGateConfig(
        min_sessions=settings.MPI_RANKING_MIN_SESSIONS,
        data_span_min_sessions=settings.MPI_DATA_SPAN_MIN_SESSIONS,
        integrity_gate=settings.MPI_INTEGRITY_GATE,
    )


def _pro_status(db: Session, athlete: Athlete) -> Optional[ProfessionalStatus]:
    return db.query(ProfessionalStatus).filter(
        ProfessionalStatus.athlete_id == athlete.id,
        ProfessionalStatus.sport == athlete.sport,
    ).first()


def load_athlete_inputs(db: Session, athlete: Athlete, as_of: date) -> AthleteMpiInputs:
    session_start = as_of - timedelta(days=settings.MPI_SESSION_WINDOW_DAYS)
    sessions = db.query(PerformanceSession).filter(
        PerformanceSession.athlete_id == athlete.id,
        PerformanceSession.deleted_at.is_(None),
        PerformanceSession.session_date >= session_start,
        PerformanceSession.session_date <= as_of,
    ).all()

    log_start = as_of - timedelta(days=settings.MPI_CONSISTENCY_WINDOW_DAYS - 1)
    logs = db.query(DailyLogEntry).filter(
        DailyLogEntry.athlete_id == athlete.id,
        DailyLogEntry.entry_date >= log_start,
        DailyLogEntry.entry_date <= as_of,
    ).all()

    profiles = db.query(VerifiedStatProfile).filter(
        VerifiedStatProfile.athlete_id == athlete.id,
        VerifiedStatProfile.verified.is_(True),
    ).all()

    evaluations = db.query(ScoutEvaluation).filter(ScoutEvaluation.athlete_id == athlete.id).all()
    scout_grades = [
        e.overall_grade if e.overall_grade is not None
        else e.tools_grade if e.tools_grade is not None
        else DEFAULT_SCOUT_GRADE
        for e in evaluations
    ]

    pro_row = _pro_status(db, athlete)
    pro_status = None
    if pro_row is not None:
        pro_status = ProStatusInput(
            contract_status=pro_row.contract_status,
            release_count=pro_row.release_count or 0,
            roster_verified=bool(pro_row.roster_verified),
            current_league=pro_row.current_league,
            seasons_by_league=pro_row.seasons_by_league,
        )

    return AthleteMpiInputs(
        athlete_id=athlete.id,
        sport=athlete.sport,
        as_of=as_of,
        league_tier=athlete.league_tier,
        primary_position=athlete.primary_position,
        age=age_on(athlete.birthdate, as_of),
        has_coach=athlete.primary_coach_id is not None,
        sessions=sessions,
        daily_logs=logs,
        active_flags=active_flags(db, athlete.id),
        verified_profiles=profiles,
        scout_grades=scout_grades,
        pro_status=pro_status,
    )


def _apply_gates(athlete: Athlete, result: AthleteMpiResult) -> None:
    for name in GATE_FIELDS:
        setattr(athlete, name, bool(result.gates.get(name)))
    athlete.ranking_eligible = result.ranking_eligible and not athlete.ranking_excluded


def _raise_low_integrity(db: Session, athlete: Athlete, result: AthleteMpiResult, integrity_gate: float) -> None:
    condition = detect_low_integrity(result.integrity_score, integrity_gate)
    if condition is None:
        return
    already_pending = db.query(IntegrityFlag).filter(
        IntegrityFlag.athlete_id == athlete.id,
        IntegrityFlag.rule_id == condition.rule_id,
        IntegrityFlag.status == STATUS_PENDING,
    ).first()
    if already_pending is None:
        create_flag(db, athlete.id, condition.rule_id, condition.details)


def previous_snapshot(db: Session, athlete_id: UUID, sport: str, before: date) -> Optional[MpiScore]:
    return db.query(MpiScore).filter(
        MpiScore.athlete_id == athlete_id,
        MpiScore.sport == sport,
        MpiScore.calculation_date < before,
    ).order_by(MpiScore.calculation_date.desc()).first()


def write_snapshot(
    db: Session,
    result: AthleteMpiResult,
    as_of: date,
    ranked: Optional[RankedAthlete] = None,
) -> MpiScore:
    """
    Persist the snapshot for (athlete, sport, as_of).

    A re-run on the same date replaces that date's row; rows for earlier
    dates are never touched.
    """
    previous = previous_snapshot(db, result.athlete_id, result.sport, as_of)
    direction, delta = trend_for(result.score, previous.adjusted_global_score if previous else None)

    snapshot = db.query(MpiScore).filter(
        MpiScore.athlete_id == result.athlete_id,
        MpiScore.sport == result.sport,
        MpiScore.calculation_date == as_of,
    ).first()
    if snapshot is None:
        snapshot = MpiScore(athlete_id=result.athlete_id, sport=result.sport, calculation_date=as_of)
        db.add(snapshot)

    snapshot.adjusted_global_score = round(result.score, 2)
    snapshot.global_rank = ranked.rank if ranked else None
    snapshot.global_percentile = round(ranked.percentile, 2) if ranked else None
    snapshot.total_athletes_in_pool = ranked.pool_size if ranked else None
    snapshot.segment_pool = result.segment
    snapshot.pro_probability = result.pro_probability
    snapshot.pro_probability_capped = result.pro_probability_capped
    snapshot.trend_direction = direction
    snapshot.trend_delta_30d = round(delta, 2)
    snapshot.integrity_score = result.integrity_score
    snapshot.composites = {key: round(value, 2) for key, value in result.composites.items()}
    snapshot.development_prompts = development_prompts(
        result.composites, result.integrity_score, direction, result.sessions_count,
    )
    snapshot.verified_stat_boost = result.verified_boost
    snapshot.contract_status_modifier = result.contract_modifier
    snapshot.consistency_score = result.consistency.consistency_score if result.consistency else None
    snapshot.damping_multiplier = result.damping_multiplier
    snapshot.game_practice_ratio = result.game_practice_ratio
    snapshot.delta_maturity_index = result.delta_maturity
    snapshot.fatigue_correlation_flag = result.fatigue_correlation
    snapshot.hof_tracking_active = bool(result.hof and result.hof.eligible)
    snapshot.hof_probability = result.hof_probability
    db.flush()
    return snapshot


def run_mpi_for_sport(
    db: Session,
    sport: str,
    as_of: date,
    gate_config: Optional[RankingGateConfig] = None,
) -> SportRunSummary:
    gate_config = gate_config or gate_config_from_settings()
    summary = SportRunSummary(sport=sport)
    athletes = db.query(Athlete).filter(Athlete.sport == sport).all()
    summary.athletes = len(athletes)
    logger.info(f"MPI run for {sport}: {len(athletes)} athletes as of {as_of}")

    computed: List[Tuple[Athlete, AthleteMpiResult]] = []
    for athlete in athletes:
        try:
            inputs = load_athlete_inputs(db, athlete, as_of)
            if injury_hold_active(inputs.daily_logs, as_of):
                summary.skipped_injury += 1
                logger.debug(f"Athlete {athlete.id} on injury hold, MPI frozen", extra=athlete_extra(athlete.id, sport=sport))
                continue
            result = compute_athlete_mpi(inputs, gate_config)
        except Exception as e:
            logger.error(
                f"MPI computation failed for athlete {athlete.id}: {e}",
                exc_info=True,
                extra=athlete_extra(athlete.id, sport=sport, as_of=as_of.isoformat()),
            )
            summary.failed.append(str(athlete.id))
            continue
        if result is None:
            summary.skipped_no_data += 1
            continue
        _apply_gates(athlete, result)
        computed.append((athlete, result))

    rankable = [result for athlete, result in computed if athlete.ranking_eligible]
    ranked_by_id: Dict[UUID, RankedAthlete] = {r.result.athlete_id: r for r in rank_athletes(rankable)}
    summary.ranked = len(ranked_by_id)

    for athlete, result in computed:
        write_snapshot(db, result, as_of, ranked_by_id.get(athlete.id))
        _raise_low_integrity(db, athlete, result, gate_config.integrity_gate)
        summary.scored += 1

    logger.info(
        f"MPI run for {sport} complete: scored={summary.scored} ranked={summary.ranked} "
        f"injury_hold={summary.skipped_injury} no_data={summary.skipped_no_data} failed={len(summary.failed)}"
    )
    return summary


def run_nightly_mpi(
    db: Session,
    as_of: Optional[date] = None,
    now: Optional[datetime] = None,
) -> Dict[str, SportRunSummary]:
    """Nightly cycle: housekeeping, then score every sport pool."""
    now = now or datetime.now(timezone.utc)
    as_of = as_of or now.date()

    resolved = auto_resolve_stale_info_flags(db, now, settings.MPI_INFO_FLAG_AUTO_RESOLVE_DAYS)
    locked = lock_sessions(db)
    logger.info(f"Nightly MPI housekeeping: auto_resolved={resolved} sessions_locked={locked}")

    return {sport: run_mpi_for_sport(db, sport, as_of) for sport in SPORTS}


def get_latest_snapshot(db: Session, athlete_id: UUID, sport: Optional[str] = None) -> Optional[MpiScore]:
    query = db.query(MpiScore).filter(MpiScore.athlete_id == athlete_id)
    if sport:
        query = query.filter(MpiScore.sport == sport)
    return query.order_by(MpiScore.calculation_date.desc()).first()


def get_history(
    db: Session,
    athlete_id: UUID,
    sport: Optional[str] = None,
    limit: int = 90,
) -> List[MpiScore]:
    query = db.query(MpiScore).filter(MpiScore.athlete_id == athlete_id)
    if sport:
        query = query.filter(MpiScore.sport == sport)
    return query.order_by(MpiScore.calculation_date.desc()).limit(limit).all()


def get_hof_status(db: Session, athlete: Athlete) -> Optional[Tuple[HofEligibility, Optional[float]]]:
    """
    HoF eligibility from the latest snapshot and the verified season counts.

    None when the athlete has no snapshot yet.
    """
    snapshot = get_latest_snapshot(db, athlete.id, athlete.sport)
    if snapshot is None:
        return None

    pro_row = _pro_status(db, athlete)
    seasons = pro_row.seasons_by_league if pro_row else {}
    hof = check_hof_eligibility(snapshot.pro_probability, seasons, athlete.sport)
    probability = None
    if hof.eligible:
        probability = snapshot.hof_probability
        if probability is None:
            probability = estimate_hof_probability(
                hof.eligible_seasons, snapshot.adjusted_global_score, snapshot.delta_maturity_index,
            )
    return hof, probability
