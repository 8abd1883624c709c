"""
Performance session persistence and per-session processing.

process_session() is the per-session half of the scoring pipeline:
    1. composite indexes, fatigue proxy and effective grade (services/session_scoring.py)
    2. session streak on the athlete
    3. integrity detection over the athlete's recent history -> flags
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, List, Optional
from uuid import UUID

import logging

from sqlalchemy.orm import Session

from core.exceptions import NotFoundError, SessionLockedError, ValidationError
from core.logging import athlete_extra
from models import Athlete, MpiScore, PerformanceSession
from services import integrity_detection as detect
from services.integrity_service import record_conditions
from services.session_scoring import SessionComposite, compute_session_composite
from services.session_weighting import GAME_SESSION_TYPES, SESSION_TYPES, is_game_session

logger = logging.getLogger(__name__)

VOLUME_WINDOW_DAYS = 14
RETROACTIVE_WINDOW_DAYS = 7
PRACTICE_WINDOW_DAYS = 30
RAPID_IMPROVEMENT_LOOKBACK_DAYS = 7


@dataclass
class ProcessedSession:
    session: PerformanceSession
    composite: SessionComposite
    flags: List[Any] = field(default_factory=list)


def _live_sessions(db: Session, athlete_id: UUID):
    return db.query(PerformanceSession).filter(
        PerformanceSession.athlete_id == athlete_id,
        PerformanceSession.deleted_at.is_(None),
    )


def _block_volume(session: PerformanceSession) -> int:
    return sum((b.get("volume") or 0) for b in (session.drill_blocks or []))


def create_session(db: Session, athlete: Athlete, **fields: Any) -> PerformanceSession:
    session_type = fields.get("session_type")
    if session_type not in SESSION_TYPES:
        raise ValidationError(f"Unknown session type: {session_type}", field="session_type")
    fields.setdefault("sport", athlete.sport)
    session = PerformanceSession(athlete_id=athlete.id, **fields)
    db.add(session)
    db.flush()
    return session


def get_session(db: Session, athlete_id: UUID, session_id: UUID) -> PerformanceSession:
    session = _live_sessions(db, athlete_id).filter(PerformanceSession.id == session_id).first()
    if session is None:
        raise NotFoundError("Session", str(session_id))
    return session


def soft_delete_session(db: Session, athlete_id: UUID, session_id: UUID, now: Optional[datetime] = None) -> PerformanceSession:
    session = get_session(db, athlete_id, session_id)
    if session.is_locked:
        raise SessionLockedError(session_id)
    session.deleted_at = now or datetime.now(timezone.utc)
    db.flush()
    return session


def update_session_streak(athlete: Athlete, session: PerformanceSession) -> int:
    """
    Consecutive-day session streak, counted from the session's date.

    Each date is counted once: re-scoring a session, a second session on the
    same day, or a back-dated session leaves the streak as it is.
    """
    last = athlete.streak_last_date
    if last is not None and session.session_date <= last:
        return athlete.streak_current

    consecutive = last is not None and last == session.session_date - timedelta(days=1)
    athlete.streak_current = (athlete.streak_current or 0) + 1 if consecutive else 1
    athlete.streak_best = max(athlete.streak_current, athlete.streak_best or 0)
    athlete.streak_last_date = session.session_date
    return athlete.streak_current


def _detect_conditions(
    db: Session,
    athlete: Athlete,
    session: PerformanceSession,
    composite: SessionComposite,
    as_of: date,
    now: datetime,
) -> List[detect.DetectedCondition]:
    live = _live_sessions(db, athlete.id)
    history = live.filter(PerformanceSession.session_date <= as_of)

    recent = history.filter(
        PerformanceSession.id != session.id,
        PerformanceSession.session_date >= as_of - timedelta(days=VOLUME_WINDOW_DAYS),
    ).all()
    recent_volumes = [_block_volume(s) for s in recent]

    # backfills are counted by when they were entered, not the day they describe
    retro_count = 0
    if session.is_retroactive:
        retro_count = live.filter(
            PerformanceSession.is_retroactive.is_(True),
            PerformanceSession.created_at >= now - timedelta(days=RETROACTIVE_WINDOW_DAYS),
        ).count()

    last_grades = [
        s.player_grade for s in history.filter(PerformanceSession.player_grade.isnot(None))
        .order_by(PerformanceSession.session_date.desc())
        .limit(detect.GRADE_BAND_SAMPLE).all()
    ]

    week_ago = (
        db.query(MpiScore)
        .filter(
            MpiScore.athlete_id == athlete.id,
            MpiScore.calculation_date <= as_of - timedelta(days=RAPID_IMPROVEMENT_LOOKBACK_DAYS),
        )
        .order_by(MpiScore.calculation_date.desc())
        .first()
    )

    practice_grades: List[float] = []
    if is_game_session(session.session_type) and session.player_grade:
        practice_grades = [
            s.player_grade for s in history.filter(
                PerformanceSession.player_grade.isnot(None),
                PerformanceSession.session_type.notin_(GAME_SESSION_TYPES),
                PerformanceSession.session_date >= as_of - timedelta(days=PRACTICE_WINDOW_DAYS),
            ).all()
        ]

    return detect.collect(
        detect.detect_inflated_grading(session.player_grade, session.coach_grade),
        detect.detect_grade_reversal(session.player_grade, session.coach_grade),
        detect.detect_volume_spike(_block_volume(session), recent_volumes),
        detect.detect_fatigue_inconsistency(session.fatigue_state, composite.avg_execution),
        detect.detect_retroactive_abuse(session.is_retroactive, retro_count),
        detect.detect_grade_consistency(last_grades),
        detect.detect_rapid_improvement(
            composite.overall, week_ago.adjusted_global_score if week_ago else None,
        ),
        detect.detect_game_inflation(
            is_game_session(session.session_type), session.player_grade, practice_grades,
        ),
        detect.detect_grade_override(
            session.coach_override_grade,
            session.coach_grade if session.coach_grade is not None else session.player_grade,
        ),
    )


def process_session(
    db: Session,
    athlete: Athlete,
    session: PerformanceSession,
    as_of: Optional[date] = None,
    now: Optional[datetime] = None,
) -> ProcessedSession:
    """
    Score a session, update the athlete streak and raise integrity flags.

    Safe to repeat: the streak counts each date once and a rule already
    pending for this session is not raised again.
    """
    as_of = as_of or session.session_date
    now = now or datetime.now(timezone.utc)
    composite = compute_session_composite(session, sport=athlete.sport)

    session.composite_indexes = composite.indexes
    session.intent_compliance_pct = composite.intent_compliance_pct
    session.effective_grade = composite.effective_grade

    streak = update_session_streak(athlete, session)
    db.flush()

    conditions = _detect_conditions(db, athlete, session, composite, as_of, now)
    flags = record_conditions(db, athlete.id, conditions, source_session_id=session.id)

    logger.info(
        f"Processed session {session.id}: overall={composite.overall:.1f} streak={streak} flags={len(flags)}",
        extra=athlete_extra(athlete.id, session_id=str(session.id), flags=[f.rule_id for f in flags]),
    )
    return ProcessedSession(session=session, composite=composite, flags=flags)


def recalculate_sessions_on(db: Session, athlete: Athlete, day: date) -> List[ProcessedSession]:
    """Re-score every live session on one date, oldest entry first."""
    sessions = (
        _live_sessions(db, athlete.id)
        .filter(PerformanceSession.session_date == day)
        .order_by(PerformanceSession.created_at)
        .all()
    )
    results = [process_session(db, athlete, s) for s in sessions]
    logger.info(
        f"Recalculated {len(results)} sessions on {day}",
        extra=athlete_extra(athlete.id, session_date=day.isoformat(), recalculated=len(results)),
    )
    return results


def lock_sessions(db: Session) -> int:
    """Lock every live, unlocked session. Returns the number locked."""
    count = db.query(PerformanceSession).filter(
        PerformanceSession.is_locked.is_(False),
        PerformanceSession.deleted_at.is_(None),
    ).update({PerformanceSession.is_locked: True}, synchronize_session="fetch")
    db.flush()
    return count
