"""
Performance Sessions API Router

Logging, soft deletion and per-session scoring. Scoring a session writes its
composite indexes and effective grade and raises any integrity flags the
session triggers.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import date, datetime
from uuid import UUID

from core.database import get_db
from services.athletes import get_athlete
from services.session_service import (
    create_session,
    get_session,
    process_session,
    recalculate_sessions_on,
    soft_delete_session,
)

router = APIRouter(prefix="/v1/athletes", tags=["Sessions"])


class DrillBlock(BaseModel):
    drill_type: str
    intent: Optional[str] = None
    volume: int = Field(1, ge=0)
    execution_grade: Optional[float] = Field(None, ge=20, le=80)
    outcome_tags: List[str] = []


class SessionCreate(BaseModel):
    session_type: str
    session_date: date
    sport: Optional[str] = None
    drill_blocks: List[DrillBlock] = []
    micro_layer_data: Optional[List[Dict[str, Any]]] = None
    fatigue_state: Optional[Dict[str, Any]] = None
    player_grade: Optional[float] = Field(None, ge=20, le=80)
    coach_grade: Optional[float] = Field(None, ge=20, le=80)
    coach_override_grade: Optional[float] = Field(None, ge=20, le=80)
    scout_grade: Optional[float] = Field(None, ge=20, le=80)
    is_retroactive: bool = False


class SessionResponse(BaseModel):
    id: UUID
    athlete_id: UUID
    sport: str
    session_type: str
    session_date: date
    player_grade: Optional[float] = None
    coach_grade: Optional[float] = None
    effective_grade: Optional[float] = None
    composite_indexes: Optional[Dict[str, Any]] = None
    intent_compliance_pct: Optional[float] = None
    is_retroactive: bool
    is_locked: bool
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FlagSummary(BaseModel):
    id: UUID
    rule_id: str
    severity: str
    deduction_pct: float

    class Config:
        from_attributes = True


class SessionCalculationResponse(BaseModel):
    session: SessionResponse
    overall: float
    streak_current: int
    streak_best: int
    flags: List[FlagSummary]


class RecalculationResponse(BaseModel):
    session_date: date
    recalculated: int
    results: List[SessionCalculationResponse]


def _calculation_response(athlete, processed) -> SessionCalculationResponse:
    return SessionCalculationResponse(
        session=SessionResponse.model_validate(processed.session),
        overall=round(processed.composite.overall, 2),
        streak_current=athlete.streak_current,
        streak_best=athlete.streak_best,
        flags=[FlagSummary.model_validate(f) for f in processed.flags],
    )


@router.post("/{athlete_id}/sessions", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def post_session(
    athlete_id: UUID,
    payload: SessionCreate,
    db: Session = Depends(get_db),
):
    athlete = get_athlete(db, athlete_id)
    fields = payload.model_dump(exclude_none=True)
    fields["drill_blocks"] = [b.model_dump() for b in payload.drill_blocks]
    session = create_session(db, athlete, **fields)
    db.commit()
    db.refresh(session)
    return session


@router.delete("/{athlete_id}/sessions/{session_id}", response_model=SessionResponse)
async def delete_session(
    athlete_id: UUID,
    session_id: UUID,
    db: Session = Depends(get_db),
):
    """Soft delete: the row stays, stamped with deleted_at."""
    get_athlete(db, athlete_id)
    session = soft_delete_session(db, athlete_id, session_id)
    db.commit()
    return session


@router.post("/{athlete_id}/sessions/{session_id}/calculate", response_model=SessionCalculationResponse)
async def calculate_session(
    athlete_id: UUID,
    session_id: UUID,
    db: Session = Depends(get_db),
):
    athlete = get_athlete(db, athlete_id)
    session = get_session(db, athlete_id, session_id)
    processed = process_session(db, athlete, session)
    db.commit()
    return _calculation_response(athlete, processed)


@router.post("/{athlete_id}/sessions/recalculate", response_model=RecalculationResponse)
async def recalculate_sessions(
    athlete_id: UUID,
    day: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    """Re-score every live session on one date, e.g. after a backfill or an edit."""
    athlete = get_athlete(db, athlete_id)
    results = recalculate_sessions_on(db, athlete, day)
    db.commit()
    return RecalculationResponse(
        session_date=day,
        recalculated=len(results),
        results=[_calculation_response(athlete, processed) for processed in results],
    )
