"""
Daily Log API Router

One row per athlete per day: the input to consistency scoring and the
discipline / performance streaks.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import List, Optional
from datetime import date, datetime
from uuid import UUID

from core.database import get_db
from core.config import settings
from services.athletes import get_athlete
from services.consistency import get_athlete_consistency, get_athlete_dual_streaks
from services.daily_log_service import list_daily_logs, upsert_daily_log

router = APIRouter(prefix="/v1/athletes", tags=["Daily Log"])

INSUFFICIENT_DATA = {"status": "insufficient_data"}


class DailyLogUpsert(BaseModel):
    entry_date: date
    day_status: str
    rest_reason: Optional[str] = None
    injury_mode: Optional[bool] = None
    notes: Optional[str] = None


class DailyLogResponse(BaseModel):
    id: UUID
    athlete_id: UUID
    entry_date: date
    day_status: str
    rest_reason: Optional[str] = None
    injury_mode: bool
    notes: Optional[str] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StreaksResponse(BaseModel):
    as_of: date
    performance_streak: int
    discipline_streak: int
    session_streak_current: int
    session_streak_best: int


@router.put("/{athlete_id}/daily-log", response_model=DailyLogResponse)
async def put_daily_log(
    athlete_id: UUID,
    payload: DailyLogUpsert,
    db: Session = Depends(get_db),
):
    """Create or replace the log entry for one date."""
    get_athlete(db, athlete_id)
    entry = upsert_daily_log(
        db,
        athlete_id,
        payload.entry_date,
        payload.day_status,
        rest_reason=payload.rest_reason,
        injury_mode=payload.injury_mode,
        notes=payload.notes,
    )
    db.commit()
    db.refresh(entry)
    return entry


@router.get("/{athlete_id}/daily-log", response_model=List[DailyLogResponse])
async def get_daily_logs(
    athlete_id: UUID,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: int = Query(30, ge=1, le=366),
    db: Session = Depends(get_db),
):
    get_athlete(db, athlete_id)
    return list_daily_logs(db, athlete_id, start_date, end_date, limit)


@router.get("/{athlete_id}/consistency")
async def get_consistency(
    athlete_id: UUID,
    as_of: Optional[date] = None,
    db: Session = Depends(get_db),
):
    """
    Rolling consistency over the configured window ending at as_of.

    An athlete with no log rows in the window gets an explicit
    insufficient-data payload instead of a zero score.
    """
    get_athlete(db, athlete_id)
    as_of = as_of or date.today()
    result = get_athlete_consistency(db, athlete_id, as_of, settings.MPI_CONSISTENCY_WINDOW_DAYS)
    if result is None:
        return INSUFFICIENT_DATA
    return {"status": "ok", "as_of": as_of, **result.to_dict()}


@router.get("/{athlete_id}/streaks", response_model=StreaksResponse)
async def get_streaks(
    athlete_id: UUID,
    as_of: Optional[date] = None,
    db: Session = Depends(get_db),
):
    athlete = get_athlete(db, athlete_id)
    as_of = as_of or date.today()
    streaks = get_athlete_dual_streaks(db, athlete_id, as_of, settings.MPI_STREAK_LOOKBACK_DAYS)
    return StreaksResponse(
        as_of=as_of,
        performance_streak=streaks.performance_streak,
        discipline_streak=streaks.discipline_streak,
        session_streak_current=athlete.streak_current or 0,
        session_streak_best=athlete.streak_best or 0,
    )
