"""
MPI API Router

Read side of the nightly scoring job: latest snapshot, snapshot history and
Hall-of-Fame status. Snapshots are produced only by the nightly run.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from datetime import date
from uuid import UUID

from core.database import get_db
from services.athletes import get_athlete
from services.mpi_service import get_history, get_hof_status, get_latest_snapshot

router = APIRouter(prefix="/v1/athletes", tags=["MPI"])

INSUFFICIENT_DATA = {"status": "insufficient_data"}


class MpiSnapshotResponse(BaseModel):
    calculation_date: date
    sport: str
    adjusted_global_score: float
    global_rank: Optional[int] = None
    global_percentile: Optional[float] = None
    total_athletes_in_pool: Optional[int] = None
    segment_pool: Optional[str] = None
    pro_probability: float
    pro_probability_capped: bool
    trend_direction: str
    trend_delta_30d: float
    integrity_score: float
    composites: Optional[Dict[str, float]] = None
    development_prompts: Optional[List[str]] = None
    consistency_score: Optional[float] = None
    damping_multiplier: Optional[float] = None
    game_practice_ratio: Optional[float] = None
    delta_maturity_index: Optional[float] = None
    fatigue_correlation_flag: bool = False
    hof_tracking_active: bool = False
    hof_probability: Optional[float] = None

    class Config:
        from_attributes = True


class HistoryPoint(BaseModel):
    calculation_date: date
    adjusted_global_score: float
    global_rank: Optional[int] = None
    pro_probability: float
    trend_direction: str

    class Config:
        from_attributes = True


def _gates(athlete) -> Dict[str, Any]:
    return {
        "games_minimum_met": athlete.games_minimum_met,
        "integrity_threshold_met": athlete.integrity_threshold_met,
        "coach_validation_met": athlete.coach_validation_met,
        "data_span_met": athlete.data_span_met,
        "ranking_eligible": athlete.ranking_eligible,
    }


@router.get("/{athlete_id}/mpi")
async def get_mpi(athlete_id: UUID, db: Session = Depends(get_db)):
    """Latest snapshot plus the ranking gates written by the last run."""
    athlete = get_athlete(db, athlete_id)
    snapshot = get_latest_snapshot(db, athlete_id, athlete.sport)
    if snapshot is None:
        return {**INSUFFICIENT_DATA, "gates": _gates(athlete)}
    return {
        "status": "ok",
        "score": MpiSnapshotResponse.model_validate(snapshot).model_dump(),
        "gates": _gates(athlete),
    }


@router.get("/{athlete_id}/mpi/history", response_model=List[HistoryPoint])
async def get_mpi_history(
    athlete_id: UUID,
    limit: int = Query(90, ge=1, le=365),
    db: Session = Depends(get_db),
):
    athlete = get_athlete(db, athlete_id)
    return get_history(db, athlete_id, athlete.sport, limit)


@router.get("/{athlete_id}/hof")
async def get_hof(athlete_id: UUID, db: Session = Depends(get_db)):
    athlete = get_athlete(db, athlete_id)
    status = get_hof_status(db, athlete)
    if status is None:
        return INSUFFICIENT_DATA
    hof, probability = status
    return {
        "status": "ok",
        "eligible": hof.eligible,
        "eligible_seasons": hof.eligible_seasons,
        "required_seasons": hof.required_seasons,
        "seasons_remaining": hof.seasons_remaining,
        "hof_probability": probability,
    }
