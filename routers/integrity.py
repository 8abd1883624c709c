"""
Integrity API Router

Rule catalogue, flag listing, manual flags (admin flags and arbitration
requests) and flag resolution.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from datetime import datetime
from uuid import UUID

from core.database import get_db
from core.exceptions import ValidationError
from services.athletes import get_athlete
from services.integrity_rules import INTEGRITY_RULES
from services.integrity_service import create_flag, list_flags, resolve_flag

router = APIRouter(prefix="/v1", tags=["Integrity"])

# Rules that may be raised by hand; the rest come from detection
MANUAL_RULES = ("manual_admin_flag", "arbitration_request")


class RuleResponse(BaseModel):
    rule_id: str
    label: str
    severity: str
    deduction_pct: float
    description: str


class FlagCreate(BaseModel):
    rule_id: str
    details: Optional[Dict[str, Any]] = None
    source_session_id: Optional[UUID] = None


class FlagResolve(BaseModel):
    action: str
    notes: Optional[str] = None


class FlagResponse(BaseModel):
    id: UUID
    athlete_id: UUID
    rule_id: str
    severity: str
    deduction_pct: float
    status: str
    source_session_id: Optional[UUID] = None
    details: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    resolution_action: Optional[str] = None
    resolution_notes: Optional[str] = None

    class Config:
        from_attributes = True


@router.get("/integrity/rules", response_model=List[RuleResponse])
async def get_rules():
    return [
        RuleResponse(
            rule_id=r.rule_id,
            label=r.label,
            severity=r.severity,
            deduction_pct=r.deduction_pct,
            description=r.description,
        )
        for r in INTEGRITY_RULES.values()
    ]


@router.get("/athletes/{athlete_id}/integrity/flags", response_model=List[FlagResponse])
async def get_flags(
    athlete_id: UUID,
    status: Optional[str] = None,
    db: Session = Depends(get_db),
):
    get_athlete(db, athlete_id)
    return list_flags(db, athlete_id, status)


@router.post(
    "/athletes/{athlete_id}/integrity/flags",
    response_model=FlagResponse,
    status_code=status.HTTP_201_CREATED,
)
async def post_flag(
    athlete_id: UUID,
    payload: FlagCreate,
    db: Session = Depends(get_db),
):
    get_athlete(db, athlete_id)
    if payload.rule_id not in MANUAL_RULES:
        raise ValidationError(f"Rule {payload.rule_id} cannot be raised manually", field="rule_id")
    flag = create_flag(db, athlete_id, payload.rule_id, payload.details, payload.source_session_id)
    db.commit()
    db.refresh(flag)
    return flag


@router.post("/integrity/flags/{flag_id}/resolve", response_model=FlagResponse)
async def post_resolve_flag(
    flag_id: UUID,
    payload: FlagResolve,
    db: Session = Depends(get_db),
):
    flag = resolve_flag(db, flag_id, payload.action, payload.notes)
    db.commit()
    return flag
