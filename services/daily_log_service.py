"""
Daily log persistence.

One row per (athlete, date). Writes are upserts keyed on that pair; rows are
never hard-deleted in normal flow.
"""

from datetime import date
from typing import List, Optional
from uuid import UUID

import logging

from sqlalchemy.orm import Session

from core.exceptions import ValidationError
from models import DailyLogEntry
from services.consistency import DAY_STATUSES, INJURY_HOLD

logger = logging.getLogger(__name__)


def upsert_daily_log(
    db: Session,
    athlete_id: UUID,
    entry_date: date,
    day_status: str,
    rest_reason: Optional[str] = None,
    injury_mode: Optional[bool] = None,
    notes: Optional[str] = None,
) -> DailyLogEntry:
    """
    Create or update the log row for (athlete, entry_date).

    injury_hold implies the injury flag; the flag may also be set on other
    statuses (e.g. recovery_only while injured).
    """
    if day_status not in DAY_STATUSES:
        raise ValidationError(f"Unknown day status: {day_status}", field="day_status")

    if injury_mode is None:
        injury_mode = day_status == INJURY_HOLD
    elif day_status == INJURY_HOLD:
        injury_mode = True

    entry = db.query(DailyLogEntry).filter(
        DailyLogEntry.athlete_id == athlete_id,
        DailyLogEntry.entry_date == entry_date,
    ).first()

    if entry:
        entry.day_status = day_status
        entry.rest_reason = rest_reason
        entry.injury_mode = injury_mode
        entry.notes = notes
    else:
        entry = DailyLogEntry(
            athlete_id=athlete_id,
            entry_date=entry_date,
            day_status=day_status,
            rest_reason=rest_reason,
            injury_mode=injury_mode,
            notes=notes,
        )
        db.add(entry)

    db.flush()
    logger.debug(f"Daily log upserted for athlete {athlete_id} on {entry_date}: {day_status}")
    return entry


def list_daily_logs(
    db: Session,
    athlete_id: UUID,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: int = 30,
) -> List[DailyLogEntry]:
    query = db.query(DailyLogEntry).filter(DailyLogEntry.athlete_id == athlete_id)
    if start_date:
        query = query.filter(DailyLogEntry.entry_date >= start_date)
    if end_date:
        query = query.filter(DailyLogEntry.entry_date <= end_date)
    return query.order_by(DailyLogEntry.entry_date.desc()).limit(limit).all()
