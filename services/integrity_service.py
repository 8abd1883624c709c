"""
Integrity flag lifecycle.

Flags are created 'pending' (by detection or by an admin), and leave that
state only through resolve_flag or the nightly auto-resolve of stale
info-level flags. Deduction and severity are copied from the rule table at
creation time so later rule edits do not rewrite history.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

import logging

from sqlalchemy.orm import Session

from core.exceptions import FlagAlreadyResolvedError, NotFoundError, UnknownRuleError
from core.logging import athlete_extra
from models import IntegrityFlag
from services.integrity_detection import DetectedCondition
from services.integrity_rules import SEVERITY_INFO, get_rule

logger = logging.getLogger(__name__)

STATUS_PENDING = "pending"
STATUS_RESOLVED = "resolved"


def create_flag(
    db: Session,
    athlete_id: UUID,
    rule_id: str,
    details: Optional[Dict[str, Any]] = None,
    source_session_id: Optional[UUID] = None,
) -> IntegrityFlag:
    rule = get_rule(rule_id)
    if rule is None:
        raise UnknownRuleError(rule_id)

    flag = IntegrityFlag(
        athlete_id=athlete_id,
        rule_id=rule.rule_id,
        severity=rule.severity,
        deduction_pct=rule.deduction_pct,
        status=STATUS_PENDING,
        source_session_id=source_session_id,
        details=details or {},
    )
    db.add(flag)
    db.flush()
    logger.info(
        f"Integrity flag {rule.rule_id} ({rule.severity}) raised for athlete {athlete_id}",
        extra=athlete_extra(athlete_id, rule_id=rule.rule_id, severity=rule.severity),
    )
    return flag


def record_conditions(
    db: Session,
    athlete_id: UUID,
    conditions: Iterable[DetectedCondition],
    source_session_id: Optional[UUID] = None,
) -> List[IntegrityFlag]:
    """
    Raise a flag per detected condition.

    A rule already pending for the same source session is returned as is
    instead of being raised a second time.
    """
    pending: Dict[str, IntegrityFlag] = {}
    if source_session_id is not None:
        pending = {
            flag.rule_id: flag
            for flag in db.query(IntegrityFlag).filter(
                IntegrityFlag.athlete_id == athlete_id,
                IntegrityFlag.source_session_id == source_session_id,
                IntegrityFlag.status == STATUS_PENDING,
            )
        }

    flags = []
    for c in conditions:
        if c.rule_id not in pending:
            pending[c.rule_id] = create_flag(db, athlete_id, c.rule_id, c.details, source_session_id)
        flags.append(pending[c.rule_id])
    return flags


def active_flags(db: Session, athlete_id: UUID) -> List[IntegrityFlag]:
    return db.query(IntegrityFlag).filter(
        IntegrityFlag.athlete_id == athlete_id,
        IntegrityFlag.status == STATUS_PENDING,
    ).all()


def list_flags(db: Session, athlete_id: UUID, status: Optional[str] = None) -> List[IntegrityFlag]:
    query = db.query(IntegrityFlag).filter(IntegrityFlag.athlete_id == athlete_id)
    if status:
        query = query.filter(IntegrityFlag.status == status)
    return query.order_by(IntegrityFlag.created_at.desc()).all()


def resolve_flag(
    db: Session,
    flag_id: UUID,
    action: str,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> IntegrityFlag:
    flag = db.query(IntegrityFlag).filter(IntegrityFlag.id == flag_id).first()
    if flag is None:
        raise NotFoundError("Integrity flag", str(flag_id))
    if flag.status == STATUS_RESOLVED:
        raise FlagAlreadyResolvedError(flag_id)

    flag.status = STATUS_RESOLVED
    flag.resolution_action = action
    flag.resolution_notes = notes
    flag.resolved_at = now or datetime.now(timezone.utc)
    db.flush()
    logger.info(f"Integrity flag {flag_id} resolved: {action}", extra=athlete_extra(flag.athlete_id, rule_id=flag.rule_id))
    return flag


def auto_resolve_stale_info_flags(db: Session, now: datetime, older_than_days: int = 7) -> int:
    """Resolve pending info-level flags older than the cutoff. Returns the count."""
    cutoff = now - timedelta(days=older_than_days)
    stale = db.query(IntegrityFlag).filter(
        IntegrityFlag.severity == SEVERITY_INFO,
        IntegrityFlag.status == STATUS_PENDING,
        IntegrityFlag.created_at < cutoff,
    ).all()
    for flag in stale:
        flag.status = STATUS_RESOLVED
        flag.resolution_action = "auto_resolved"
        flag.resolved_at = now
    db.flush()
    return len(stale)
