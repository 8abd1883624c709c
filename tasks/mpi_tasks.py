"""
Nightly MPI task.

Thin Celery wrapper around services.mpi_service.run_nightly_mpi. Per-athlete
failures are isolated inside the service; a failure here (database down,
commit error) rolls the whole cycle back and is retried once.
"""
from datetime import date, datetime, timezone
from typing import Dict, Optional

import logging

from celery import Task
from sqlalchemy.orm import Session

from core.database import get_db_sync
from services.mpi_service import run_nightly_mpi
from tasks import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(
    name="tasks.run_nightly_mpi",
    bind=True,
    max_retries=1,
    default_retry_delay=15 * 60,
)
def run_nightly_mpi_task(self: Task, as_of: Optional[str] = None) -> Dict:
    """
    Args:
        as_of: ISO date to score as of. Defaults to today (UTC); set it to
               re-run a missed night.

    Returns:
        Per-sport summary counts.
    """
    db: Session = get_db_sync()
    now = datetime.now(timezone.utc)
    run_date = date.fromisoformat(as_of) if as_of else now.date()

    try:
        summaries = run_nightly_mpi(db, as_of=run_date, now=now)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Nightly MPI failed for {run_date}: {e}", exc_info=True)
        raise self.retry(exc=e)
    finally:
        db.close()

    result = {
        "status": "ok",
        "as_of": run_date.isoformat(),
        "sports": {
            sport: {
                "athletes": s.athletes,
                "scored": s.scored,
                "ranked": s.ranked,
                "skipped_injury": s.skipped_injury,
                "skipped_no_data": s.skipped_no_data,
                "failed": len(s.failed),
            }
            for sport, s in summaries.items()
        },
    }
    logger.info(f"Nightly MPI complete: {result}")
    return result
