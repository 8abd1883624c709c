"""
Celery application.

The API never runs scoring inline; the worker executes the nightly MPI task
on the `mpi` queue and beat triggers it from celerybeat_schedule.
"""
from celery import Celery
from core.config import settings
from celerybeat_schedule import beat_schedule

celery_app = Celery(
    "mpi_engine",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=60 * 60,  # a full pool re-score
    task_soft_time_limit=55 * 60,
    task_routes={"tasks.run_nightly_mpi": {"queue": "mpi"}},
    worker_prefetch_multiplier=1,
    beat_schedule=beat_schedule,
)

# Register tasks
from . import mpi_tasks  # noqa: E402

__all__ = ["celery_app"]
