"""
Celery Beat schedule.

The nightly run locks the day's sessions, so it is scheduled after the last
games of the evening have been logged (MPI_NIGHTLY_HOUR_UTC, default 05:00).
"""

from celery.schedules import crontab

from core.config import settings

beat_schedule = {
    'nightly-mpi': {
        'task': 'tasks.run_nightly_mpi',
        'schedule': crontab(hour=settings.MPI_NIGHTLY_HOUR_UTC, minute=0),
        'options': {'queue': 'mpi'},
    },
}
