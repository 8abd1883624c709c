"""
MPI Engine API.

Daily logs and sessions come in through the routers; scores are written by
the nightly Celery job (tasks/mpi_tasks.py) and read back through /mpi.
"""
from typing import List

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from routers import daily_log, sessions, mpi, integrity
from core.config import settings
from core.database import check_db_connection
from core.logging import setup_logging
from core.exceptions import APIException
import logging
import time

setup_logging()
logger = logging.getLogger(__name__)

LOCAL_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]


def _allowed_origins() -> List[str]:
    """DEBUG opens CORS; otherwise CORS_ORIGINS (comma-separated) or localhost."""
    if settings.DEBUG:
        return ["*"]
    if settings.CORS_ORIGINS:
        return [origin.strip() for origin in settings.CORS_ORIGINS.split(",") if origin.strip()]
    return LOCAL_ORIGINS


app = FastAPI(
    title="MPI Engine API",
    description="Consistency, session composites, integrity and MPI snapshots for baseball and softball",
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins(),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """One log line per request, with status and timing."""
    start_time = time.time()
    response = await call_next(request)
    elapsed_ms = round((time.time() - start_time) * 1000, 2)

    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms}ms)",
        extra={
            "extra_fields": {
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "process_time_ms": elapsed_ms,
                "client_ip": request.client.host if request.client else None,
            }
        }
    )
    response.headers["X-Process-Time"] = str(elapsed_ms / 1000)
    return response


@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    if exc.status_code >= 500:
        logger.error(f"{exc.error_code}: {exc.detail}")
    else:
        logger.info(
            f"Rejected {request.method} {request.url.path}: {exc.error_code}",
            extra={"extra_fields": {"error_code": exc.error_code, "status_code": exc.status_code}},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": exc.error_code, "message": exc.detail}},
        headers=exc.headers,
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}: {exc}",
        exc_info=True,
        extra={"extra_fields": {"method": request.method, "path": request.url.path}},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": {"code": "INTERNAL_ERROR", "message": "Internal server error"}},
    )


@app.get("/health")
async def health():
    """
    Returns:
        - 200 with the active scoring windows when the database answers
        - 503 when it does not
    """
    if not check_db_connection():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "database": "unavailable"},
        )
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "mpi": {
            "session_window_days": settings.MPI_SESSION_WINDOW_DAYS,
            "consistency_window_days": settings.MPI_CONSISTENCY_WINDOW_DAYS,
            "ranking_min_sessions": settings.MPI_RANKING_MIN_SESSIONS,
            "integrity_gate": settings.MPI_INTEGRITY_GATE,
        },
        "timestamp": time.time(),
    }


app.include_router(daily_log.router)
app.include_router(sessions.router)
app.include_router(mpi.router)
app.include_router(integrity.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT)
