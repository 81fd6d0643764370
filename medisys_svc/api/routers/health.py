"""
Health and readiness endpoints.

- /health: Liveness probe (is the app running?)
- /ready: Readiness probe (can the database be queried?)
- /: Basic API information
"""
import logging
import sqlite3
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from core.dependencies import get_database
from core.exceptions import BackendError
from repositories import Database

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

API_VERSION = "1.0.0"


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class HealthResponse(BaseModel):
    """Response model for /health endpoint."""
    status: str  # "healthy"
    version: str
    timestamp: str  # ISO 8601 UTC


class DependencyStatus(BaseModel):
    """Status of a single dependency."""
    name: str
    status: str  # "ok" or "unavailable"
    latency_ms: Optional[float] = None
    message: Optional[str] = None


class ReadyResponse(BaseModel):
    """Response model for /ready endpoint."""
    status: str  # "ready" or "not_ready"
    dependencies: List[DependencyStatus]
    timestamp: str


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness probe",
    description="Returns immediately without touching the database."
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="healthy", version=API_VERSION, timestamp=_utc_timestamp())


def check_database(db: Database) -> DependencyStatus:
    """Run a trivial query on the shared connection and time it."""
    start = time.perf_counter()
    try:
        db.connection.execute("SELECT 1").fetchone()
    except (sqlite3.Error, BackendError) as e:
        latency_ms = (time.perf_counter() - start) * 1000
        logger.error("Database health check failed", extra={"error": str(e)})
        return DependencyStatus(
            name="database",
            status="unavailable",
            latency_ms=round(latency_ms, 2),
            message=f"Connection failed: {type(e).__name__}"
        )

    latency_ms = (time.perf_counter() - start) * 1000
    return DependencyStatus(
        name="database",
        status="ok",
        latency_ms=round(latency_ms, 2),
        message="SQLite connection healthy"
    )


@router.get(
    "/ready",
    response_model=ReadyResponse,
    summary="Readiness probe",
    description="Checks that the database answers. Returns 503 if it does not."
)
async def readiness_check(response: Response, db: Database = Depends(get_database)) -> ReadyResponse:
    db_status = check_database(db)
    if db_status.status == "ok":
        status = "ready"
    else:
        status = "not_ready"
        response.status_code = 503

    return ReadyResponse(status=status, dependencies=[db_status], timestamp=_utc_timestamp())


@router.get("/", summary="API root")
async def root() -> Dict[str, Any]:
    return {
        "service": "MediSys Patient Service",
        "version": API_VERSION,
        "docs": "/docs",
        "health": "/health",
        "ready": "/ready",
        "patients": "/api/v1/patients",
    }
