"""
B.I Booster Backend — Health Check Route
==========================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Runs SELECT 1 against the database and a write probe against the
       storage volume.

Status levels:
    healthy:   database and storage both fine (HTTP 200)
    degraded:  database fine, storage not writable (HTTP 200); uploads fail
    unhealthy: database unreachable (HTTP 503)
"""

import logging
import time
import uuid

from fastapi import APIRouter, Response
from sqlalchemy import text

from bibooster import __version__
from bibooster.database import engine
from bibooster.schemas.common import HealthResponse
from bibooster.services.file_service import file_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


def _storage_writable() -> bool:
    probe = file_service.storage_root / f".health-{uuid.uuid4().hex[:8]}"
    try:
        probe.write_bytes(b"ok")
        probe.unlink()
        return True
    except OSError as e:
        logger.warning("Health check: storage not writable: %s", str(e))
        return False


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
)
async def health_check(response: Response) -> HealthResponse:
    db_status = "connected"
    storage_status = "writable"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    if not _storage_writable():
        storage_status = "unavailable"
        if overall == "healthy":
            overall = "degraded"

    if overall == "unhealthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        storage=storage_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
