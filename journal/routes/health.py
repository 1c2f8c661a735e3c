"""
Memory Journal Backend — Health Check Route
=============================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Runs SELECT 1 against the database and reports the anniversary
       scheduler state.

Status levels:
    - healthy:   database reachable, scheduler running (or disabled)
    - degraded:  database reachable, scheduler enabled but not running
    - unhealthy: database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from journal import __version__
from journal.config import settings
from journal.database import engine
from journal.schemas.common import HealthResponse
from journal.services.scheduler import anniversary_scheduler

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(response: Response) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    if not settings.scheduler_enabled:
        scheduler_status = "disabled"
    elif anniversary_scheduler.running:
        scheduler_status = "running"
    else:
        scheduler_status = "stopped"
        if overall == "healthy":
            overall = "degraded"

    if overall == "unhealthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        scheduler=scheduler_status,
        next_sweep_at=anniversary_scheduler.next_run_time() if anniversary_scheduler.running else None,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
