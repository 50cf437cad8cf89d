"""
TodoMVC — Health Check Route
==============================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Pings the database through the application's pool and reports status.

Status levels:
    - healthy:   The database answers (HTTP 200)
    - unhealthy: The database is unreachable (HTTP 200, flagged in the body)
"""

import logging
import time

from fastapi import APIRouter, Request

from todomvc import __version__
from todomvc.schemas.task import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Run `SELECT 1` against the pool and report uptime."""
    db_status = "connected"
    overall = "healthy"

    try:
        await request.app.state.database.ping()
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
