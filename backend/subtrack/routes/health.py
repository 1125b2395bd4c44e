"""
SubTrack Backend — Health Check Route
======================================

What:  Liveness/readiness probe for Docker and load balancers.
How:   Pings the database and checks that access tokens can be verified.

Status levels:
    healthy:    database reachable, JWT secret configured        (HTTP 200)
    degraded:   database reachable, JWT secret missing, so every
                /api call answers 401                            (HTTP 200)
    unhealthy:  database unreachable                             (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Response
from sqlalchemy import text

from subtrack import __version__
from subtrack.config import settings
from subtrack.database import engine
from subtrack.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


async def _database_status() -> str:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("Health check: database unreachable: %s", str(e))
        return "disconnected"
    return "connected"


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(response: Response) -> HealthResponse:
    """Aggregate status of the database and token verification."""
    database = await _database_status()
    auth = "configured" if settings.auth_jwt_secret else "missing_secret"

    if database != "connected":
        overall = "unhealthy"
        response.status_code = 503
    elif auth != "configured":
        overall = "degraded"
    else:
        overall = "healthy"

    return HealthResponse(
        status=overall,
        version=__version__,
        database=database,
        auth=auth,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
