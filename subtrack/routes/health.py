"""
SubTrack Backend: Health Check Route
====================================

What:  Health check endpoint for monitoring and container probes.
Why:   Orchestrators need to know whether the instance can serve traffic.
How:   Pings the active storage backend (SELECT 1) and reports uptime.
Who:   Called by Docker health checks and monitoring systems.

Status levels:
    - healthy:   storage answers (HTTP 200)
    - unhealthy: storage unreachable (HTTP 503, stop routing traffic)
"""

import logging
import time

from fastapi import APIRouter, Request, Response

from subtrack import __version__
from subtrack.schemas.subscription import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Initialized once when the module loads
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Storage unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    """
    Check the health of the service and its storage.

    The ping is a lightweight SELECT 1 bounded by the operation timeout;
    it never raises.
    """
    storage = request.app.state.storage

    connected = await storage.ping()
    if not connected:
        logger.warning("Health check: %s storage unreachable", storage.name)
        response.status_code = 503

    return HealthResponse(
        status="healthy" if connected else "unhealthy",
        version=__version__,
        backend=storage.name,
        storage="connected" if connected else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
