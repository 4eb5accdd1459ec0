"""
SubTrack Backend: Request Logging Middleware
============================================

What:  One access-log line per HTTP request.
Why:   Replaces uvicorn's access log with request-id correlation and timing.
How:   Measures the time spent in the downstream app and logs method, path,
       status, duration, request id and client address.

Log levels:
    5xx → ERROR, 4xx → WARNING, everything else → INFO.
    GET /health is not logged (probes run every few seconds).

What we DON'T log: request bodies (they carry user ids) and headers.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from subtrack.middleware.request_id import request_id_var

logger = logging.getLogger("subtrack.access")

SKIPPED_PATHS = {"/health"}


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status and duration of every request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in SKIPPED_PATHS:
            return await call_next(request)

        # perf_counter: monotonic and high resolution
        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        rid = request_id_var.get("")
        status = response.status_code

        logger.log(
            level_for_status(status),
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
