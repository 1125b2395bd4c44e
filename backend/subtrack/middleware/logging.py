"""
SubTrack Backend — Access Log Middleware
=========================================

What:  One access-log line per API call: method, path, status, duration.
How:   Times the downstream call and picks the level from the outcome.
When:  Runs inside RequestIDMiddleware, so the correlation ID is bound.

Example line:
    2026-10-19T09:12:03 [INFO] subtrack.access: POST /api/subscriptions 201 12.3ms [3f2a9c1d0b7e]

Level:
    5xx                         → ERROR
    4xx                         → WARNING
    slower than SLOW_REQUEST_MS → WARNING
    otherwise                   → INFO

Never logged: request bodies (names and amounts are personal data), the
Authorization header, and query strings.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from subtrack.config import settings
from subtrack.middleware.request_id import get_request_id

logger = logging.getLogger("subtrack.access")

# Probes and API docs
SKIPPED_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})


def access_log_level(status: int, duration_ms: float) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400 or duration_ms > settings.slow_request_ms:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Writes the access log for every request outside SKIPPED_PATHS."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in SKIPPED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000

        rid = get_request_id()
        logger.log(
            access_log_level(response.status_code, duration_ms),
            "%s %s %d %.1fms [%s]",
            request.method,
            path,
            response.status_code,
            duration_ms,
            rid,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response
