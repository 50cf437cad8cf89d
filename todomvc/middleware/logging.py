"""
TodoMVC — Request Logging Middleware
======================================

What:  One log line per HTTP request: method, path, status, duration,
       request id and client address.
How:   Times the downstream call and picks the level from the status class:
       5xx → ERROR, 4xx → WARNING, everything else → INFO.
       Request bodies are never logged. `/health` is skipped.

Example:
    2024-01-15T12:00:00 [INFO] todomvc.access: PUT /task 200 3.2ms [a1b2c3d4] from 127.0.0.1
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from todomvc.middleware.request_id import request_id_var

logger = logging.getLogger("todomvc.access")

_SKIPPED_PATHS = frozenset({"/health"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status and duration of each request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in _SKIPPED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
        method = request.method

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        rid = request_id_var.get("")
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
