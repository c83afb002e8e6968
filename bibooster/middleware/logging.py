"""
B.I Booster Backend — Request Logging Middleware
==================================================

What:  One access-log line per HTTP request.
How:   Measures wall time around call_next and logs method, path, status,
       duration, request ID and client IP on the "bibooster.access" logger.

Level by status: 5xx → ERROR, 4xx → WARNING, everything else → INFO.

Never logged: request bodies (passwords, order contact details), uploaded
file contents, the Authorization header or X-Admin-Key.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from bibooster.middleware.request_id import request_id_var

logger = logging.getLogger("bibooster.access")

QUIET_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Writes the access log for the storefront, LMS and admin console.

    Typical durations:
        - GET /api/packages:           1-5ms (static catalog)
        - GET /api/lms/course:         10-50ms (tree + progress rows)
        - POST /api/admin/cms/media:   grows with the upload, up to seconds
                                        for lesson videos

    /health is skipped; container probes would otherwise dominate the log.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
        method = request.method
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
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
