"""
B.I Booster Backend — Request ID Middleware
=============================================

What:  Tags every request with a short correlation ID.
How:   Reuses the client's X-Request-ID when present, otherwise generates one.
       The ID goes into a ContextVar (for loggers and exception handlers),
       request.state, and the X-Request-ID response header.

Error bodies carry the same ID as "request_id", so a member or admin can
quote it and support can find the matching log lines.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local; concurrent requests each see their own value
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

MAX_CLIENT_ID_LENGTH = 64


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Wraps the access log and the routers, so the access log line and
    every exception handler body carry the same ID. Only the rate limiter
    sits outside it; its 429 responses have no request ID.

    Client-supplied IDs are trimmed and capped at 64 characters. Generated
    IDs are the first 8 hex chars of a UUID4.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID", "").strip()[:MAX_CLIENT_ID_LENGTH]
        if not rid:
            rid = str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
