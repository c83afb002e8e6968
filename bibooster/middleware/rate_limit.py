"""
B.I Booster Backend — Rate Limiting Middleware
================================================

What:  Per-IP sliding window rate limiter.
How:   Keeps recent request timestamps per (bucket, IP) in memory.
Who:   Applied to every request via Starlette middleware, first in the chain.

Buckets:
    general  every /api request                         RATE_LIMIT_REQUESTS
    form     login, register and the public order form  RATE_LIMIT_FORM_REQUESTS

A form request counts against both buckets. Both share RATE_LIMIT_WINDOW.

Algorithm: Sliding Window Counter
    1. Drop timestamps older than the window
    2. If the remaining count >= limit, reject with 429
    3. Otherwise record the current timestamp and let the request through

State is per process. Multiple workers each keep their own counters.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from bibooster.config import settings

logger = logging.getLogger(__name__)

BUCKET_GENERAL = "general"
BUCKET_FORM = "form"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter.

    Excluded paths: /health and the API docs.

    Response on rate limit:
        HTTP 429 with a Retry-After header (seconds until the oldest
        request leaves the window).
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    # (method, path) pairs that also count against the form bucket
    FORM_ENDPOINTS = {
        ("POST", "/api/auth/login"),
        ("POST", "/api/auth/register"),
        ("POST", "/api/orders"),
    }

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._requests: Dict[Tuple[str, str], List[float]] = defaultdict(list)

    def _limits_for(self, request: Request) -> List[Tuple[str, int]]:
        limits = [(BUCKET_GENERAL, settings.rate_limit_requests)]
        if (request.method, request.url.path.rstrip("/")) in self.FORM_ENDPOINTS:
            limits.append((BUCKET_FORM, settings.rate_limit_form_requests))
        return limits

    def _retry_after(self, key: Tuple[str, str], limit: int, now: float) -> Optional[int]:
        """Seconds to wait if `key` is at its limit, else None."""
        timestamps = self._requests[key]
        if len(timestamps) < limit:
            return None
        return int(timestamps[0] + settings.rate_limit_window - now) + 1

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS or request.method == "OPTIONS":
            return await call_next(request)

        client_ip = (
            getattr(request.client, "host", "unknown")
            if request.client
            else "unknown"
        )

        now = time.time()
        window_start = now - settings.rate_limit_window
        limits = self._limits_for(request)

        # ── Sliding Window: Clean old entries ─────────────────────────────
        for bucket, _ in limits:
            key = (bucket, client_ip)
            self._requests[key] = [ts for ts in self._requests[key] if ts > window_start]

        # ── Check rate limits ─────────────────────────────────────────────
        for bucket, limit in limits:
            retry_after = self._retry_after((bucket, client_ip), limit, now)
            if retry_after is None:
                continue

            logger.warning(
                "Rate limit exceeded for IP %s (%s bucket): %d requests in %ds window",
                client_ip,
                bucket,
                len(self._requests[(bucket, client_ip)]),
                settings.rate_limit_window,
            )
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": f"Too many requests. Please wait {retry_after} seconds before retrying.",
                    "details": {"retry_after": retry_after, "bucket": bucket},
                },
                headers={"Retry-After": str(retry_after)},
            )

        # ── Record this request ───────────────────────────────────────────
        for bucket, _ in limits:
            self._requests[(bucket, client_ip)].append(now)

        if sum(len(v) for v in self._requests.values()) % 1000 == 0:
            self._cleanup_inactive(window_start)

        return await call_next(request)

    def _cleanup_inactive(self, window_start: float) -> None:
        """Forget (bucket, IP) keys with no requests inside the window."""
        inactive = [
            key for key, timestamps in self._requests.items()
            if not timestamps or max(timestamps) < window_start
        ]
        for key in inactive:
            del self._requests[key]

        if inactive:
            logger.debug("Cleaned up %d inactive rate-limit entries", len(inactive))
