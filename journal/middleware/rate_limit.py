"""
Memory Journal Backend — Rate Limiting Middleware
===================================================

What:  Per-IP sliding-window rate limiter.
How:   Each IP keeps a list of request timestamps; entries older than
       RATE_LIMIT_WINDOW seconds are dropped on every request, and a request
       is refused with 429 once RATE_LIMIT_REQUESTS remain in the window.

Scope:
    In-memory, so limits are per process. Counters stay correct under
    multiple workers regardless (they are atomic in the database); only the
    limit itself becomes per-worker.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from journal.config import settings
from journal.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Excluded paths: health probes, API docs, served uploads and the like
    endpoints (one client must be able to land 10000 likes in a row).

    The 429 body has the same {"message"} shape as every other error, built
    from RateLimitExceededError, plus a Retry-After header.
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}
    EXCLUDED_PREFIXES = ("/uploads/",)
    EXCLUDED_SUFFIXES = ("/like",)
    CLEANUP_EVERY = 1000

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._seen = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if self.is_excluded(path):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        window_start = now - settings.rate_limit_window

        recent = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = recent

        if len(recent) >= settings.rate_limit_requests:
            retry_after = int(recent[0] + settings.rate_limit_window - now) + 1
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %ds window",
                client_ip,
                len(recent),
                settings.rate_limit_window,
            )
            exc = RateLimitExceededError(retry_after=retry_after, context={"client_ip": client_ip})
            return JSONResponse(
                status_code=429,
                content={"message": exc.message},
                headers={"Retry-After": str(exc.retry_after)},
            )

        recent.append(now)

        self._seen += 1
        if self._seen % self.CLEANUP_EVERY == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    @classmethod
    def is_excluded(cls, path: str) -> bool:
        return (
            path in cls.EXCLUDED_PATHS
            or path.startswith(cls.EXCLUDED_PREFIXES)
            or path.rstrip("/").endswith(cls.EXCLUDED_SUFFIXES)
        )

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        """Drop IPs with no request inside the current window."""
        inactive_ips = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] <= window_start
        ]
        for ip in inactive_ips:
            del self._requests[ip]
        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))
