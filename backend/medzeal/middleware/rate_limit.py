"""
MedZeal Backend: Write Rate Limiting Middleware
================================================

What:  Per-IP sliding-window limit on mutating requests (POST, PUT, PATCH, DELETE).
Why:   Every admin action is a store write or an outbound email; reads are
       served from live snapshots and are not limited.
How:   Timestamps of each IP's recent writes are kept in memory; once
       RATE_LIMIT_REQUESTS fall inside RATE_LIMIT_WINDOW seconds, further
       writes get 429 with Retry-After until the oldest one ages out.

In-memory and per-process: with several workers each enforces its own window.
"""

import logging
import time
from collections import defaultdict, deque
from typing import Deque, Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from medzeal.config import settings
from medzeal.exceptions import RateLimitExceededError
from medzeal.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

LIMITED_METHODS = {"POST", "PUT", "PATCH", "DELETE"}
EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._writes: Dict[str, Deque[float]] = defaultdict(deque)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method not in LIMITED_METHODS or request.url.path in EXCLUDED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        window_start = now - settings.rate_limit_window

        timestamps = self._writes[client_ip]
        while timestamps and timestamps[0] <= window_start:
            timestamps.popleft()

        if len(timestamps) >= settings.rate_limit_requests:
            retry_after = int(timestamps[0] + settings.rate_limit_window - now) + 1
            logger.warning(
                "Write rate limit exceeded for %s: %d writes in %ds",
                client_ip, len(timestamps), settings.rate_limit_window,
            )
            exc = RateLimitExceededError(retry_after=retry_after)
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": exc.message,
                    "request_id": request_id_var.get(""),
                    "details": {"retry_after": retry_after},
                },
                headers={"Retry-After": str(retry_after)},
            )

        timestamps.append(now)
        self._prune(window_start)
        return await call_next(request)

    def _prune(self, window_start: float) -> None:
        idle = [ip for ip, ts in self._writes.items() if not ts or ts[-1] <= window_start]
        for ip in idle:
            del self._writes[ip]
