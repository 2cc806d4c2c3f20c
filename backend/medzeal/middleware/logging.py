"""
MedZeal Backend: Access Logging Middleware
===========================================

One line per request on the "medzeal.access" logger:

    POST /api/credit-cycle/v1/p1/h1/done 200 41.3ms [3f9c1a2b] from 10.0.0.7

Level follows the status: 5xx ERROR, 4xx WARNING, otherwise INFO.
/health is not logged. Bodies are never logged (patient data).
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from medzeal.middleware.request_id import request_id_var

logger = logging.getLogger("medzeal.access")

QUIET_PATHS = {"/health"}


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")
        logger.log(
            _level_for(response.status_code),
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            response.status_code,
            duration_ms,
            rid,
            client_ip,
        )
        return response
