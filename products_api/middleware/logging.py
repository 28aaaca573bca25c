"""
Products API — Access Log Middleware
======================================

What:  One `products_api.access` line per request:

           GET /products -> 200 in 3.4ms (origin http://localhost:5173)

       The request ID is added by RequestIDLogFilter, not here. The Origin
       header is logged because it decides whether the CORS gate lets a
       request through. Bodies are never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("products_api.access")

# Load-balancer health checks would drown the access log
QUIET_PATHS = frozenset({"/health"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Runs inside RequestIDMiddleware and outside the origin gate, so
    rejected origins are logged too."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        logger.log(
            level_for_status(response.status_code),
            "%s %s -> %d in %.1fms (origin %s)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request.headers.get("origin", "none"),
        )
        return response
