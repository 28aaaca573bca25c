"""
Products API — CORS Origin Gate Middleware
============================================

What:  Rejects cross-origin requests from origins outside the allow-list.
How:   Reads the Origin header. No header (same-origin page, curl, another
       server) or an allow-listed origin passes through; anything else is
       answered here with 403 before routing, and the origin is logged.
Who:   Applied to every request, including CORS preflight (OPTIONS).
When:  Before Starlette's CORSMiddleware, which only decorates allowed
       responses with Access-Control-* headers and never blocks a request.

The allow-list is captured when the middleware is constructed, i.e. at
application startup.
"""

import logging
from typing import FrozenSet, Iterable, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from products_api.config import ALLOWED_ORIGINS

logger = logging.getLogger(__name__)

REJECTION_MESSAGE = "CORS Policy Error: Not allowed by server"


def is_origin_allowed(origin: Optional[str], allowed: Iterable[str]) -> bool:
    """An absent origin is always allowed; otherwise it must match exactly."""
    return not origin or origin in allowed


class OriginGateMiddleware(BaseHTTPMiddleware):
    """
    Allow-list check on the Origin header.

    Response on rejection:
        HTTP 403 Forbidden
        {"message": "CORS Policy Error: Not allowed by server",
         "error": "cors_origin_rejected"}
    """

    def __init__(self, app: ASGIApp, allowed_origins: Iterable[str] = ALLOWED_ORIGINS):
        super().__init__(app)
        self._allowed: FrozenSet[str] = frozenset(allowed_origins)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        origin = request.headers.get("origin")

        if is_origin_allowed(origin, self._allowed):
            return await call_next(request)

        logger.warning(
            "CORS blocked: origin %s on %s %s",
            origin,
            request.method,
            request.url.path,
        )
        return JSONResponse(
            status_code=403,
            content={
                "message": REJECTION_MESSAGE,
                "error": "cors_origin_rejected",
            },
        )
