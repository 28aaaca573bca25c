"""
Products API — Unexpected Error Middleware
============================================

What:  Turns any exception a route lets escape into the 500 envelope
       {"message": "Internal server error", "error": "internal_server_error"}.
How:   Innermost middleware (added before CORSMiddleware), so the response
       still passes back through CORS, the access log and RequestIDMiddleware
       and carries their headers. A FastAPI `Exception` handler would run in
       Starlette's ServerErrorMiddleware, outside all of them.

StorageError never reaches this layer: the handler registered in main.py
answers it first.
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_BODY = {
    "message": "Internal server error",
    "error": "internal_server_error",
}


class UnexpectedErrorMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(
                "Unexpected error on %s %s: %s",
                request.method,
                request.url.path,
                str(e),
                exc_info=True,
            )
            return JSONResponse(status_code=500, content=UNEXPECTED_ERROR_BODY)
