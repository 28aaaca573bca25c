"""
Products API — Request Correlation
====================================

What:  Gives every request a correlation ID and stamps it on every log line
       written while the request is handled.
How:   RequestIDMiddleware takes the client's X-Request-ID header (or makes
       a short one), keeps it in `request_id_var` for the request's duration
       and echoes it on the response. RequestIDLogFilter, installed on the
       root handler by setup_logging(), copies the current value onto each
       LogRecord as `record.request_id`.

    POST /products  X-Request-ID: abc12345
        → products_api.services.product_service [abc12345] Error adding product
        → products_api.access [abc12345] POST /products -> 400 ...
        ← 400  X-Request-ID: abc12345

Records logged outside a request (startup, shutdown) carry "-".
"""

import logging
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
NO_REQUEST_ID = "-"

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


class RequestIDLogFilter(logging.Filter):
    """Adds `request_id` to every record so formatters can print it."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or NO_REQUEST_ID
        return True


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Outermost middleware: binds the ID before anything else logs."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or new_request_id()
        token = request_id_var.set(rid)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
