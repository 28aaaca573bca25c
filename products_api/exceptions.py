"""
Products API — Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions raised by the service layer.
How:   Each exception carries a message and optional context dict. Global
       exception handlers (registered in main.py) turn them into JSON
       responses with the `{message, error}` envelope.
Who:   Raised by services and route handlers; caught by global handlers.

Exception Hierarchy:
    ProductsAPIError (base)
    └── StorageError    → 400 or 500 (storage operation failed)

There is exactly one failure kind: a storage operation failed. Connection
errors, malformed identifiers and values the columns cannot hold all collapse
into StorageError. Listing failures answer 500; every other route answers 400.
"""

from typing import Any, Dict, Optional

from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError


class ProductsAPIError(Exception):
    """
    Base exception for all Products API errors.

    Attributes:
        message:  User-facing error description (returned in the API response)
        context:  Additional debug info (logged, never returned to the client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class StorageError(ProductsAPIError):
    """
    Raised when a storage operation fails.

    What:    A query, insert, update or delete could not be completed.
    When:    Database unreachable, malformed product ID, value the column
             type cannot hold, invalid request body.
    HTTP:    `status_code` (400 by default, 500 for listing)

    Example response:
        {
            "message": "Error updating product",
            "error": "ValueError: badly formed hexadecimal UUID string"
        }
    """

    def __init__(
        self,
        message: str = "Storage operation failed",
        error: str = "storage_error",
        status_code: int = 400,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.error = error
        self.status_code = status_code


def describe_error(exc: BaseException) -> str:
    """
    Short, single-line description of an underlying failure for the
    envelope's `error` field.

    Validation errors (pydantic, or FastAPI's request-body wrapper) are
    flattened to `field: reason` pairs; the leading `body` location of a
    request-body error is dropped. Anything else becomes
    `ExceptionType: message`.
    """
    if isinstance(exc, (PydanticValidationError, RequestValidationError)):
        return "; ".join(_describe_validation_item(err) for err in exc.errors())

    detail = str(exc).splitlines()[0] if str(exc) else ""
    name = type(exc).__name__
    return f"{name}: {detail}" if detail else name


def _describe_validation_item(err: Dict[str, Any]) -> str:
    if err.get("type") == "json_invalid":
        reason = (err.get("ctx") or {}).get("error")
        return f"{err.get('msg')}: {reason}" if reason else str(err.get("msg"))

    loc = [str(p) for p in err.get("loc", ())]
    if loc and loc[0] == "body":
        loc = loc[1:]
    field = ".".join(loc)
    return f"{field}: {err.get('msg')}" if field else str(err.get("msg"))
