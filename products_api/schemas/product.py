"""
Products API — Pydantic Request/Response Schemas
==================================================

What:  Pydantic models defining the API contract with the front-end.
How:   Route handlers validate request bodies against the input models and
       FastAPI serializes responses through the output models (by alias, so
       the identifier appears as `_id` and the count as `productCount`).

Input models are permissive on purpose:
    - every field is optional
    - unknown keys are silently dropped
    - values are coerced the way the columns store them (numbers and numeric
      strings for price/rating; any scalar for the text fields)
A value that cannot be coerced fails validation and surfaces as a 400.
"""

import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class ProductCreate(BaseModel):
    """Body of POST /products. Missing fields are stored as null."""

    model_config = ConfigDict(
        extra="ignore", coerce_numbers_to_str=True, allow_inf_nan=False
    )

    name: Optional[str] = None
    price: Optional[float] = None
    description: Optional[str] = None
    url: Optional[str] = None
    rating: Optional[float] = None


class ProductUpdate(ProductCreate):
    """
    Body of PATCH /products/{id}.

    Same fields as ProductCreate; only the keys the client actually sent
    are applied (`model_dump(exclude_unset=True)`), so an explicit null
    clears a field while an omitted key leaves it untouched.
    """


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class ProductResponse(BaseModel):
    """A stored product as returned to clients."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID = Field(serialization_alias="_id", description="Storage-assigned identifier")
    name: Optional[str] = None
    price: Optional[float] = None
    description: Optional[str] = None
    url: Optional[str] = None
    rating: Optional[float] = None


class ProductCreatedResponse(BaseModel):
    """Envelope returned by POST /products with HTTP 201."""

    message: str = Field(default="Product added successfully")
    product: ProductResponse


class MessageResponse(BaseModel):
    """Envelope carrying only a human-readable message."""

    message: str


class ProductCountItem(BaseModel):
    """Single element of the GET /products/count/{price} result."""

    product_count: int = Field(serialization_alias="productCount", ge=1)


class ErrorResponse(BaseModel):
    """
    Error envelope shared by every failing route.

    Example:
        {"message": "Error adding product", "error": "price: Input should be a valid number"}
    """

    message: str = Field(description="Human-readable description of the failed operation")
    error: str = Field(description="Short description of the underlying failure")


class HealthResponse(BaseModel):
    """Health check response showing service and database status."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
