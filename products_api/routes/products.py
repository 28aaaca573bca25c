"""
Products API — Product Route Handlers
=======================================

What:  The welcome route and the five /products routes.
How:   FastAPI validates request bodies against the input schemas; each
       handler makes one ProductService call and returns the serialized
       result. Storage failures are raised as StorageError and body
       validation failures as RequestValidationError; both are formatted
       by the handlers in main.py.

Route Inventory:
    GET    /                        plain-text welcome
    GET    /products                list every product
    POST   /products                create a product         (201)
    PATCH  /products/{product_id}   partial update           (null when absent)
    DELETE /products/{product_id}   delete, always succeeds when storage does
    GET    /products/count/{price}  [{"productCount": N}] or []
"""

import math
from typing import List, Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from products_api.database import get_db_session
from products_api.exceptions import StorageError, describe_error
from products_api.schemas.product import (
    ErrorResponse,
    MessageResponse,
    ProductCountItem,
    ProductCreate,
    ProductCreatedResponse,
    ProductResponse,
    ProductUpdate,
)
from products_api.services.product_service import COUNT_ERROR, product_service

router = APIRouter(tags=["Products"])

WELCOME_TEXT = "Welcome to the E-Commerce API!"


def _parse_price(raw: str) -> float:
    """Parse the count threshold; non-numeric and NaN inputs are rejected."""
    try:
        value = float(raw)
    except ValueError as e:
        raise StorageError(message=COUNT_ERROR, error=describe_error(e))
    if math.isnan(value):
        raise StorageError(message=COUNT_ERROR, error=f"Invalid price threshold '{raw}'")
    return value


@router.get(
    "/",
    response_class=PlainTextResponse,
    summary="Welcome message",
)
async def welcome() -> str:
    return WELCOME_TEXT


@router.get(
    "/products",
    response_model=List[ProductResponse],
    responses={500: {"description": "Storage error", "model": ErrorResponse}},
    summary="List all products",
)
async def list_products(db: AsyncSession = Depends(get_db_session)) -> List[ProductResponse]:
    """Every stored product, unfiltered and unpaginated."""
    products = await product_service.list_products(db)
    return [ProductResponse.model_validate(p) for p in products]


@router.post(
    "/products",
    status_code=201,
    response_model=ProductCreatedResponse,
    responses={400: {"description": "Product could not be stored", "model": ErrorResponse}},
    summary="Create a product",
)
async def create_product(
    payload: Optional[ProductCreate] = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> ProductCreatedResponse:
    """
    Create a product from name, price, description, url and rating.

    Any other keys in the body are dropped; missing keys are stored as null.
    An empty body creates a product with every field null.
    """
    payload = payload or ProductCreate()
    product = await product_service.create_product(db, payload.model_dump())
    return ProductCreatedResponse(
        message="Product added successfully",
        product=ProductResponse.model_validate(product),
    )


@router.patch(
    "/products/{product_id}",
    response_model=Optional[ProductResponse],
    responses={400: {"description": "Malformed ID or storage error", "model": ErrorResponse}},
    summary="Update a product",
)
async def update_product(
    product_id: str,
    payload: Optional[ProductUpdate] = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> Optional[ProductResponse]:
    """
    Replace the supplied fields and return the updated product.

    Answers 200 with `null` when no product has this ID.
    """
    changes = payload.model_dump(exclude_unset=True) if payload else {}
    product = await product_service.update_product(db, product_id, changes)
    if product is None:
        return None
    return ProductResponse.model_validate(product)


@router.delete(
    "/products/{product_id}",
    response_model=MessageResponse,
    responses={400: {"description": "Malformed ID or storage error", "model": ErrorResponse}},
    summary="Delete a product",
)
async def delete_product(
    product_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    """Delete a product. Succeeds whether or not the product existed."""
    await product_service.delete_product(db, product_id)
    return MessageResponse(message="Product deleted successfully")


@router.get(
    "/products/count/{price}",
    response_model=List[ProductCountItem],
    responses={400: {"description": "Invalid threshold or storage error", "model": ErrorResponse}},
    summary="Count products above a price",
)
async def count_products_above_price(
    price: str,
    db: AsyncSession = Depends(get_db_session),
) -> List[ProductCountItem]:
    """
    Count products priced strictly above `price`.

    Returns `[{"productCount": N}]`, or `[]` when no product qualifies.
    """
    threshold = _parse_price(price)
    count = await product_service.count_above_price(db, threshold)
    if count == 0:
        return []
    return [ProductCountItem(product_count=count)]
