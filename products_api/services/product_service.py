"""
Products API — Product Service
================================

What:  Storage-facing operations behind every /products route.
How:   Each method performs exactly one database operation on the session it
       is given and returns ORM objects or plain values. Any failure raised
       by the driver (or by identifier parsing) is logged and wrapped in
       StorageError carrying the route's envelope message.
Who:   Called by the route handlers in routes/products.py.

ProductService is stateless: the session is passed in on every call, so
tests can hand it a mock session or an in-memory database.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from products_api.exceptions import StorageError, describe_error
from products_api.models.product import PRODUCT_FIELDS, Product

logger = logging.getLogger(__name__)

# Envelope messages, one per operation
LIST_ERROR = "Internal server error"
CREATE_ERROR = "Error adding product"
UPDATE_ERROR = "Error updating product"
DELETE_ERROR = "Error deleting product"
COUNT_ERROR = "Error fetching product count"

# Message for a request body that fails validation, by route method
BODY_ERRORS = {"POST": CREATE_ERROR, "PATCH": UPDATE_ERROR}


def parse_product_id(raw: str) -> uuid.UUID:
    """Parse a path identifier; raises ValueError when it is not a UUID."""
    return uuid.UUID(raw)


class ProductService:
    """
    Business logic layer for product operations.

    Responsibilities:
        - list_products(): every stored product
        - create_product(): insert from the five schema fields
        - update_product(): partial field replacement, returns the new state
        - delete_product(): remove by identifier, silent when absent
        - count_above_price(): number of products priced above a threshold
    """

    async def list_products(self, db: AsyncSession) -> List[Product]:
        """Return all products in the storage layer's natural order."""
        try:
            result = await db.execute(select(Product))
            return list(result.scalars().all())
        except Exception as e:
            logger.error("Error fetching products: %s", str(e), exc_info=True)
            raise StorageError(
                message=LIST_ERROR,
                error=describe_error(e),
                status_code=500,
                context={"operation": "list"},
            )

    async def create_product(self, db: AsyncSession, fields: Dict[str, Any]) -> Product:
        """
        Insert a new product.

        Only the schema fields are read from `fields`; other keys are ignored
        and missing ones are stored as null. The identifier is assigned on
        insert and is available on the returned object.
        """
        try:
            product = Product(**{name: fields.get(name) for name in PRODUCT_FIELDS})
            db.add(product)
            await db.flush()
            logger.info("Product created: %s", product.id)
            return product
        except Exception as e:
            logger.error("Error adding product: %s", str(e))
            raise StorageError(
                message=CREATE_ERROR,
                error=describe_error(e),
                context={"operation": "create"},
            )

    async def update_product(
        self,
        db: AsyncSession,
        product_id: str,
        changes: Dict[str, Any],
    ) -> Optional[Product]:
        """
        Replace the supplied fields of a product and return its new state.

        Keys outside the schema are ignored. Returns None when no product has
        the identifier; a malformed identifier is a StorageError.
        """
        try:
            product = await db.get(Product, parse_product_id(product_id))
            if product is None:
                logger.info("Update matched no product: %s", product_id)
                return None

            for name, value in changes.items():
                if name in PRODUCT_FIELDS:
                    setattr(product, name, value)
            await db.flush()
            return product
        except Exception as e:
            logger.error("Error updating product %s: %s", product_id, str(e))
            raise StorageError(
                message=UPDATE_ERROR,
                error=describe_error(e),
                context={"operation": "update", "product_id": product_id},
            )

    async def delete_product(self, db: AsyncSession, product_id: str) -> None:
        """Delete a product by identifier. Deleting an absent product is not an error."""
        try:
            result = await db.execute(
                delete(Product).where(Product.id == parse_product_id(product_id))
            )
            if result.rowcount:
                logger.info("Product deleted: %s", product_id)
        except Exception as e:
            logger.error("Error deleting product %s: %s", product_id, str(e))
            raise StorageError(
                message=DELETE_ERROR,
                error=describe_error(e),
                context={"operation": "delete", "product_id": product_id},
            )

    async def count_above_price(self, db: AsyncSession, threshold: float) -> int:
        """Count products whose price is strictly greater than `threshold`."""
        try:
            result = await db.execute(
                select(func.count()).select_from(Product).where(Product.price > threshold)
            )
            return result.scalar() or 0
        except Exception as e:
            logger.error("Error fetching product count: %s", str(e))
            raise StorageError(
                message=COUNT_ERROR,
                error=describe_error(e),
                context={"operation": "count", "threshold": threshold},
            )


# ── Singleton Instance ────────────────────────────────────────────────────
product_service = ProductService()
