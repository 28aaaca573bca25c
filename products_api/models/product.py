"""
Products API — Product SQLAlchemy Model
=========================================

What:  ORM model representing the `products` table.
How:   Inherits from the shared DeclarativeBase; `init_db` creates the table
       on startup if it does not exist.
Who:   Used by ProductService for every CRUD and count operation.

Table Design:
    - id: UUID assigned on insert, serialized to clients as `_id`
    - name, description, url: free text
    - price, rating: floating point numbers
    Every attribute is nullable with no default and no range check. The
    column types are the only constraint on stored values.
"""

import uuid
from typing import Optional

from sqlalchemy import Float, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from products_api.database import Base

# Attributes a client may set on create and update, in schema order
PRODUCT_FIELDS = ("name", "price", "description", "url", "rating")


class Product(Base):
    """A commerce item. The only entity the API manages."""

    __tablename__ = "products"

    # Generic Uuid maps to native UUID on PostgreSQL and CHAR(32) on SQLite
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    rating: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name={self.name!r}, price={self.price})>"
