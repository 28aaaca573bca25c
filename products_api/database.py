"""
Products API — Database Session Management
============================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   Creates one async engine (one connection pool) for the process and
       hands each request its own session through `get_db_session`.
Who:   Route handlers receive sessions via FastAPI's dependency injection;
       the lifespan handler in main.py calls `init_db` and `dispose_engine`.
When:  Engine is created at module import; it connects lazily. `init_db`
       connects eagerly at startup; sessions are created per-request.

Connection Pooling (server databases only):
    pool_size:      Persistent connections (DB_POOL_SIZE, default 10)
    max_overflow:   Temporary connections for spikes (DB_MAX_OVERFLOW, default 5)
    pool_pre_ping:  Validates connections before use
    pool_recycle:   Recycles connections every hour

    SQLite URLs (used by the test suite) take none of these options.
"""

import logging
from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from products_api.config import settings

logger = logging.getLogger(__name__)


def _engine_options() -> Dict[str, Any]:
    """Engine keyword arguments for the configured database URL."""
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if not settings.is_sqlite:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return options


# ── Engine Configuration ──────────────────────────────────────────────────
engine: AsyncEngine = create_async_engine(settings.database_url, **_engine_options())

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: ORM objects stay readable after the commit in
# get_db_session, when FastAPI serializes the response.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    One session, and one transaction, per request.

    ProductService only flushes; the transaction commits here once the
    handler returns. A StorageError (or anything else) raised by
    the handler rolls the transaction back. The `async with` block returns
    the connection to the pool.

    Tests bind handlers to an in-memory database through
    `app.dependency_overrides[get_db_session]`.
    """
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            logger.debug("Rolling back product transaction")
            await session.rollback()
            raise
        await session.commit()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def init_db() -> bool:
    """
    Connect to the database and create missing tables.

    What:    Opens a connection from the pool and runs CREATE TABLE IF NOT EXISTS
             for every registered model.
    When:    Called once during application startup (lifespan handler).
    Returns: True when the database answered, False otherwise.

    A failed connection is logged, not raised: the server keeps listening and
    each route answers with its error envelope until the database is back.
    """
    # Register models on Base.metadata before create_all
    from products_api.models.product import Product  # noqa: F401

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except Exception as e:
        logger.error("Database connection error: %s", str(e))
        return False

    logger.info("Database connected")
    return True


async def dispose_engine() -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
