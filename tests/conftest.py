"""
Products API — Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: Mock AsyncSession for service unit tests
    ├── db_engine: In-memory SQLite engine with the products table created
    ├── test_client: HTTPX AsyncClient bound to the app, whose session
    │                dependency is overridden to use db_engine
    ├── server_client: test_client that turns escaped exceptions into responses
    └── sample_product_data: Request body for product creation
"""

import os

# Override settings BEFORE any application import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from products_api.database import Base, get_db_session
from products_api.models.product import Product  # noqa: F401


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_count(mock_db_session):
            mock_db_session.execute.return_value.scalar.return_value = 2
            result = await product_service.count_above_price(mock_db_session, 10)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def db_engine():
    """
    Provides a fresh in-memory SQLite database per test.

    StaticPool keeps a single connection open so every session sees the same
    in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


def _bind_app_to(db_engine):
    """Point the app's session dependency at `db_engine`; returns the app."""
    from products_api.main import app

    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db_session():
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    return app


@pytest_asyncio.fixture
async def test_client(db_engine):
    """
    Provides an async HTTP test client for endpoint testing.

    Uses ASGITransport to route requests directly to the app (the lifespan
    is not run, so the configured database is never touched).
    """
    app = _bind_app_to(db_engine)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def server_client(db_engine):
    """
    Like test_client, but an exception escaping the app becomes a response
    (as a real server would send) instead of being re-raised in the test.
    """
    app = _bind_app_to(db_engine)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def sample_product_data():
    """Request body carrying all five product fields."""
    return {
        "name": "A",
        "price": 10,
        "description": "d",
        "url": "u",
        "rating": 5,
    }
