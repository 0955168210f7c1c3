"""Shared fixtures for catalog tests.

Every test gets a fresh in-memory SQLite database. The environment
is pointed at SQLite before the application modules are imported so
the module-level engine never needs a PostgreSQL driver.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("CREATE_TABLES", "false")

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from catalog_api.catalog.models import ProductModel  # noqa: F401  registers the table
from catalog_api.catalog.repository import ProductRepository
from catalog_api.catalog.service import ProductService
from catalog_api.infrastructure.database import Base, get_session
from catalog_api.main import app


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an in-memory database with the catalog schema."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test database."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Open a session on the test database."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def repository(session: AsyncSession) -> ProductRepository:
    """Product repository on the test session."""
    return ProductRepository(session)


@pytest.fixture
def service(repository: ProductRepository) -> ProductService:
    """Product service on the test repository."""
    return ProductService(repository, request_id="test-request")


@pytest_asyncio.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """Create an HTTP client whose requests use the test database."""

    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
    app.dependency_overrides.clear()
