"""Pytest configuration for all tests."""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from schemabase.core.config import Settings
from schemabase.domain.services import DataService, SchemaRegistry
from schemabase.infrastructure.persistence import models  # noqa: F401
from schemabase.infrastructure.persistence.database import Base
from schemabase.infrastructure.persistence.stores import SqlDocumentStore


@pytest.fixture
def test_settings() -> Settings:
    """Settings for an in-memory test database."""
    return Settings(
        environment="testing",
        database_url="sqlite+aiosqlite:///:memory:",
        log_format="console",
        debug=False,
    )


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Create a session factory over a fresh in-memory SQLite database."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def store(session_factory) -> SqlDocumentStore:
    return SqlDocumentStore(session_factory)


@pytest.fixture
def registry(session_factory) -> SchemaRegistry:
    return SchemaRegistry(session_factory)


@pytest.fixture
def data_service(registry, store) -> DataService:
    return DataService(registry, store)


@pytest_asyncio.fixture
async def client(test_settings, registry, store, data_service) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client wired to the in-memory services.

    ASGITransport does not run the lifespan, so services are attached here.
    """
    from schemabase.infrastructure.api.app import create_app

    app = create_app(test_settings)
    app.state.document_store = store
    app.state.schema_registry = registry
    app.state.data_service = data_service

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def author_definition() -> dict:
    return {
        "properties": {
            "name": {"type": "string"},
            "email": {"type": "string"},
        },
        "required": ["name"],
    }


@pytest_asyncio.fixture
async def author_schema(registry, author_definition):
    """A registered schema with no relationship fields."""
    return await registry.create_schema("authors", author_definition)


@pytest_asyncio.fixture
async def book_schema(registry, author_schema):
    """A registered schema with a single and an array reference to authors."""
    return await registry.create_schema(
        "books",
        {
            "properties": {
                "title": {"type": "string"},
                "pages": {"type": "integer"},
                "author": {"type": "object", "schemaId": author_schema.id},
                "contributors": {
                    "type": "array",
                    "items": {"type": "object", "schemaId": author_schema.id},
                },
            },
            "required": ["title"],
        },
    )
