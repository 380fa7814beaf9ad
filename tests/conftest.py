"""Shared fixtures for all tests."""

from collections.abc import AsyncIterator, Callable
from datetime import datetime
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.pool import StaticPool

from finessee.catalog.models import Product
from finessee.infrastructure.database import create_engine
from finessee.infrastructure.models import User
from finessee.infrastructure.storage import (
    DatabaseBackend,
    MemoryBackend,
    Repositories,
    StorageBackend,
    reset_storage,
)

SQLITE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(autouse=True)
def reset_storage_backend():
    """Give every test a fresh in-memory storage backend."""
    reset_storage()
    yield
    reset_storage()


@pytest_asyncio.fixture(params=["memory", "sqlite"])
async def backend(request) -> AsyncIterator[StorageBackend]:
    """Storage backend under test: in-memory and SQLite through SQLAlchemy."""
    if request.param == "memory":
        storage: StorageBackend = MemoryBackend()
    else:
        engine = create_engine(
            SQLITE_URL,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        storage = DatabaseBackend(engine)
    await storage.startup()
    yield storage
    await storage.shutdown()


@pytest_asyncio.fixture
async def repos(backend: StorageBackend) -> AsyncIterator[Repositories]:
    """Repositories of one unit of work on the backend under test."""
    async with backend.session() as repositories:
        yield repositories


@pytest.fixture
def make_product() -> Callable[..., Product]:
    """Factory for transient products with sensible defaults."""

    def factory(
        code: str,
        name: str | None = None,
        category: str = "Tables",
        finish: str = "Walnut",
        material: str = "",
        created_at: datetime | None = None,
        **extra: Any,
    ) -> Product:
        if created_at is not None:
            extra["created_at"] = created_at
        return Product(
            code=code,
            name=name or f"Product {code}",
            category=category,
            finish=finish,
            material=material,
            length=extra.pop("length", 10),
            breadth=extra.pop("breadth", 10),
            height=extra.pop("height", 10),
            **extra,
        )

    return factory


@pytest_asyncio.fixture
async def customer(repos: Repositories) -> User:
    """A registered non-admin user."""
    return await repos.users.create(
        User(name="Jane Doe", whatsapp_number="+919800000001", city="Pune")
    )


@pytest_asyncio.fixture
async def primary_admin(repos: Repositories) -> User:
    """The primary administrator."""
    return await repos.users.create(
        User(
            name="Admin User",
            whatsapp_number="+1234567890",
            is_admin=True,
            is_primary_admin=True,
        )
    )
