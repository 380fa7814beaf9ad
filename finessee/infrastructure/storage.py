"""Storage backends.

A backend hands out request-scoped units of work. Each unit of work is a
``Repositories`` bundle whose repositories share one transaction (database
backend) or one process-wide ``MemoryStore`` (memory backend). The backend
is chosen once at start-up from ``settings.storage_backend``.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from dataclasses import dataclass

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from finessee.catalog import models as catalog_models  # noqa: F401  (registers tables)
from finessee.catalog.repository import (
    InMemoryProductRepository,
    ProductRepository,
    SqlProductRepository,
)
from finessee.domain.exceptions import StorageError
from finessee.infrastructure import models as infrastructure_models  # noqa: F401
from finessee.infrastructure.config import Settings, settings
from finessee.infrastructure.database import Base, create_engine, create_session_factory
from finessee.infrastructure.memory_store import MemoryStore
from finessee.infrastructure.repositories import (
    FeedbackRepository,
    InMemoryFeedbackRepository,
    InMemoryUserRepository,
    InMemoryWishlistRepository,
    SqlFeedbackRepository,
    SqlUserRepository,
    SqlWishlistRepository,
    UserRepository,
    WishlistRepository,
)

logger = structlog.get_logger()


@dataclass
class Repositories:
    """Repositories sharing one unit of work."""

    products: ProductRepository
    users: UserRepository
    wishlist: WishlistRepository
    feedback: FeedbackRepository


class StorageBackend(ABC):
    """Source of units of work."""

    name: str = "abstract"

    async def startup(self) -> None:
        """Prepare the backend (create tables, open pools)."""

    async def shutdown(self) -> None:
        """Release backend resources."""

    async def ping(self) -> bool:
        """Check that the backend is reachable."""
        return True

    @abstractmethod
    def session(self) -> AbstractAsyncContextManager[Repositories]:
        """Open a unit of work.

        Usage:
            async with storage.session() as repos:
                await repos.products.get(1)
        """


# ============================================================================
# Memory backend
# ============================================================================


class MemoryBackend(StorageBackend):
    """Backend keeping all data in one process-wide ``MemoryStore``."""

    name = "memory"

    def __init__(self, store: MemoryStore | None = None) -> None:
        self.store = store or MemoryStore()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[Repositories]:
        yield Repositories(
            products=InMemoryProductRepository(self.store),
            users=InMemoryUserRepository(self.store),
            wishlist=InMemoryWishlistRepository(self.store),
            feedback=InMemoryFeedbackRepository(self.store),
        )


# ============================================================================
# Database backend
# ============================================================================


class DatabaseBackend(StorageBackend):
    """Backend over an async SQLAlchemy engine.

    Each unit of work is one ``AsyncSession``, committed when the block exits
    cleanly and rolled back otherwise. ``SQLAlchemyError`` is re-raised as
    ``StorageError``.
    """

    name = "database"

    def __init__(self, engine: AsyncEngine) -> None:
        """Initialize backend.

        Args:
            engine: Async engine to open sessions on.
        """
        self.engine = engine
        self.session_factory = create_session_factory(engine)

    @classmethod
    def from_url(cls, url: str, echo: bool = False) -> "DatabaseBackend":
        """Build a backend from a database URL."""
        return cls(create_engine(url, echo=echo))

    async def startup(self) -> None:
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            logger.error("Database startup failed", error=str(e))
            raise StorageError("Database unavailable", details={"reason": str(e)}) from e
        logger.info("Database tables ready", dialect=self.engine.dialect.name)

    async def shutdown(self) -> None:
        await self.engine.dispose()

    async def ping(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.warning("Database ping failed", error=str(e))
            return False
        return True

    @asynccontextmanager
    async def session(self) -> AsyncIterator[Repositories]:
        async with self.session_factory() as session:
            try:
                yield Repositories(
                    products=SqlProductRepository(session),
                    users=SqlUserRepository(session),
                    wishlist=SqlWishlistRepository(session),
                    feedback=SqlFeedbackRepository(session),
                )
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error("Storage operation failed", error=str(e))
                raise StorageError("Storage operation failed", details={"reason": str(e)}) from e
            except Exception:
                await session.rollback()
                raise


# ============================================================================
# Backend selection
# ============================================================================


def build_storage(config: Settings) -> StorageBackend:
    """Build the backend named by settings.

    Args:
        config: Application settings.

    Returns:
        MemoryBackend or DatabaseBackend.

    Raises:
        ValueError: If ``storage_backend`` names no known backend.
    """
    if config.storage_backend == MemoryBackend.name:
        return MemoryBackend()
    if config.storage_backend == DatabaseBackend.name:
        return DatabaseBackend.from_url(config.database_url, echo=config.debug)
    raise ValueError(f"Unknown storage backend: {config.storage_backend}")


# Global backend instance
_storage: StorageBackend | None = None


def get_storage() -> StorageBackend:
    """Get storage backend singleton."""
    global _storage
    if _storage is None:
        _storage = build_storage(settings)
    return _storage


def set_storage(backend: StorageBackend) -> None:
    """Replace the storage backend (for testing)."""
    global _storage
    _storage = backend


def reset_storage() -> None:
    """Reset storage to a fresh in-memory backend (for testing)."""
    global _storage
    _storage = MemoryBackend()
