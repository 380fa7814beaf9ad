"""Database configuration.

Provides async SQLAlchemy engine and session factory builders.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

# Base class for models
Base = declarative_base()


def create_engine(url: str, echo: bool = False, **kwargs: Any) -> AsyncEngine:
    """Create async engine.

    Args:
        url: Database URL (e.g. postgresql+asyncpg://...).
        echo: Whether to log emitted SQL.
        kwargs: Extra engine options (poolclass, connect_args, ...).

    Returns:
        AsyncEngine instance.
    """
    if not url.startswith("sqlite"):
        kwargs.setdefault("pool_pre_ping", True)
    return create_async_engine(url, echo=echo, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory bound to an engine.

    Args:
        engine: Async engine.

    Returns:
        Session factory producing AsyncSession objects.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
