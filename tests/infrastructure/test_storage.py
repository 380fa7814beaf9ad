"""Tests for storage backends and backend selection."""

import pytest
from sqlalchemy.pool import StaticPool

from finessee.catalog.predicates import FacetFilter
from finessee.catalog.sample_data import PRIMARY_ADMIN_NUMBER, SAMPLE_PRODUCTS, seed_sample_data
from finessee.domain.exceptions import ConflictError
from finessee.infrastructure.config import Settings
from finessee.infrastructure.database import create_engine
from finessee.infrastructure.storage import (
    DatabaseBackend,
    MemoryBackend,
    build_storage,
    get_storage,
    reset_storage,
    set_storage,
)


class TestBuildStorage:
    """Tests for backend selection from settings."""

    def test_memory(self):
        """Test the memory backend is the default."""
        assert isinstance(build_storage(Settings(storage_backend="memory")), MemoryBackend)

    def test_database(self):
        """Test the database backend is built from the URL."""
        backend = build_storage(
            Settings(storage_backend="database", database_url="sqlite+aiosqlite:///:memory:")
        )
        assert isinstance(backend, DatabaseBackend)

    def test_unknown(self):
        """Test unknown backend names are rejected."""
        with pytest.raises(ValueError):
            build_storage(Settings(storage_backend="redis"))

    def test_singleton_helpers(self):
        """Test set_storage and reset_storage replace the global backend."""
        backend = MemoryBackend()
        set_storage(backend)
        assert get_storage() is backend

        reset_storage()
        assert get_storage() is not backend


class TestUnitOfWork:
    """Tests for session commit and rollback."""

    @pytest.mark.asyncio
    async def test_commit_persists_across_sessions(self, backend, make_product):
        """Test changes from a clean block are visible in the next one."""
        async with backend.session() as repos:
            await repos.products.create(make_product("K-1"))

        async with backend.session() as repos:
            assert await repos.products.get_by_code("K-1") is not None

    @pytest.mark.asyncio
    async def test_database_rolls_back_on_error(self, make_product):
        """Test a failing block leaves no trace in the database."""
        engine = create_engine(
            "sqlite+aiosqlite:///:memory:",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        backend = DatabaseBackend(engine)
        await backend.startup()
        try:
            with pytest.raises(ConflictError):
                async with backend.session() as repos:
                    await repos.products.create(make_product("K-1"))
                    await repos.products.create(make_product("K-1"))

            async with backend.session() as repos:
                assert await repos.products.get_by_code("K-1") is None
            assert await backend.ping() is True
        finally:
            await backend.shutdown()


class TestSeeding:
    """Tests for sample data seeding."""

    @pytest.mark.asyncio
    async def test_seed_is_idempotent(self, backend):
        """Test seeding twice creates the data once."""
        for _ in range(2):
            async with backend.session() as repos:
                await seed_sample_data(repos)

        async with backend.session() as repos:
            assert await repos.products.count_matching(FacetFilter()) == len(SAMPLE_PRODUCTS)
            users = await repos.users.list_all()
            assert [u.whatsapp_number for u in users] == [PRIMARY_ADMIN_NUMBER]
            assert users[0].is_primary_admin is True
