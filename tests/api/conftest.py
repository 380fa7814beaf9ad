"""Shared fixtures for API tests.

Every test runs once on a fresh in-memory store and once on SQLite through
SQLAlchemy, each seeded with the sample catalog and the primary admin.
"""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from finessee.catalog.sample_data import PRIMARY_ADMIN_NUMBER
from finessee.infrastructure.database import create_engine
from finessee.infrastructure.storage import DatabaseBackend, MemoryBackend, set_storage
from finessee.main import app

ADMIN_PASSWORD = "admin-pass"
CUSTOMER = {"name": "Jane Doe", "whatsappNumber": "+919800000001", "city": "Pune"}


@pytest.fixture(params=["memory", "sqlite"])
def storage_name(request) -> str:
    """Backend the application runs on."""
    if request.param == "memory":
        set_storage(MemoryBackend())
    else:
        engine = create_engine(
            "sqlite+aiosqlite:///:memory:",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        set_storage(DatabaseBackend(engine))
    return request.param


@pytest.fixture
def client(storage_name: str) -> Iterator[TestClient]:
    """Create anonymous test client; startup seeds the sample data."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_client(client: TestClient) -> TestClient:
    """Create test client signed in as the primary admin."""
    admin = TestClient(app)
    response = admin.post(
        "/api/auth/admin-login",
        json={"whatsappNumber": PRIMARY_ADMIN_NUMBER, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    return admin


@pytest.fixture
def user_client(client: TestClient) -> TestClient:
    """Create test client signed in as a registered customer."""
    visitor = TestClient(app)
    response = visitor.post("/api/auth/register", json=CUSTOMER)
    assert response.status_code == 200
    return visitor


@pytest.fixture
def product_ids(client: TestClient) -> dict[str, int]:
    """Map sample product codes to their ids."""
    response = client.get("/api/products", params={"limit": "100"})
    return {p["code"]: p["id"] for p in response.json()["products"]}
