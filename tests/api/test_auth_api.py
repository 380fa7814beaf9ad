"""Tests for authentication endpoints."""

from fastapi.testclient import TestClient

from finessee.catalog.sample_data import PRIMARY_ADMIN_NUMBER

ADMIN_PASSWORD = "admin-pass"
CUSTOMER = {"name": "Jane Doe", "whatsappNumber": "+919800000001", "city": "Pune"}


class TestRegister:
    """Tests for POST /api/auth/register."""

    def test_register_starts_session(self, client: TestClient) -> None:
        """Test registering signs the visitor in."""
        response = client.post("/api/auth/register", json=CUSTOMER)

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["whatsappNumber"] == CUSTOMER["whatsappNumber"]
        assert user["isAdmin"] is False
        assert "passwordHash" not in user
        assert client.get("/api/auth/me").json()["user"]["id"] == user["id"]

    def test_register_twice_returns_same_user(self, client: TestClient) -> None:
        """Test a known number signs in instead of duplicating."""
        first = client.post("/api/auth/register", json=CUSTOMER).json()["user"]
        second = client.post(
            "/api/auth/register", json={**CUSTOMER, "name": "Someone Else"}
        ).json()["user"]

        assert first["id"] == second["id"]

    def test_admin_number_refused(self, client: TestClient) -> None:
        """Test admins cannot use visitor registration."""
        response = client.post(
            "/api/auth/register",
            json={"name": "Admin", "whatsappNumber": PRIMARY_ADMIN_NUMBER},
        )

        assert response.status_code == 403

    def test_missing_fields(self, client: TestClient) -> None:
        """Test malformed bodies are validation errors."""
        response = client.post("/api/auth/register", json={"name": "No Number"})

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"


class TestAdminLogin:
    """Tests for POST /api/auth/admin-login."""

    def test_wrong_password_after_first_login(self, admin_client: TestClient) -> None:
        """Test a different password is rejected once one is set."""
        response = admin_client.post(
            "/api/auth/admin-login",
            json={"whatsappNumber": PRIMARY_ADMIN_NUMBER, "password": "not-the-password"},
        )

        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHENTICATED"

    def test_customer_cannot_login(self, user_client: TestClient) -> None:
        """Test non-admins are rejected."""
        response = user_client.post(
            "/api/auth/admin-login",
            json={"whatsappNumber": CUSTOMER["whatsappNumber"], "password": ADMIN_PASSWORD},
        )

        assert response.status_code == 401

    def test_me_reports_admin(self, admin_client: TestClient) -> None:
        """Test the admin session carries admin flags."""
        user = admin_client.get("/api/auth/me").json()["user"]

        assert user["isAdmin"] is True
        assert user["isPrimaryAdmin"] is True


class TestLogout:
    """Tests for POST /api/auth/logout."""

    def test_logout_clears_session(self, user_client: TestClient) -> None:
        """Test the session ends on logout."""
        assert user_client.post("/api/auth/logout").json() == {"success": True}
        assert user_client.get("/api/auth/me").status_code == 401

    def test_me_anonymous(self, client: TestClient) -> None:
        """Test /me without a session is 401."""
        assert client.get("/api/auth/me").status_code == 401
