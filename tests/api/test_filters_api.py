"""Tests for facet endpoints."""

from fastapi.testclient import TestClient


class TestDynamicFilters:
    """Tests for /api/filters/*."""

    def test_categories_unfiltered(self, client: TestClient) -> None:
        """Test every category is offered without selections."""
        response = client.get("/api/filters/categories")

        assert response.status_code == 200
        assert response.json() == [
            "Brass Idols",
            "Chairs",
            "Home Decor",
            "Lighting",
            "Religious Items",
            "Storage",
            "Tables",
        ]

    def test_categories_narrowed_by_material(self, client: TestClient) -> None:
        """Test only categories with the selected material remain."""
        response = client.get("/api/filters/categories", params={"material": "Pure Brass"})

        assert response.json() == ["Brass Idols", "Home Decor", "Lighting", "Religious Items"]

    def test_finishes_ignore_own_selection(self, client: TestClient) -> None:
        """Test a finish selection is not sent to the finishes endpoint."""
        response = client.get(
            "/api/filters/finishes",
            params={"category": "Tables", "material": "all", "finish": "Mahogany"},
        )

        assert response.json() == ["Mahogany", "Wood & Metal"]

    def test_materials_narrowed(self, client: TestClient) -> None:
        """Test materials narrow by category and finish."""
        response = client.get(
            "/api/filters/materials", params={"category": "Tables", "finish": "Mahogany"}
        )

        assert response.json() == ["Mahogany Wood"]

    def test_no_matches(self, client: TestClient) -> None:
        """Test impossible selections give an empty list."""
        response = client.get("/api/filters/finishes", params={"category": "Nothing"})

        assert response.status_code == 200
        assert response.json() == []


class TestGlobalLists:
    """Tests for /api/categories, /api/finishes and /api/materials."""

    def test_finishes(self, client: TestClient) -> None:
        """Test the global finish list is sorted."""
        data = client.get("/api/finishes").json()

        assert len(data) == 8
        assert data == sorted(data)

    def test_materials(self, client: TestClient) -> None:
        """Test the global material list is distinct."""
        data = client.get("/api/materials").json()

        assert data.count("Pure Brass") == 1
        assert "" not in data

    def test_categories(self, client: TestClient) -> None:
        """Test the global category list is distinct."""
        data = client.get("/api/categories").json()

        assert len(data) == len(set(data)) == 7
