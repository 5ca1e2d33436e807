"""
Tests for health check endpoints.
"""

from rest_api.services.domain import MenuService


class TestHealthEndpoints:
    """Test health check API endpoints."""

    def test_health_check(self, client):
        """Basic health check should return healthy status."""
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "rest-api"

    def test_detailed_health_check(self, client):
        """Detailed check should report the database as healthy."""
        response = client.get("/api/health/detailed")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["dependencies"]["database"]["status"] == "healthy"

    def test_detailed_health_counts_catalog(self, client, seed_menu, db_session):
        """Only published, active menus are counted."""
        response = client.get("/api/health/detailed")
        assert response.json()["catalog"] == {"restaurants": 1, "published_menus": 0}

        MenuService(db_session).publish(seed_menu.id, seed_menu.tenant_id)
        db_session.commit()

        response = client.get("/api/health/detailed")
        assert response.json()["catalog"] == {"restaurants": 1, "published_menus": 1}
