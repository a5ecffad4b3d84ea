"""Tests for the health endpoints and response plumbing."""

from unittest.mock import patch


class TestHealth:
    def test_liveness(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.headers["X-Request-ID"]
        assert response.headers["X-Content-Type-Options"] == "nosniff"

    def test_request_id_is_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"

    def test_readiness(self, client):
        response = client.get("/health/ready")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ready"
        assert body["checks"]["database"]["status"] == "healthy"

    def test_readiness_reports_database_outage(self, client, database_service):
        with patch.object(database_service, "health_check", return_value=False):
            response = client.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"


class TestErrorRendering:
    def test_domain_errors_include_request_id(self, client):
        response = client.get("/api/products/missing", headers={"X-Request-ID": "abc"})

        assert response.status_code == 404
        assert response.json() == {"detail": "Product not found", "request_id": "abc"}

    def test_validation_errors(self, client, customer_headers):
        response = client.post("/api/cart", json={"quantity": 0}, headers=customer_headers)

        assert response.status_code == 422
        assert isinstance(response.json()["detail"], list)

    def test_unhandled_errors_become_500(self, client, monkeypatch):
        from src.storefront.core.services.catalog.product_service import ProductService

        def explode(self):
            raise RuntimeError("boom")

        monkeypatch.setattr(ProductService, "list_categories", explode)

        response = client.get("/api/products/categories")

        assert response.status_code == 500
        assert response.json()["detail"] == "Internal Server Error"
        assert response.json()["request_id"]
