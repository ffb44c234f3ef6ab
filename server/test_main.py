import pytest
from unittest.mock import patch
from fastapi.testclient import TestClient

import firebase_init
from main import app
from config import API_NAME, API_VERSION

# Test client for FastAPI
client = TestClient(app)


class TestAPI:
    """Test suite for the application endpoints"""

    def test_root_endpoint(self):
        """Test the root endpoint returns the API name and version"""
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == API_NAME
        assert data["version"] == API_VERSION
        assert data["status"] == "running"

    def test_health_check_with_local_store(self):
        """The in-memory store answers, but Firestore is not configured"""
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "degraded"
        assert data["services"]["database"] == "connected"
        assert data["services"]["firestore"] == "local"

    def test_health_check_database_failure(self):
        """A failing store write marks the API unhealthy"""
        with patch.object(firebase_init.db, 'collection', side_effect=Exception("Database error")):
            response = client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "unhealthy"
        assert "Database error" in data["services"]["database"]

    def test_api_info_lists_endpoint_groups(self):
        response = client.get("/api/info")
        assert response.status_code == 200
        endpoints = response.json()["endpoints"]
        assert "checkout" in endpoints
        assert "admin" in endpoints


class TestAuthentication:
    """Token checks shared by every protected route"""

    def test_missing_token_is_rejected(self):
        response = client.get("/api/orders")
        assert response.status_code == 401
        assert response.json()["detail"] == "Authentication required"

    def test_invalid_token_is_rejected(self):
        response = client.get("/api/orders", headers={"Authorization": "Bearer forged"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid authentication token"

    def test_customer_cannot_reach_admin_routes(self, customer_headers):
        response = client.get("/api/admin/orders", headers=customer_headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "Admin access required"

    def test_admin_reaches_admin_routes(self, admin_headers):
        response = client.get("/api/admin/orders", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["orders"] == []

    def test_admin_cannot_reach_superadmin_routes(self, admin_headers):
        response = client.post("/api/admin/admins", headers=admin_headers, json={
            "email": "new@legendary-signatures.com",
            "displayName": "New Admin",
        })
        assert response.status_code == 403


class TestErrorResponses:
    """Storefront errors are returned in one envelope"""

    def test_not_found_error_format(self):
        response = client.get("/api/products/does-not-exist")
        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == "PRODUCT_NOT_FOUND"
        assert error["details"] == {"resource": "product", "id": "does-not-exist"}
        assert "timestamp" in error

    def test_request_validation_error(self):
        """Missing required fields are rejected before reaching the handler"""
        response = client.post("/api/contact", json={"name": "Ali"})
        assert response.status_code == 422


class TestCORS:
    """Test CORS configuration"""

    def test_cors_origin_allowed(self):
        """Test that requests from an allowed origin get the CORS header"""
        headers = {"Origin": "http://localhost:3000"}
        response = client.get("/", headers=headers)
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"

    def test_cors_preflight(self):
        response = client.options("/api/products", headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "GET",
        })
        assert response.status_code == 200

    def test_cors_origin_not_allowed(self):
        response = client.get("/", headers={"Origin": "http://evil.example.com"})
        assert "access-control-allow-origin" not in response.headers


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
