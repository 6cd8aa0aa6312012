"""
Tests for health check and root endpoints
"""

from fastapi.testclient import TestClient

from sales_tracker.api.main import app

client = TestClient(app)


def test_root():
    """Test the root endpoint"""
    response = client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Sales Tracker"
    assert data["docs_url"] == "/api/docs"


def test_health_check():
    """Test health check endpoint"""
    response = client.get("/api/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["components"]["database"]["status"] == "ok"
    assert data["components"]["database"]["type"] == "sqlite"
    assert "system" in data
    assert "X-Request-ID" in response.headers


def test_liveness_check():
    """Test liveness probe endpoint"""
    response = client.get("/api/liveness")

    assert response.status_code == 200
    assert response.json()["status"] == "alive"
