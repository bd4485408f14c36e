"""Tests for health endpoints."""

from unittest.mock import Mock

from fastapi.testclient import TestClient


def test_liveness(client: TestClient) -> None:
    """Test the liveness endpoint."""
    response = client.get("/health/live")
    assert response.status_code == 200
    assert response.json() == {"status": "alive"}


def test_readiness_without_database(client: TestClient) -> None:
    """Not ready until the data store session is open."""
    response = client.get("/health/ready")
    assert response.status_code == 503
    assert response.json()["database"] is False


def test_readiness_with_database(app, client: TestClient) -> None:
    app.state.cassandra_session = Mock(is_shutdown=False)
    response = client.get("/health/ready")
    assert response.status_code == 200
    assert response.json()["status"] == "ready"


def test_health(client: TestClient) -> None:
    """Test the general health endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["app_name"] == "learnhub"
    assert "version" in data
