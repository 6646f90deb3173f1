"""
Tests for health, metrics and middleware
"""
import pytest

from contact_manager.core.middleware import metrics_endpoint_label


def test_health_check(client):
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "Contact Manager"


def test_detailed_health_check(client):
    response = client.get("/health/detailed")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["environment"] == "test"
    assert data["components"]["database"]["status"] == "healthy"


def test_detailed_health_check_database_down(client, app, monkeypatch):
    def refuse():
        raise ConnectionError("database is down")

    monkeypatch.setattr(app.state.database, "ping", refuse)
    response = client.get("/health/detailed")

    assert response.status_code == 503
    assert response.json()["components"]["database"]["error"] == "ConnectionError"


def test_api_root(client):
    data = client.get("/api").json()
    assert data["status"] == "running"
    assert data["environment"] == "test"


def test_unknown_route_uses_error_shape(client):
    response = client.get("/api/v1/nothing-here")
    assert response.status_code == 404
    assert response.json()["errors"]["type"] == "HTTPException"


def test_metrics_endpoint(client, bram):
    client.post("/api/v1/contacts", json=bram)
    client.post("/api/v1/contacts", json=bram)

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "text/plain" in response.headers["content-type"]
    body = response.text
    assert "contacts_created_total" in body
    assert 'contact_validation_failures_total{field="email"}' in body
    assert "http_requests_total" in body


def test_request_id_generated(client):
    response = client.get("/health")
    assert response.headers["X-Request-ID"]


@pytest.mark.parametrize("path,label", [
    ("/api/v1/contacts", "/api/v1/contacts"),
    ("/api/v1/contacts/42", "/api/v1/contacts/{id}"),
    ("/health", "/health"),
])
def test_metrics_endpoint_label(path, label):
    assert metrics_endpoint_label(path) == label
