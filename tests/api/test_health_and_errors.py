"""Health endpoint, middleware and the error envelope"""

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from main import create_app
from workforce.config import Settings
from workforce.utils.limiter import configure_limiter, limiter


def test_health_reports_database(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["database"] == "connected"
    assert body["scheduler"] == {"running": False, "jobs": []}
    assert body["timestamp"].endswith("Z")


def test_health_unhealthy_when_database_unreachable(app, client, monkeypatch):
    def unreachable():
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    monkeypatch.setattr(app.state.db, "health_check", unreachable)
    response = client.get("/health")
    assert response.status_code == 503
    assert response.json()["database"] == "disconnected"


def test_security_headers_and_request_id(client):
    response = client.get("/health")
    assert response.headers["x-content-type-options"] == "nosniff"
    assert response.headers["x-frame-options"] == "DENY"
    assert "strict-transport-security" in response.headers
    assert len(response.headers["x-request-id"]) == 32


def test_client_request_id_is_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "trace-abc-123"})
    assert response.headers["x-request-id"] == "trace-abc-123"


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/nope")
    assert response.status_code == 404
    body = response.json()
    assert body["error"] == "Route /api/nope not found"
    assert body["code"] == "NOT_FOUND"
    assert body["timestamp"]
    assert body["requestId"] == response.headers["x-request-id"]
    assert "stack" not in body


def test_unexpected_error_is_generic(app):
    @app.get("/boom")
    def boom():
        raise RuntimeError("secret internals")

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/boom")
    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Something went wrong"
    assert body["code"] == "INTERNAL_ERROR"
    assert "secret" not in response.text


def test_auth_endpoints_are_rate_limited(client):
    limiter.enabled = True
    try:
        codes = []
        for _ in range(10):
            response = client.post("/api/auth/login", json={"email": "x@example.com", "password": "whatever1"})
            codes.append(response.status_code)
        assert 429 in codes
        assert codes[0] == 401
        assert response.json()["code"] == "RATE_LIMIT_EXCEEDED"
    finally:
        limiter.reset()
        limiter.enabled = False


def test_default_limit_comes_from_app_settings():
    app = create_app(Settings(rate_limit_enabled=True, api_rate_limit="2/minute"))
    try:
        with TestClient(app) as client:
            codes = [client.get("/api/users").status_code for _ in range(3)]
            assert codes == [401, 401, 429]
            assert client.get("/health").status_code == 200
    finally:
        limiter.reset()
        configure_limiter(Settings())
