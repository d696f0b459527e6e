# tests/test_http.py
# PURPOSE: cross-cutting HTTP behaviour: request ids, hardening headers, error envelope.

from taskflow.config import settings


def test_request_id_is_echoed(client):
    r = client.get("/api/tasks", headers={settings.REQUEST_ID_HEADER: "abc123"})
    assert r.status_code == 200
    assert r.headers[settings.REQUEST_ID_HEADER] == "abc123"


def test_request_id_is_generated(client):
    r = client.get("/api/tasks")
    assert len(r.headers[settings.REQUEST_ID_HEADER]) == 32


def test_hardening_headers(client):
    r = client.get("/health")
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"
    assert r.headers["Referrer-Policy"] == "no-referrer"


def test_unknown_route_uses_envelope(client):
    r = client.get("/api/nowhere")
    assert r.status_code == 404
    body = r.json()
    assert body["success"] is False
    assert body["error"] == "Not Found"


def test_api_info(client):
    r = client.get("/api")
    assert r.status_code == 200
    assert r.json()["tasks"] == "/api/tasks"
