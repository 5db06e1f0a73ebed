"""
Development Tracker
Tests — authorization gate, health probes and request middleware.
"""

import base64

import pytest


@pytest.fixture()
def auth_on(monkeypatch):
    monkeypatch.setenv("API_AUTH_ENABLED", "true")
    monkeypatch.setenv("API_KEYS", "edit-key:editor,view-key:viewer")


class TestAuthGate:
    def test_disabled_in_testing(self, client):
        assert client.get("/api/v1/developments").status_code == 200

    def test_missing_key(self, client, auth_on):
        res = client.get("/api/v1/developments")
        assert res.status_code == 401

    def test_invalid_key(self, client, auth_on):
        res = client.get("/api/v1/developments", headers={"X-API-Key": "nope"})
        assert res.status_code == 401

    def test_viewer_reads_but_cannot_write(self, client, auth_on, development):
        headers = {"X-API-Key": "view-key"}
        assert client.get(f"/api/v1/developments/{development.id}", headers=headers).status_code == 200
        res = client.patch(
            f"/api/v1/developments/{development.id}/design",
            json={"design_url": "x"}, headers=headers,
        )
        assert res.status_code == 403

    def test_editor_writes(self, client, auth_on, development):
        res = client.patch(
            f"/api/v1/developments/{development.id}/design",
            json={"design_url": "x"}, headers={"X-API-Key": "edit-key"},
        )
        assert res.status_code == 200

    def test_unconfigured_keys(self, client, monkeypatch):
        monkeypatch.setenv("API_AUTH_ENABLED", "true")
        monkeypatch.delenv("API_KEYS", raising=False)
        res = client.get("/api/v1/developments", headers={"X-API-Key": "anything"})
        assert res.status_code == 500

    def test_basic_auth(self, client, auth_on, monkeypatch):
        monkeypatch.setenv("SITE_USERNAME", "site")
        monkeypatch.setenv("SITE_PASSWORD", "secret")
        token = base64.b64encode(b"site:secret").decode()
        res = client.get("/api/v1/developments", headers={"Authorization": f"Basic {token}"})
        assert res.status_code == 200

    def test_health_is_open(self, client, auth_on):
        assert client.get("/api/v1/health/ready").status_code == 200

    def test_writes_must_be_json(self, client, development):
        res = client.patch(
            f"/api/v1/developments/{development.id}/design",
            data="design_url=x", content_type="application/x-www-form-urlencoded",
        )
        assert res.status_code == 415


class TestMiddleware:
    def test_live_probe_checks_database(self, client):
        res = client.get("/api/v1/health/live")
        assert res.status_code == 200
        assert res.get_json()["checks"]["database"]["status"] == "ok"

    def test_request_id_is_propagated(self, client):
        res = client.get("/api/v1/developments", headers={"X-Request-ID": "abc123"})
        assert res.headers["X-Request-ID"] == "abc123"
        assert "X-Request-Duration-Ms" in res.headers

    def test_unknown_route_is_json(self, client):
        res = client.get("/api/v1/nowhere")
        assert res.status_code == 404
        assert res.get_json()["error"] == "Not found"

    def test_rate_limit_storage_comes_from_config(self, app):
        assert app.config["RATELIMIT_STORAGE_URI"] == "memory://"
        assert "REDIS_URL" not in app.config
