"""
Tests for the censorship endpoints, pages and health.
"""

import pytest

from vibecheck.validation import BackendError


def toggle(client, **body):
    return client.post("/api/admin/toggle-censorship", json=body)


def flag(backend):
    return backend.get_setting("censor_bad_vibes").value


class TestToggle:

    def test_enable(self, client, backend, admin_password):
        resp = toggle(client, password=admin_password, newState=True)

        assert resp.status_code == 200
        assert resp.get_json() == {"success": True, "newState": True}
        assert flag(backend) is True

    def test_disable(self, client, censor_on, admin_password):
        resp = toggle(client, password=admin_password, newState=False)
        assert resp.get_json() == {"success": True, "newState": False}
        assert flag(censor_on) is False

    def test_idempotent(self, client, backend, admin_password):
        toggle(client, password=admin_password, newState=True)
        resp = toggle(client, password=admin_password, newState=True)
        assert resp.status_code == 200
        assert flag(backend) is True

    def test_wrong_password(self, client, backend):
        resp = toggle(client, password="guess", newState=True)

        assert resp.status_code == 401
        assert resp.get_json() == {"error": "Unauthorized"}
        assert flag(backend) is False

    def test_missing_password(self, client, backend):
        resp = toggle(client, newState=True)
        assert resp.status_code == 401

    def test_password_checked_before_state(self, client):
        resp = toggle(client, password="guess", newState="yes")
        assert resp.status_code == 401

    @pytest.mark.parametrize("state", ["true", 1, None])
    def test_invalid_state(self, client, backend, admin_password, state):
        resp = toggle(client, password=admin_password, newState=state)

        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Invalid newState provided"}
        assert flag(backend) is False

    def test_missing_state(self, client, admin_password):
        resp = toggle(client, password=admin_password)
        assert resp.status_code == 400

    def test_server_without_password(self, client, app, backend):
        app.config["VIBECHECK"].admin_password = None

        resp = toggle(client, password="anything", newState=True)

        assert resp.status_code == 500
        assert resp.get_json() == {"error": "Server configuration error: ADMIN_PASSWORD missing."}
        assert flag(backend) is False

    @pytest.mark.parametrize("payload", ["[]", '"text"', "not json"])
    def test_invalid_body(self, client, payload):
        resp = client.post(
            "/api/admin/toggle-censorship",
            data=payload,
            content_type="application/json",
        )
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Invalid JSON body"}

    def test_write_failure(self, client, backend, admin_password, monkeypatch):
        def broken(key, value):
            raise BackendError("read-only")

        monkeypatch.setattr(backend, "set_setting", broken)
        resp = toggle(client, password=admin_password, newState=True)

        assert resp.status_code == 500
        assert resp.get_json() == {"error": "read-only"}


class TestCensorshipState:

    def test_off(self, client):
        resp = client.get("/api/settings/censorship")
        assert resp.get_json() == {"key": "censor_bad_vibes", "value": False}

    def test_on(self, client, censor_on):
        assert client.get("/api/settings/censorship").get_json()["value"] is True

    def test_failure(self, client, data_file):
        data_file.unlink()
        assert client.get("/api/settings/censorship").status_code == 500


class TestPages:

    def test_index(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert b"EventSource" in resp.data
        resp.close()

    def test_admin(self, client):
        resp = client.get("/admin")
        assert resp.status_code == 200
        assert b"toggle-censorship" in resp.data
        resp.close()

    def test_unknown_api_path_is_json(self, client):
        resp = client.get("/api/nope")
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Not found"}


class TestHealth:

    def test_healthy(self, client, backend):
        backend.increment_vibe("Good Vibes")
        resp = client.get("/api/health")

        assert resp.status_code == 200
        data = resp.get_json()
        assert data["status"] in ("healthy", "degraded")
        assert {c["name"] for c in data["components"]} == {"ledger", "settings", "config"}

    def test_unhealthy_when_ledger_unreadable(self, client, data_file):
        data_file.unlink()
        resp = client.get("/api/health")

        assert resp.status_code == 503
        assert resp.get_json()["status"] == "unhealthy"
