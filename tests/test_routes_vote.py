"""
Tests for the voting API and live tally stream.
"""

import json

import pytest

from vibecheck.engine.vibe import CHILL, NO_VOTES
from vibecheck.validation import BackendError


def post_vote(client, body):
    return client.post("/api/vote", json=body)


class TestVote:

    def test_counts_vote(self, client, counts):
        resp = post_vote(client, {"vibeName": "Good Vibes"})

        assert resp.status_code == 200
        data = resp.get_json()
        assert data["success"] is True
        assert data["data"]["name"] == "Good Vibes"
        assert data["data"]["count"] == 1
        assert counts()["Good Vibes"] == 1

    def test_bad_vibe_counted_when_censorship_off(self, client, counts):
        resp = post_vote(client, {"vibeName": "Bad Vibes"})
        assert resp.status_code == 200
        assert counts()["Bad Vibes"] == 1

    @pytest.mark.parametrize("body", [{}, {"vibeName": ""}, {"vibeName": None}, {"vibeName": 3}, []])
    def test_missing_name(self, client, body, counts):
        resp = post_vote(client, body)
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Vibe name is required"}
        assert sum(counts().values()) == 0

    def test_non_json_body(self, client):
        resp = client.post("/api/vote", data="vibeName=Good", content_type="text/plain")
        assert resp.status_code == 400

    def test_unknown_vibe(self, client, counts):
        resp = post_vote(client, {"vibeName": "Spicy Vibes"})
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Unknown vibe: Spicy Vibes"}
        assert sum(counts().values()) == 0

    def test_name_is_exact(self, client):
        resp = post_vote(client, {"vibeName": "good vibes"})
        assert resp.status_code == 404

    def test_storage_failure(self, client, backend, monkeypatch):
        def broken(name):
            raise BackendError("disk full")

        monkeypatch.setattr(backend, "increment_vibe", broken)
        resp = post_vote(client, {"vibeName": "Good Vibes"})

        assert resp.status_code == 500
        assert resp.get_json() == {"error": "disk full"}

    def test_get_not_allowed(self, client):
        resp = client.get("/api/vote")
        assert resp.status_code == 405
        assert "error" in resp.get_json()


class TestCensoredVote:

    def test_bad_vibe_dropped(self, client, censor_on, counts):
        resp = post_vote(client, {"vibeName": "Bad Vibes"})

        assert resp.status_code == 200
        assert resp.get_json() == {
            "message": "Vote received, but action modified due to policy.",
            "censored": True,
        }
        assert counts()["Bad Vibes"] == 0

    def test_other_vibes_still_counted(self, client, censor_on, counts):
        resp = post_vote(client, {"vibeName": "Neutral Vibes"})
        assert resp.get_json()["success"] is True
        assert counts()["Neutral Vibes"] == 1

    def test_unknown_suppressed_name_is_still_censored(self, client, censor_on):
        resp = post_vote(client, {"vibeName": "Extra Bad Vibes"})
        assert resp.status_code == 200
        assert resp.get_json()["censored"] is True


class TestMalformedCensorshipRow:

    def test_vote_still_counted(self, client, backend, counts):
        data = backend._read()
        data["app_settings"] = [{"key": "censor_bad_vibes", "value": "maybe"}]
        backend._write(data)

        resp = post_vote(client, {"vibeName": "Good Vibes"})

        assert resp.status_code == 200
        assert resp.get_json()["success"] is True
        assert counts()["Good Vibes"] == 1

    def test_censorship_read_reports_error(self, client, backend):
        data = backend._read()
        data["app_settings"] = [{"key": "censor_bad_vibes", "value": None}]
        backend._write(data)

        resp = client.get("/api/settings/censorship")

        assert resp.status_code == 500
        assert "Malformed app_settings row" in resp.get_json()["error"]


class TestVibes:

    def test_snapshot(self, client, backend):
        backend.increment_vibe("Good Vibes")
        backend.increment_vibe("Neutral Vibes")

        resp = client.get("/api/vibes")

        assert resp.status_code == 200
        data = resp.get_json()
        assert data["state"] == "ready"
        assert [v["name"] for v in data["vibes"]] == ["Bad Vibes", "Good Vibes", "Neutral Vibes"]
        assert data["overall"] == CHILL
        assert data["total_votes"] == 2

    def test_read_failure(self, client, data_file):
        data_file.unlink()
        resp = client.get("/api/vibes")
        assert resp.status_code == 500
        assert "Data file not found" in resp.get_json()["error"]


def read_event(chunks) -> dict:
    """Next data event from an SSE body, skipping keepalives."""
    for chunk in chunks:
        text = chunk.decode("utf-8") if isinstance(chunk, bytes) else chunk
        if text.startswith("data: "):
            return json.loads(text[len("data: "):])
    raise AssertionError("stream ended")


class TestVibesStream:

    def test_initial_snapshot_then_updates(self, client, backend):
        resp = client.get("/api/vibes/stream", buffered=False)
        assert resp.status_code == 200
        assert resp.mimetype == "text/event-stream"
        chunks = iter(resp.response)

        first = read_event(chunks)
        assert first["state"] == "ready"
        assert first["overall"] == NO_VOTES

        backend.increment_vibe("Good Vibes")
        second = read_event(chunks)
        assert second["total_votes"] == 1

        resp.close()
        assert backend._feed.listener_count() == 0

    def test_keepalive_when_idle(self, client):
        resp = client.get("/api/vibes/stream", buffered=False)
        chunks = iter(resp.response)
        read_event(chunks)

        assert next(chunks) == b": keepalive\n\n"
        resp.close()

    def test_loading_when_ledger_unreadable(self, client, data_file):
        data_file.unlink()
        resp = client.get("/api/vibes/stream", buffered=False)

        first = read_event(iter(resp.response))

        assert first["state"] == "loading"
        assert first["overall"] == "Checking the vibes..."
        resp.close()
