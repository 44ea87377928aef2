"""
Tests for the health checker.
"""

from vibecheck.config.loader import AppConfig
from vibecheck.observability.health import HealthChecker, HealthStatus
from vibecheck.store.file_store import FileBackend
from vibecheck.validation import BackendError


def component(result, name):
    return next(c for c in result.components if c.name == name)


class TestHealthChecker:

    def test_healthy(self, backend, config):
        result = HealthChecker(backend, config).check()

        assert result.status == HealthStatus.HEALTHY
        assert result.healthy
        assert component(result, "ledger").details["total_votes"] == 0
        assert component(result, "settings").details == {"censor_bad_vibes": False}

    def test_unseeded_store_unhealthy(self, data_file, config):
        result = HealthChecker(FileBackend(data_file), config).check()

        assert result.status == HealthStatus.UNHEALTHY
        assert "Data file not found" in component(result, "ledger").message

    def test_empty_ledger_degraded(self, backend, config):
        data = backend._read()
        data["vibe_counts"] = []
        backend._write(data)

        result = HealthChecker(backend, config).check()

        assert result.status == HealthStatus.DEGRADED
        assert component(result, "ledger").status == HealthStatus.DEGRADED

    def test_settings_failure_degraded(self, backend, config, monkeypatch):
        def broken(key):
            raise BackendError("down")

        monkeypatch.setattr(backend, "get_setting", broken)
        result = HealthChecker(backend, config).check()

        assert result.status == HealthStatus.DEGRADED
        assert component(result, "settings").status == HealthStatus.DEGRADED

    def test_missing_password_degraded(self, backend, data_file):
        result = HealthChecker(backend, AppConfig(data_file=str(data_file))).check()

        assert result.status == HealthStatus.DEGRADED
        assert component(result, "config").details["missing"] == ["ADMIN_PASSWORD"]

    def test_to_dict(self, backend, config):
        data = HealthChecker(backend, config).check().to_dict()

        assert data["status"] == "healthy"
        assert data["healthy"] is True
        assert data["timestamp"].endswith("Z")
        assert [c["name"] for c in data["components"]] == ["ledger", "settings", "config"]
