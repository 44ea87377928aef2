"""
Tests for reading and toggling the censorship flag.
"""

import pytest

from vibecheck.engine.censorship import (
    check_admin_password,
    is_suppressed,
    read_censorship,
    toggle_censorship,
)
from vibecheck.validation import (
    AuthorizationError,
    BackendError,
    ConfigurationError,
    ValidationError,
)


def flag(backend) -> bool:
    return backend.get_setting("censor_bad_vibes").value


class TestIsSuppressed:

    @pytest.mark.parametrize("name, expected", [
        ("Bad Vibes", True),
        ("Bad Vibes 👎", True),
        ("Really Bad Vibes", True),
        ("Good Vibes", False),
        ("bad vibes", False),
    ])
    def test_substring(self, name, expected):
        assert is_suppressed(name) is expected


class TestAdminPassword:

    def test_missing_config(self):
        with pytest.raises(ConfigurationError, match="ADMIN_PASSWORD missing"):
            check_admin_password("anything", None)

    def test_empty_config_counts_as_missing(self):
        with pytest.raises(ConfigurationError):
            check_admin_password("", "")

    def test_mismatch(self):
        with pytest.raises(AuthorizationError):
            check_admin_password("wrong", "right")

    def test_non_string_password(self):
        with pytest.raises(AuthorizationError):
            check_admin_password(None, "right")

    def test_match(self):
        check_admin_password("right", "right")


class TestToggleCensorship:

    def test_enable(self, backend, admin_password):
        result = toggle_censorship(backend, admin_password, True, admin_password)
        assert result.new_state is True
        assert flag(backend) is True
        assert result.to_response() == {"success": True, "newState": True}

    def test_disable(self, censor_on, admin_password):
        result = toggle_censorship(censor_on, admin_password, False, admin_password)
        assert result.new_state is False
        assert flag(censor_on) is False

    def test_idempotent(self, backend, admin_password):
        toggle_censorship(backend, admin_password, True, admin_password)
        result = toggle_censorship(backend, admin_password, True, admin_password)
        assert result.new_state is True
        assert flag(backend) is True

    def test_wrong_password_leaves_setting(self, backend, admin_password):
        with pytest.raises(AuthorizationError):
            toggle_censorship(backend, "nope", True, admin_password)
        assert flag(backend) is False

    @pytest.mark.parametrize("bad_state", ["true", 1, 0, None, [], {}])
    def test_non_boolean_rejected(self, backend, admin_password, bad_state):
        with pytest.raises(ValidationError, match="Invalid newState"):
            toggle_censorship(backend, admin_password, bad_state, admin_password)
        assert flag(backend) is False

    def test_secret_checked_before_payload(self, backend, admin_password):
        with pytest.raises(AuthorizationError):
            toggle_censorship(backend, "nope", "not-a-bool", admin_password)

    def test_missing_row_is_error(self, backend, admin_password):
        data = backend._read()
        data["app_settings"] = []
        backend._write(data)

        with pytest.raises(BackendError, match="Setting not found"):
            toggle_censorship(backend, admin_password, True, admin_password)
        assert backend.get_setting("censor_bad_vibes") is None


class TestReadCensorship:

    def test_default_off(self, backend):
        assert read_censorship(backend) is False

    def test_reads_on(self, censor_on):
        assert read_censorship(censor_on) is True

    def test_absent_row(self, backend):
        assert read_censorship(backend, key="no_such_key") is False

    def test_failure_propagates(self, backend, monkeypatch):
        def broken(key):
            raise BackendError("down")

        monkeypatch.setattr(backend, "get_setting", broken)
        with pytest.raises(BackendError):
            read_censorship(backend)
