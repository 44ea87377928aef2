"""
Tests for request validators and error types.
"""

import pytest

from vibecheck.validation import (
    BackendError,
    UnknownVibeError,
    ValidationError,
    require_json_object,
    validate_new_state,
    validate_vibe_name,
)


class TestVibeName:

    def test_valid(self):
        assert validate_vibe_name({"vibeName": "Good Vibes"}) == "Good Vibes"

    def test_not_trimmed(self):
        assert validate_vibe_name({"vibeName": " Good Vibes "}) == " Good Vibes "

    @pytest.mark.parametrize("data", [None, [], {}, {"vibeName": ""}, {"vibeName": 1}, {"name": "x"}])
    def test_invalid(self, data):
        with pytest.raises(ValidationError) as exc:
            validate_vibe_name(data)
        assert exc.value.message == "Vibe name is required"
        assert exc.value.field == "vibeName"


class TestNewState:

    @pytest.mark.parametrize("value", [True, False])
    def test_booleans(self, value):
        assert validate_new_state(value) is value

    @pytest.mark.parametrize("value", ["false", 0, 1, None, 1.0])
    def test_rejects_lookalikes(self, value):
        with pytest.raises(ValidationError, match="Invalid newState provided"):
            validate_new_state(value)


class TestJsonObject:

    def test_object(self):
        assert require_json_object({"a": 1}) == {"a": 1}

    @pytest.mark.parametrize("data", [None, [], "x", 3])
    def test_other(self, data):
        with pytest.raises(ValidationError, match="Invalid JSON body"):
            require_json_object(data)


class TestErrors:

    def test_unknown_vibe_is_backend_error(self):
        error = UnknownVibeError("Spicy")
        assert isinstance(error, BackendError)
        assert error.message == "Unknown vibe: Spicy"
        assert error.status_code == 404
        assert error.vibe_name == "Spicy"

    def test_field_in_str(self):
        assert str(ValidationError("bad", field="x")) == "x: bad"
