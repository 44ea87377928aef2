"""
Validation — Input validation and error types.

Provides the exception taxonomy shared by the engine, the backends and
the HTTP routes, plus the request-body validators for the two mutating
endpoints.

## Usage

    from vibecheck.validation import validate_vibe_name, ValidationError

    try:
        name = validate_vibe_name(request.get_json(silent=True))
    except ValidationError as e:
        return jsonify({"error": e.message}), 400
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ValidationError(Exception):
    """Raised when request input fails validation."""
    
    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict] = None):
        self.message = message
        self.field = field
        self.details = details or {}
        super().__init__(self._format_message())
    
    def _format_message(self) -> str:
        if self.field:
            return f"{self.field}: {self.message}"
        return self.message


class ConfigurationError(Exception):
    """Raised when configuration is missing or invalid."""
    pass


class AuthorizationError(Exception):
    """Raised when the admin secret does not match."""
    pass


class BackendError(Exception):
    """Raised when the settings store or vote ledger fails."""
    
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class UnknownVibeError(BackendError):
    """Raised when a vote names a vibe that has no ledger row."""
    
    def __init__(self, vibe_name: str):
        self.vibe_name = vibe_name
        super().__init__(f"Unknown vibe: {vibe_name}", status_code=404)


def require_json_object(data: Any) -> Dict[str, Any]:
    """Validate that a request body decoded to a JSON object."""
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON body")
    return data


def validate_vibe_name(data: Any) -> str:
    """
    Validate a vote request body.
    
    Returns:
        The vibe name, unmodified
    
    Raises:
        ValidationError: If the name is missing, empty or not a string
    """
    vibe_name = data.get("vibeName") if isinstance(data, dict) else None
    
    if not isinstance(vibe_name, str) or not vibe_name:
        raise ValidationError("Vibe name is required", field="vibeName")
    
    return vibe_name


def validate_new_state(value: Any) -> bool:
    """
    Validate the desired censorship state.
    
    Only real JSON booleans pass; "true", 1 and null are rejected.
    """
    if not isinstance(value, bool):
        raise ValidationError(
            "Invalid newState provided",
            field="newState",
            details={"received_type": type(value).__name__},
        )
    return value
