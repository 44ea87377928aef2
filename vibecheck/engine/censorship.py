"""
Censorship Flag — Read and toggle the one boolean that gates votes.

The flag lives in the settings store under ``censor_bad_vibes``.
Reads on the vote path fail open; the toggle is guarded by a single
shared secret and nothing else (no sessions, no lockout, no audit).
"""

from __future__ import annotations

import hmac
import logging
from typing import Any, Optional

from ..models.vibes import CENSOR_SETTING_KEY, ToggleResult
from ..store.base import Backend
from ..validation import (
    AuthorizationError,
    BackendError,
    ConfigurationError,
    validate_new_state,
)

logger = logging.getLogger(__name__)

SUPPRESSED_LABEL = "Bad Vibes"


def is_suppressed(vibe_name: str) -> bool:
    """True if a vote for this name is dropped while censorship is on."""
    return SUPPRESSED_LABEL in vibe_name


def read_censorship(backend: Backend, key: str = CENSOR_SETTING_KEY) -> bool:
    """
    Current flag value. An absent row reads as False.

    Raises:
        BackendError: If the settings store cannot be read
    """
    setting = backend.get_setting(key)
    return setting.value if setting is not None else False


def censorship_active(backend: Backend, key: str = CENSOR_SETTING_KEY) -> bool:
    """Flag value for the vote path: read failures count as "off"."""
    try:
        return read_censorship(backend, key)
    except BackendError as e:
        logger.error(
            f"Error fetching censorship setting for vote: {e.message}",
            extra={"setting_key": key},
        )
        return False


def check_admin_password(password: Any, admin_password: Optional[str]) -> None:
    """
    Compare the submitted secret with the configured one.

    Raises:
        ConfigurationError: No admin password configured
        AuthorizationError: Mismatch
    """
    if not admin_password:
        logger.error("ADMIN_PASSWORD is not set in environment variables!")
        raise ConfigurationError("Server configuration error: ADMIN_PASSWORD missing.")

    if not isinstance(password, str) or not hmac.compare_digest(
        password.encode("utf-8"), admin_password.encode("utf-8")
    ):
        raise AuthorizationError("Unauthorized")


def toggle_censorship(
    backend: Backend,
    password: Any,
    new_state: Any,
    admin_password: Optional[str],
    key: str = CENSOR_SETTING_KEY,
) -> ToggleResult:
    """
    Overwrite the censorship flag.

    Checks run in order: server config, secret, then payload shape, so a
    caller without the secret learns nothing about the payload.

    Raises:
        ConfigurationError: No admin password configured
        AuthorizationError: Wrong secret
        ValidationError: ``new_state`` is not a bool
        BackendError: The write failed or the row is missing
    """
    check_admin_password(password, admin_password)
    value = validate_new_state(new_state)

    setting = backend.set_setting(key, value)
    logger.warning(
        f"Censorship is now {'ON' if setting.value else 'OFF'}",
        extra={"setting_key": key},
    )
    return ToggleResult(new_state=setting.value)
