"""
Backend Registry — Build the configured backend.
"""

from __future__ import annotations

import logging

from ..config.loader import AppConfig
from ..validation import ConfigurationError
from .base import Backend

logger = logging.getLogger(__name__)


def create_backend(config: AppConfig) -> Backend:
    """
    Construct the backend named by ``config.backend``.

    Raises:
        ConfigurationError: Unknown backend name or missing REST settings
    """
    name = config.backend_name

    if name == "file":
        from .file_store import FileBackend
        backend = FileBackend(config.data_path, poll_interval=config.poll_seconds)
        logger.info(f"Using file backend at {config.data_path}")
        return backend

    if name == "rest":
        from .rest_api import RestBackend
        backend = RestBackend(
            url=config.supabase_url or "",
            anon_key=config.supabase_anon_key or "",
            service_key=config.supabase_service_role_key,
            timeout=config.timeout_seconds,
            poll_interval=config.poll_seconds,
        )
        logger.info(f"Using REST backend at {backend.url}")
        return backend

    raise ConfigurationError(f"Unknown backend: {name}")
