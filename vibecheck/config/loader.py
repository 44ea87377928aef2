"""
Config Loader — Load configuration from a master key or individual env vars.

Supports two modes:
1. Master JSON key: Single VIBECHECK_CONFIG env var with all settings
2. Individual keys: Separate env vars for each setting (fallback)

## Usage

    # Option 1: Master config (one deployment secret)
    export VIBECHECK_CONFIG='{"admin_password": "hunter2", "backend": "rest", ...}'
    
    # Option 2: Individual keys
    export ADMIN_PASSWORD="hunter2"
    export VIBECHECK_BACKEND="rest"
    export SUPABASE_URL="https://xyz.supabase.co"

The loader tries master config first, then fills gaps from individual keys.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = "data/vibes.json"

# field name -> environment variable
ENV_VARS = {
    "admin_password": "ADMIN_PASSWORD",
    "backend": "VIBECHECK_BACKEND",
    "data_file": "VIBECHECK_DATA_FILE",
    "supabase_url": "SUPABASE_URL",
    "supabase_anon_key": "SUPABASE_ANON_KEY",
    "supabase_service_role_key": "SUPABASE_SERVICE_ROLE_KEY",
    "request_timeout": "VIBECHECK_TIMEOUT",
    "poll_interval": "VIBECHECK_POLL_SECONDS",
}


@dataclass
class AppConfig:
    """All runtime configuration in one place."""
    
    # Admin toggle secret
    admin_password: Optional[str] = None
    
    # Backend selection: "file" or "rest"
    backend: Optional[str] = None
    
    # File backend
    data_file: Optional[str] = None
    
    # REST backend
    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None
    supabase_service_role_key: Optional[str] = None
    request_timeout: Optional[float] = None
    poll_interval: Optional[float] = None
    
    @property
    def backend_name(self) -> str:
        return (self.backend or "file").strip().lower()
    
    @property
    def data_path(self) -> Path:
        return Path(self.data_file or DEFAULT_DATA_FILE)
    
    @property
    def timeout_seconds(self) -> float:
        return float(self.request_timeout or 10)
    
    @property
    def poll_seconds(self) -> float:
        return float(self.poll_interval or 2)
    
    def has_admin_password(self) -> bool:
        return bool(self.admin_password)


def load_config() -> AppConfig:
    """
    Load configuration from master key or individual env vars.
    
    Priority:
    1. VIBECHECK_CONFIG (master JSON)
    2. Individual environment variables
    
    Returns:
        AppConfig with all available settings
    """
    config = AppConfig()
    
    master_config = os.environ.get("VIBECHECK_CONFIG")
    if master_config:
        try:
            data = json.loads(master_config)
            config = _parse_master_config(data)
            logger.info("Loaded configuration from VIBECHECK_CONFIG")
        except json.JSONDecodeError as e:
            logger.error(f"Invalid VIBECHECK_CONFIG JSON: {e}")
        except Exception as e:
            logger.error(f"Failed to parse VIBECHECK_CONFIG: {e}")
    
    return _load_individual_vars(config)


def _parse_master_config(data: Dict[str, Any]) -> AppConfig:
    """Parse master config JSON; accepts field names or env var names."""
    if not isinstance(data, dict):
        raise ValueError("VIBECHECK_CONFIG must be a JSON object")
    values = {
        field_name: data.get(field_name) or data.get(env_name)
        for field_name, env_name in ENV_VARS.items()
    }
    return AppConfig(**values)


def _as_float(raw: Optional[str], env_name: str) -> Optional[float]:
    if raw in (None, ""):
        return None
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {env_name}={raw!r}")
        return None


def _load_individual_vars(existing: AppConfig) -> AppConfig:
    """Load from individual env vars, filling in missing values."""
    env = os.environ.get
    return AppConfig(
        admin_password=existing.admin_password or env("ADMIN_PASSWORD"),
        backend=existing.backend or env("VIBECHECK_BACKEND"),
        data_file=existing.data_file or env("VIBECHECK_DATA_FILE"),
        supabase_url=existing.supabase_url or env("SUPABASE_URL"),
        supabase_anon_key=existing.supabase_anon_key or env("SUPABASE_ANON_KEY"),
        supabase_service_role_key=(
            existing.supabase_service_role_key or env("SUPABASE_SERVICE_ROLE_KEY")
        ),
        request_timeout=(
            existing.request_timeout or _as_float(env("VIBECHECK_TIMEOUT"), "VIBECHECK_TIMEOUT")
        ),
        poll_interval=(
            existing.poll_interval
            or _as_float(env("VIBECHECK_POLL_SECONDS"), "VIBECHECK_POLL_SECONDS")
        ),
    )


def generate_master_config_template() -> str:
    """Generate a template for VIBECHECK_CONFIG."""
    template = {
        "admin_password": "change-me",
        "backend": "rest",
        "supabase_url": "https://your-project.supabase.co",
        "supabase_anon_key": "eyJhbGciOi...",
        "supabase_service_role_key": "eyJhbGciOi...",
        "request_timeout": 10,
        "poll_interval": 2,
    }
    return json.dumps(template, indent=2)
