"""
Configuration Validator — Check admin and backend configuration.

Validates a loaded AppConfig before the server takes traffic, and
explains what is missing.

## Usage

    from vibecheck.config.loader import load_config
    from vibecheck.config.validator import ConfigValidator

    validator = ConfigValidator(load_config())
    for name, result in validator.validate_all().items():
        if not result.configured:
            print(f"{name}: Missing {result.missing}")
            print(f"  → {result.guidance}")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .loader import ENV_VARS, AppConfig

logger = logging.getLogger(__name__)

BACKENDS = ("file", "rest")


@dataclass
class ConfigStatus:
    """Status of a configuration check."""
    
    concern: str
    configured: bool
    missing: List[str] = field(default_factory=list)
    present: List[str] = field(default_factory=list)
    guidance: Optional[str] = None
    mode: str = "unknown"
    
    def to_dict(self) -> Dict:
        """Convert to dictionary for logging."""
        return {
            "concern": self.concern,
            "configured": self.configured,
            "mode": self.mode,
            "missing": self.missing,
            "guidance": self.guidance,
        }


# Backend configuration requirements, by AppConfig field
BACKEND_REQUIREMENTS = {
    "file": {
        "required": [],
        "optional": ["data_file", "poll_interval"],
        "guidance": "Run `vibecheck seed` to create the local data file",
    },
    "rest": {
        "required": ["supabase_url", "supabase_anon_key", "supabase_service_role_key"],
        "optional": ["request_timeout", "poll_interval"],
        "guidance": "Copy the project URL and API keys from your database dashboard; "
                    "apply sql/schema.sql first",
    },
}


class ConfigValidator:
    """Validate an AppConfig and provide guidance for missing values."""
    
    def __init__(self, config: AppConfig):
        self.config = config
    
    def _split(self, fields: List[str]) -> tuple:
        present = [ENV_VARS[f] for f in fields if getattr(self.config, f) not in (None, "")]
        missing = [ENV_VARS[f] for f in fields if getattr(self.config, f) in (None, "")]
        return present, missing
    
    def validate_admin(self) -> ConfigStatus:
        """The toggle endpoint answers 500 until a password is set."""
        if self.config.has_admin_password():
            return ConfigStatus(
                concern="admin",
                configured=True,
                present=["ADMIN_PASSWORD"],
                mode="enabled",
            )
        return ConfigStatus(
            concern="admin",
            configured=False,
            missing=["ADMIN_PASSWORD"],
            mode="disabled",
            guidance="Set ADMIN_PASSWORD to enable the censorship toggle",
        )
    
    def validate_backend(self) -> ConfigStatus:
        name = self.config.backend_name
        if name not in BACKEND_REQUIREMENTS:
            return ConfigStatus(
                concern="backend",
                configured=False,
                mode=name,
                guidance=f"Unknown backend: {name} (expected one of {', '.join(BACKENDS)})",
            )
        
        reqs = BACKEND_REQUIREMENTS[name]
        present, missing = self._split(reqs["required"])
        optional_present, _ = self._split(reqs["optional"])
        
        return ConfigStatus(
            concern="backend",
            configured=not missing,
            missing=missing,
            present=present + optional_present,
            mode=name,
            guidance=reqs["guidance"] if missing else None,
        )
    
    def validate_all(self) -> Dict[str, ConfigStatus]:
        """
        Validate every concern.
        
        Returns:
            Dictionary mapping concern name to ConfigStatus
        """
        return {
            "admin": self.validate_admin(),
            "backend": self.validate_backend(),
        }
    
    def log_status(self) -> bool:
        """Log configuration status; returns True if fully configured."""
        ok = True
        for name, status in self.validate_all().items():
            if status.configured:
                logger.info(f"✓ {name}: configured ({status.mode})")
            else:
                ok = False
                logger.warning(
                    f"✗ {name}: missing {', '.join(status.missing) or 'valid value'}"
                    + (f" → {status.guidance}" if status.guidance else "")
                )
        return ok
