"""
Health Check — System health status for monitoring.

Provides a structured health check with component status.

## Usage

    from vibecheck.observability.health import HealthChecker
    
    checker = HealthChecker(backend, config)
    status = checker.check()
    
    if status.healthy:
        print("All systems operational")
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from ..config.loader import AppConfig
from ..config.validator import ConfigValidator
from ..store.base import Backend
from ..validation import BackendError

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    """Health status levels."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    """Health status of a single component."""
    
    name: str
    status: HealthStatus
    message: str = ""
    latency_ms: Optional[float] = None
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass 
class SystemHealth:
    """Overall system health status."""
    
    status: HealthStatus
    timestamp: str
    uptime_seconds: float
    components: List[ComponentHealth]
    
    @property
    def healthy(self) -> bool:
        return self.status == HealthStatus.HEALTHY
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "timestamp": self.timestamp,
            "uptime_seconds": self.uptime_seconds,
            "healthy": self.healthy,
            "components": [
                {
                    "name": c.name,
                    "status": c.status.value,
                    "message": c.message,
                    "latency_ms": c.latency_ms,
                    "details": c.details,
                }
                for c in self.components
            ],
        }


class HealthChecker:
    """
    System health checker.
    
    Checks all components and provides aggregate status.
    """
    
    def __init__(self, backend: Backend, config: AppConfig):
        self.backend = backend
        self.config = config
        self._start_time = time.time()
    
    def check(self) -> SystemHealth:
        """Run all health checks and return status."""
        components = [
            self._check_ledger(),
            self._check_settings(),
            self._check_config(),
        ]
        
        statuses = [c.status for c in components]
        if HealthStatus.UNHEALTHY in statuses:
            overall = HealthStatus.UNHEALTHY
        elif HealthStatus.DEGRADED in statuses:
            overall = HealthStatus.DEGRADED
        else:
            overall = HealthStatus.HEALTHY
        
        return SystemHealth(
            status=overall,
            timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            uptime_seconds=time.time() - self._start_time,
            components=components,
        )
    
    def _check_ledger(self) -> ComponentHealth:
        """Check the vote ledger can be read."""
        start = time.time()
        
        try:
            vibes = self.backend.list_vibes()
        except BackendError as e:
            return ComponentHealth(
                name="ledger",
                status=HealthStatus.UNHEALTHY,
                message=f"Failed to read vibes: {e.message}",
            )
        
        latency = (time.time() - start) * 1000
        
        if not vibes:
            return ComponentHealth(
                name="ledger",
                status=HealthStatus.DEGRADED,
                message="Ledger has no vibe options (not seeded?)",
                latency_ms=latency,
                details={"backend": self.backend.name},
            )
        
        return ComponentHealth(
            name="ledger",
            status=HealthStatus.HEALTHY,
            message=f"{len(vibes)} vibe options",
            latency_ms=latency,
            details={
                "backend": self.backend.name,
                "total_votes": sum(v.count for v in vibes),
            },
        )
    
    def _check_settings(self) -> ComponentHealth:
        """Check the censorship flag can be read."""
        from ..engine.censorship import read_censorship
        
        start = time.time()
        
        try:
            active = read_censorship(self.backend)
        except BackendError as e:
            # Votes still go through (fail open), so not fatal
            return ComponentHealth(
                name="settings",
                status=HealthStatus.DEGRADED,
                message=f"Failed to read censorship flag: {e.message}",
            )
        
        return ComponentHealth(
            name="settings",
            status=HealthStatus.HEALTHY,
            message=f"Censorship {'active' if active else 'inactive'}",
            latency_ms=(time.time() - start) * 1000,
            details={"censor_bad_vibes": active},
        )
    
    def _check_config(self) -> ComponentHealth:
        """Check configuration completeness."""
        results = ConfigValidator(self.config).validate_all()
        missing = [var for status in results.values() for var in status.missing]
        unconfigured = [name for name, status in results.items() if not status.configured]
        
        if unconfigured:
            return ComponentHealth(
                name="config",
                status=HealthStatus.DEGRADED,
                message=f"Not configured: {', '.join(unconfigured)}",
                details={"missing": missing},
            )
        
        return ComponentHealth(
            name="config",
            status=HealthStatus.HEALTHY,
            message="Configuration complete",
            details={"backend": self.config.backend_name},
        )
