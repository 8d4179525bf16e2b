"""
Probe result types shared by every service.

A service runs a set of named checks, each producing a HealthCheck, and
folds them into one HealthReport whose status is the most severe one.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Protocol


class HealthStatus(str, Enum):
    """Probe outcome, from best to worst."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"

    @classmethod
    def worst(cls, statuses: Iterable["HealthStatus"]) -> "HealthStatus":
        """Most severe status in statuses (HEALTHY if empty)."""
        order = [cls.HEALTHY, cls.DEGRADED, cls.UNHEALTHY]
        return max(statuses, key=order.index, default=cls.HEALTHY)


@dataclass
class HealthCheck:
    """Outcome of one named check."""

    name: str
    status: HealthStatus
    message: Optional[str] = None
    duration: Optional[float] = None
    timestamp: Optional[datetime] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize, leaving out fields that were never filled in."""
        body: Dict[str, Any] = {"name": self.name, "status": self.status.value}
        optional = {
            "message": self.message,
            "duration": self.duration,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "metadata": self.metadata or None,
        }
        body.update(
            {key: value for key, value in optional.items() if value is not None}
        )
        return body


@dataclass
class HealthReport:
    """All checks of one probe plus their combined status."""

    status: HealthStatus
    checks: Dict[str, HealthCheck]
    version: str
    timestamp: datetime

    @classmethod
    def from_checks(
        cls, checks: Dict[str, HealthCheck], version: str
    ) -> "HealthReport":
        """Build a report whose status is the worst of its checks."""
        return cls(
            status=HealthStatus.worst(check.status for check in checks.values()),
            checks=checks,
            version=version,
            timestamp=datetime.utcnow(),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Probe response body."""
        checks = {}
        for name, check in self.checks.items():
            entry: Dict[str, Any] = {
                "status": check.status.value,
                "message": check.message,
                "duration": check.duration,
            }
            if check.metadata:
                entry["metadata"] = check.metadata
            checks[name] = entry

        return {
            "status": self.status.value,
            "timestamp": self.timestamp.isoformat(),
            "version": self.version,
            "checks": checks,
        }

    @property
    def is_healthy(self) -> bool:
        return self.status == HealthStatus.HEALTHY

    @property
    def is_ready(self) -> bool:
        """Degraded still takes traffic; only unhealthy does not."""
        return self.status != HealthStatus.UNHEALTHY


class HealthChecker(Protocol):
    """What a service exposes to the probe routes."""

    def check_liveness(self) -> HealthReport:
        """Is the process alive? Failing means restart it."""
        ...

    def check_readiness(self) -> HealthReport:
        """Can it take new work right now?"""
        ...
