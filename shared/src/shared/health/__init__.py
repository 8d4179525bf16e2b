"""Liveness and readiness probe types."""

from shared.health.checks import HealthCheck, HealthChecker, HealthReport, HealthStatus

__all__ = ["HealthCheck", "HealthChecker", "HealthReport", "HealthStatus"]
