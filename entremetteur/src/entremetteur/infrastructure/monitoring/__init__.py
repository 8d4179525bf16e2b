"""
Monitoring infrastructure: health checks and Prometheus metrics.
"""

from entremetteur.infrastructure.monitoring.health_checker import (
    EntremetteurHealthChecker,
)

__all__ = ["EntremetteurHealthChecker"]
