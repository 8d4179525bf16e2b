"""
Entremetteur Health Checker implementation.

Implements HealthChecker protocol from shared.health.
"""

import time
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from shared.health import HealthCheck, HealthChecker, HealthReport, HealthStatus

from entremetteur import __version__
from entremetteur.config.settings import Settings

if TYPE_CHECKING:
    from entremetteur.application.use_cases import SessionCoordinator
    from entremetteur.infrastructure.shutdown import ShutdownManager
    from entremetteur.infrastructure.websocket import ConnectionManager


class EntremetteurHealthChecker(HealthChecker):
    """
    Health checker for the matchmaking server.

    Checks:
    - Service liveness (basic check)
    - WebSocket connection capacity
    - Matchmaking state consistency
    - Shutdown state
    """

    def __init__(
        self,
        settings: Settings,
        connection_manager: Optional["ConnectionManager"] = None,
        coordinator: Optional["SessionCoordinator"] = None,
        shutdown_manager: Optional["ShutdownManager"] = None,
    ):
        self.settings = settings
        self.connection_manager = connection_manager
        self.coordinator = coordinator
        self.shutdown_manager = shutdown_manager

    def check_liveness(self) -> HealthReport:
        """
        Liveness probe - is the process alive?

        Does not look at dependencies.
        """
        checks = {
            "service": HealthCheck(
                name="entremetteur",
                status=HealthStatus.HEALTHY,
                message="Service is alive",
                timestamp=datetime.utcnow(),
            )
        }

        return HealthReport.from_checks(checks, __version__)

    def check_readiness(self) -> HealthReport:
        """
        Readiness probe - can the server take new sessions?

        Unhealthy while shutting down or when a component is missing.
        """
        checks = {}

        if self.connection_manager is None or self.coordinator is None:
            checks["components"] = HealthCheck(
                name="components",
                status=HealthStatus.UNHEALTHY,
                message="Connection manager or coordinator not initialized",
                timestamp=datetime.utcnow(),
            )
        else:
            checks["connection_capacity"] = self._check_connection_capacity()
            checks["matchmaking"] = self._check_matchmaking()

        if self.shutdown_manager is not None:
            checks["shutdown"] = self._check_shutdown()

        return HealthReport.from_checks(checks, __version__)

    def _check_connection_capacity(self) -> HealthCheck:
        """Check if WebSocket connection capacity is available."""
        start = time.time()
        total_connections = self.connection_manager.get_total_connections()
        max_connections = self.settings.max_total_connections

        metadata = {
            "total_connections": total_connections,
            "max_connections": max_connections if max_connections > 0 else None,
        }

        if max_connections <= 0:
            return HealthCheck(
                name="connection_capacity",
                status=HealthStatus.HEALTHY,
                message=f"Unlimited capacity ({total_connections} active)",
                duration=time.time() - start,
                timestamp=datetime.utcnow(),
                metadata=metadata,
            )

        capacity_pct = (total_connections / max_connections) * 100
        metadata["capacity_percent"] = round(capacity_pct, 1)

        if total_connections >= max_connections:
            status = HealthStatus.UNHEALTHY
            message = f"At capacity: {total_connections}/{max_connections}"
        elif capacity_pct >= 90:
            status = HealthStatus.DEGRADED
            message = (
                f"High capacity usage: {total_connections}/"
                f"{max_connections} ({capacity_pct:.1f}%)"
            )
        else:
            status = HealthStatus.HEALTHY
            message = (
                f"Capacity available: {total_connections}/"
                f"{max_connections} ({capacity_pct:.1f}%)"
            )

        return HealthCheck(
            name="connection_capacity",
            status=status,
            message=message,
            duration=time.time() - start,
            timestamp=datetime.utcnow(),
            metadata=metadata,
        )

    def _check_matchmaking(self) -> HealthCheck:
        """Check that every room has two members and nobody is double-booked."""
        start = time.time()
        waiting = len(self.coordinator.waiting_queue)
        rooms = self.coordinator.room_registry.room_count()
        paired = self.coordinator.room_registry.paired_connection_count()

        metadata = {"waiting": waiting, "active_rooms": rooms, "paired": paired}

        if paired != rooms * 2:
            return HealthCheck(
                name="matchmaking",
                status=HealthStatus.DEGRADED,
                message=f"Registry inconsistent: {paired} members in {rooms} rooms",
                duration=time.time() - start,
                timestamp=datetime.utcnow(),
                metadata=metadata,
            )

        return HealthCheck(
            name="matchmaking",
            status=HealthStatus.HEALTHY,
            message=f"{waiting} waiting, {rooms} active rooms",
            duration=time.time() - start,
            timestamp=datetime.utcnow(),
            metadata=metadata,
        )

    def _check_shutdown(self) -> HealthCheck:
        if self.shutdown_manager.is_shutting_down():
            return HealthCheck(
                name="shutdown",
                status=HealthStatus.UNHEALTHY,
                message="Shutting down",
                timestamp=datetime.utcnow(),
                metadata=self.shutdown_manager.get_shutdown_info(),
            )

        return HealthCheck(
            name="shutdown",
            status=HealthStatus.HEALTHY,
            message="Running",
            timestamp=datetime.utcnow(),
        )
