"""
Unit tests for EntremetteurHealthChecker.
"""

from unittest.mock import MagicMock

import pytest

from shared.health import HealthStatus

from entremetteur.config.settings import Settings
from entremetteur.domain.events import JoinQueueEvent
from entremetteur.infrastructure.monitoring import EntremetteurHealthChecker
from entremetteur.infrastructure.shutdown import ShutdownManager


@pytest.fixture
def connection_manager():
    manager = MagicMock()
    manager.get_total_connections.return_value = 0
    return manager


def make_checker(coordinator, connection_manager, max_connections=0, shutdown=None):
    return EntremetteurHealthChecker(
        settings=Settings(max_total_connections=max_connections),
        connection_manager=connection_manager,
        coordinator=coordinator,
        shutdown_manager=shutdown,
    )


class TestHealthChecker:
    """Tests for liveness and readiness reports."""

    def test_liveness_always_healthy(self):
        """Test liveness ignores dependencies."""
        checker = EntremetteurHealthChecker(settings=Settings())

        report = checker.check_liveness()

        assert report.is_healthy
        assert "service" in report.checks

    def test_ready_when_idle(self, coordinator, connection_manager):
        """Test a fresh server is ready."""
        checker = make_checker(
            coordinator, connection_manager, shutdown=ShutdownManager()
        )

        report = checker.check_readiness()

        assert report.status == HealthStatus.HEALTHY
        assert set(report.checks) == {
            "connection_capacity",
            "matchmaking",
            "shutdown",
        }

    def test_missing_components_unhealthy(self):
        """Test readiness without wiring."""
        checker = EntremetteurHealthChecker(settings=Settings())

        report = checker.check_readiness()

        assert report.status == HealthStatus.UNHEALTHY
        assert not report.is_ready

    def test_capacity_degraded_near_cap(self, coordinator, connection_manager):
        """Test 90% of the cap degrades readiness."""
        connection_manager.get_total_connections.return_value = 9
        checker = make_checker(coordinator, connection_manager, max_connections=10)

        report = checker.check_readiness()

        assert report.status == HealthStatus.DEGRADED
        assert report.checks["connection_capacity"].metadata["capacity_percent"] == 90.0

    def test_capacity_unhealthy_at_cap(self, coordinator, connection_manager):
        """Test a full server is not ready."""
        connection_manager.get_total_connections.return_value = 10
        checker = make_checker(coordinator, connection_manager, max_connections=10)

        assert checker.check_readiness().status == HealthStatus.UNHEALTHY

    async def test_matchmaking_counts(self, coordinator, connection_manager):
        """Test matchmaking check reports queue and rooms."""
        for cid in ("a", "b", "c"):
            coordinator.connect(cid)
            await coordinator.dispatch(cid, JoinQueueEvent())
        checker = make_checker(coordinator, connection_manager)

        check = checker.check_readiness().checks["matchmaking"]

        assert check.status == HealthStatus.HEALTHY
        assert check.metadata == {"waiting": 1, "active_rooms": 1, "paired": 2}

    async def test_shutting_down_unhealthy(self, coordinator, connection_manager):
        """Test readiness fails once shutdown has started."""
        shutdown = ShutdownManager()
        checker = make_checker(coordinator, connection_manager, shutdown=shutdown)

        await shutdown.initiate_shutdown("test")

        report = checker.check_readiness()
        assert report.status == HealthStatus.UNHEALTHY
        assert report.checks["shutdown"].metadata["reason"] == "test"
