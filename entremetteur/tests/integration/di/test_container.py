"""
Integration tests for the DI container wiring.
"""

from entremetteur.config.settings import Settings
from entremetteur.di import Container
from entremetteur.domain.events import parse_inbound_event


class TestContainer:
    """Tests for Container singletons and wiring."""

    def test_singletons(self, test_settings, reporter):
        """Test each property returns the same instance."""
        container = Container(test_settings, reporter=reporter)

        assert container.connection_manager is container.connection_manager
        assert container.session_coordinator is container.session_coordinator
        assert container.shutdown_manager is container.shutdown_manager
        assert container.health_checker is container.health_checker

    def test_shared_state(self, test_settings, reporter):
        """Test components share one queue, registry and emitter."""
        container = Container(test_settings, reporter=reporter)
        coordinator = container.session_coordinator

        assert coordinator.emitter is container.connection_manager
        assert coordinator.waiting_queue is container.waiting_queue
        assert coordinator.room_registry is container.room_registry
        assert container.room_registry.waiting_queue is container.waiting_queue
        assert coordinator.key_relay is container.key_relay
        assert coordinator.rate_limiter is container.message_rate_limiter

    async def test_wired_coordinator_pairs_joiners(self, test_settings, reporter):
        """Test two joiners on the container-built coordinator end up paired."""
        coordinator = Container(test_settings, reporter=reporter).session_coordinator
        coordinator.connect("a")
        coordinator.connect("b")

        await coordinator.dispatch("a", parse_inbound_event("join_queue", {}))
        await coordinator.dispatch("b", parse_inbound_event("join_queue", {}))

        assert coordinator.room_registry.partner_of("a") == "b"
        assert coordinator.get_stats()["matches"] == 1
        assert coordinator.get_stats()["waiting"] == 0

    def test_settings_flow_into_components(self, reporter):
        """Test configured values reach the components."""
        settings = Settings(
            message_rate_limit=3,
            message_rate_window_seconds=2.0,
            max_total_connections=7,
            outbox_size=8,
            forward_keys_on_pair=True,
            max_username_length=12,
        )
        container = Container(settings, reporter=reporter)

        assert container.message_rate_limiter.limit == 3
        assert container.message_rate_limiter.window_seconds == 2.0
        assert container.connection_manager.max_total_connections == 7
        assert container.connection_manager.outbox_size == 8
        assert container.session_coordinator.forward_keys_on_pair is True
        assert container.session_coordinator.max_username_length == 12

    def test_http_limiter_toggle(self, reporter):
        """Test the HTTP limiter exists only when enabled."""
        disabled = Container(Settings(http_rate_limit_enabled=False), reporter=reporter)
        enabled = Container(
            Settings(http_rate_limit_enabled=True, http_rate_limit_requests=5),
            reporter=reporter,
        )

        assert disabled.http_rate_limiter is None
        assert enabled.http_rate_limiter.limit == 5

    def test_record_rejection(self, test_settings, reporter):
        """Test rejection counters by type."""
        container = Container(test_settings, reporter=reporter)

        container.record_rejection("global")
        container.record_rejection("global")
        container.record_rejection("shutdown")

        assert container.stats["connection_rejections"] == 3
        assert container.stats["connection_rejections_by_type"] == {
            "global": 2,
            "shutdown": 1,
        }
        assert container.get_uptime_seconds() >= 0
