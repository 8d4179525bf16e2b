"""
Unit tests for KeyExchangeRelay.
"""

from entremetteur.infrastructure.key_exchange import KeyExchangeRelay


class TestKeyExchangeRelay:
    """Unit tests for KeyExchangeRelay."""

    def test_publish_unpaired_stores_without_target(self, room_registry, reporter):
        """Test an unpaired publisher gets no forward target."""
        relay = KeyExchangeRelay(room_registry, reporter=reporter)

        assert relay.publish("a", "pk-a") is None
        assert relay.get("a").public_key == "pk-a"

    def test_publish_paired_returns_partner(self, room_registry):
        """Test a paired publisher's key goes to the partner."""
        relay = KeyExchangeRelay(room_registry)
        room_registry.pair("a", "b")

        assert relay.publish("a", "pk-a") == "b"

    def test_republish_overwrites(self, room_registry):
        """Test only the most recent key is kept."""
        relay = KeyExchangeRelay(room_registry)

        relay.publish("a", "first")
        relay.publish("a", "second")

        assert relay.get("a").public_key == "second"
        assert relay.count() == 1

    def test_discard_only_touches_owner(self, room_registry):
        """Test discarding one record leaves the partner's intact."""
        relay = KeyExchangeRelay(room_registry)
        relay.publish("a", "pk-a")
        relay.publish("b", "pk-b")

        assert relay.discard("a") is True
        assert relay.discard("a") is False
        assert relay.get("a") is None
        assert relay.get("b").public_key == "pk-b"
