"""
Integration tests for ConnectionManager.

Tests outbound delivery with mock WebSocket objects.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from entremetteur.domain.events import (
    PartnerTypingEvent,
    ReceiveMessageEvent,
    ShutdownNoticeEvent,
)
from entremetteur.infrastructure.websocket import (
    ConnectionLimitExceeded,
    ConnectionManager,
)


def create_mock_websocket() -> AsyncMock:
    """Create mock WebSocket object."""
    return AsyncMock()


async def settle():
    """Let writer tasks run."""
    for _ in range(5):
        await asyncio.sleep(0)


class TestConnectionManager:
    """Integration tests for ConnectionManager."""

    # ================================================================
    # Registration
    # ================================================================

    async def test_register_and_unregister(self, reporter):
        """Test connection bookkeeping."""
        manager = ConnectionManager(reporter=reporter)
        manager.register("a", create_mock_websocket())

        assert manager.is_registered("a")
        assert manager.get_total_connections() == 1
        assert manager.get_connection_ids() == ["a"]

        await manager.unregister("a")

        assert not manager.is_registered("a")
        assert manager.get_total_connections() == 0

    async def test_unregister_is_idempotent(self):
        """Test unregistering twice or unknown IDs."""
        manager = ConnectionManager()
        manager.register("a", create_mock_websocket())

        await manager.unregister("a")
        await manager.unregister("a")
        await manager.unregister("never-registered")

        assert manager.get_total_connections() == 0

    async def test_global_limit(self):
        """Test the cap refuses the next connection."""
        manager = ConnectionManager(max_total_connections=1)
        manager.register("a", create_mock_websocket())

        with pytest.raises(ConnectionLimitExceeded) as exc_info:
            manager.register("b", create_mock_websocket())

        assert exc_info.value.limit_type == "global"
        assert not manager.is_registered("b")

        await manager.unregister("a")

    async def test_unlimited_by_default(self):
        """Test zero means no cap."""
        manager = ConnectionManager()
        for i in range(20):
            manager.register(f"c{i}", create_mock_websocket())

        assert manager.get_total_connections() == 20

        await manager.close_all()

    # ================================================================
    # Delivery
    # ================================================================

    async def test_emit_delivers_in_order(self):
        """Test frames reach the socket in emission order."""
        manager = ConnectionManager()
        ws = create_mock_websocket()
        manager.register("a", ws)

        manager.emit("a", PartnerTypingEvent())
        manager.emit("a", ReceiveMessageEvent(message_id=1, text="hi"))
        await settle()

        sent = [call.args[0] for call in ws.send_json.await_args_list]
        assert sent == [
            {"event": "typing", "data": {}},
            {
                "event": "receive_message",
                "data": {"id": 1, "text": "hi", "sender": "other", "type": "text"},
            },
        ]

        await manager.unregister("a")

    async def test_emit_to_unknown_is_dropped(self):
        """Test emitting to a closed connection does nothing."""
        manager = ConnectionManager()

        manager.emit("ghost", PartnerTypingEvent())

        assert manager.get_pending_frames("ghost") == 0

    async def test_full_outbox_drops(self):
        """Test frames beyond the outbox size are dropped, not awaited."""
        manager = ConnectionManager(outbox_size=2)
        ws = create_mock_websocket()
        manager.register("a", ws)

        # No await in between: the writer has not run yet
        for _ in range(5):
            manager.emit("a", PartnerTypingEvent())

        assert manager.get_pending_frames("a") == 2

        await settle()
        assert ws.send_json.await_count == 2

        await manager.unregister("a")

    async def test_unregister_flushes_pending(self):
        """Test frames queued before unregister are still sent."""
        manager = ConnectionManager()
        ws = create_mock_websocket()
        manager.register("a", ws)

        manager.emit("a", PartnerTypingEvent())
        await manager.unregister("a")

        assert ws.send_json.await_count == 1

    async def test_send_failure_stops_writer(self, reporter):
        """Test a failing socket does not raise into emitters."""
        manager = ConnectionManager(reporter=reporter)
        ws = create_mock_websocket()
        ws.send_json.side_effect = RuntimeError("closed")
        manager.register("a", ws)

        manager.emit("a", PartnerTypingEvent())
        manager.emit("a", PartnerTypingEvent())
        await settle()

        assert ws.send_json.await_count == 1
        await manager.unregister("a")

    # ================================================================
    # Shutdown
    # ================================================================

    async def test_broadcast_and_close_all(self):
        """Test shutdown notice reaches everyone before close."""
        manager = ConnectionManager()
        sockets = {cid: create_mock_websocket() for cid in ("a", "b", "c")}
        for cid, ws in sockets.items():
            manager.register(cid, ws)

        notified = manager.broadcast(ShutdownNoticeEvent())
        closed = await manager.close_all(code=1001, reason="Server shutdown")

        assert notified == 3
        assert closed == 3
        assert manager.get_total_connections() == 0
        for ws in sockets.values():
            ws.send_json.assert_awaited_once_with(
                {
                    "event": "shutdown",
                    "data": {"message": "Server is shutting down", "code": 1001},
                }
            )
            ws.close.assert_awaited_once_with(code=1001, reason="Server shutdown")

    async def test_close_all_tolerates_closed_sockets(self):
        """Test a socket that fails to close is skipped."""
        manager = ConnectionManager()
        ws = create_mock_websocket()
        ws.close.side_effect = RuntimeError("already closed")
        manager.register("a", ws)

        closed = await manager.close_all()

        assert closed == 0
        assert manager.get_total_connections() == 0
