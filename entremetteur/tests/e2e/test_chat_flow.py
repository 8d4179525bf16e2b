"""
E2E tests for a complete chat session over WebSockets.
"""

import json

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient


def frame(event, data=None):
    return {"event": event, "data": data or {}}


def start_chat(alice, bob):
    """Pair two sockets and return both chat_start payloads."""
    alice.send_json(frame("join_queue", {"username": "Alice"}))
    bob.send_json(frame("join_queue", {"username": "Bob", "profilePic": "b.png"}))
    return alice.receive_json(), bob.receive_json()


class TestChatFlow:
    """E2E tests for matchmaking and relay."""

    def test_pair_and_relay(self, client):
        """Test pairing, message relay and typing indicators."""
        with client.websocket_connect("/ws") as alice, client.websocket_connect(
            "/ws"
        ) as bob:
            start_a, start_b = start_chat(alice, bob)

            assert start_a["event"] == "chat_start"
            assert start_a["data"]["partnerName"] == "Bob"
            assert start_a["data"]["partnerProfilePic"] == "b.png"
            assert start_b["data"]["partnerName"] == "Alice"
            assert start_b["data"]["partnerProfilePic"] is None
            room_id = start_a["data"]["roomId"]
            assert room_id == start_b["data"]["roomId"]

            alice.send_json(
                frame("send_message", {"roomId": room_id, "text": "hi", "id": 1})
            )
            assert bob.receive_json() == {
                "event": "receive_message",
                "data": {"id": 1, "text": "hi", "sender": "other", "type": "text"},
            }

            bob.send_json(frame("typing", {"roomId": room_id}))
            assert alice.receive_json() == {"event": "typing", "data": {}}

            bob.send_json(frame("exchange_keys", {"publicKey": "pk-bob"}))
            assert alice.receive_json() == {
                "event": "partner_public_key",
                "data": {"publicKey": "pk-bob"},
            }

    def test_rate_limit_and_skip(self, client):
        """Test 11 rapid messages, then skip and a fresh match."""
        with client.websocket_connect("/ws") as alice, client.websocket_connect(
            "/ws"
        ) as bob:
            start_chat(alice, bob)

            for i in range(11):
                alice.send_json(frame("send_message", {"text": f"m{i}", "id": i}))

            limited = alice.receive_json()
            assert limited["event"] == "rate_limit_exceeded"
            assert "slow down" in limited["data"]["message"]

            received = [bob.receive_json() for _ in range(10)]
            assert [f["data"]["id"] for f in received] == list(range(10))

            # Nothing else was queued for bob before this
            alice.send_json(frame("stop_typing"))
            assert bob.receive_json() == {"event": "stop_typing", "data": {}}

            alice.send_json(frame("skip"))
            assert bob.receive_json() == {"event": "partner_disconnected", "data": {}}

            start_a, start_b = start_chat(alice, bob)
            assert start_a["event"] == start_b["event"] == "chat_start"

    def test_disconnect_notifies_partner(self, client):
        """Test closing a socket ends the room for the partner."""
        with client.websocket_connect("/ws") as alice:
            with client.websocket_connect("/ws") as bob:
                start_chat(alice, bob)

            assert alice.receive_json() == {
                "event": "partner_disconnected",
                "data": {},
            }

            # Alice is Idle again and can re-enter the queue
            with client.websocket_connect("/ws") as carol:
                alice.send_json(frame("join_queue", {"username": "Alice"}))
                carol.send_json(frame("join_queue", {"username": "Carol"}))
                assert alice.receive_json()["data"]["partnerName"] == "Carol"
                assert carol.receive_json()["data"]["partnerName"] == "Alice"

    def test_invalid_frames_are_ignored(self, client):
        """Test bad frames neither close the socket nor reach the partner."""
        with client.websocket_connect("/ws") as alice, client.websocket_connect(
            "/ws"
        ) as bob:
            alice.send_text("not json")
            alice.send_json({"event": "subscribe", "data": {}})
            alice.send_json({"event": "send_message", "data": "hi"})
            alice.send_bytes(json.dumps(frame("join_queue")).encode("utf-8"))
            bob.send_json(frame("join_queue", {"username": "Bob"}))

            assert alice.receive_json()["event"] == "chat_start"
            assert bob.receive_json()["data"]["partnerName"] == "Anonymous"

        stats = client.get("/stats").json()
        assert stats["transport"]["validation_failures"] == 3


class TestConnectionAdmission:
    """E2E tests for handshake rejections."""

    def test_connection_cap(self, app_factory, test_settings):
        """Test connections beyond the cap are closed with 1013."""
        settings = test_settings.model_copy(update={"max_total_connections": 1})
        app = app_factory(settings)

        with TestClient(app.app) as client:
            with client.websocket_connect("/ws"):
                with client.websocket_connect("/ws") as second:
                    with pytest.raises(WebSocketDisconnect) as exc_info:
                        second.receive_json()
                    assert exc_info.value.code == 1013

            assert app.container.stats["connection_rejections_by_type"] == {
                "global": 1
            }

    def test_shutdown_notice_and_rejection(self, client, app):
        """Test clients are told about shutdown and new ones are refused."""
        with client.websocket_connect("/ws") as alice, client.websocket_connect(
            "/ws"
        ) as bob:
            start_chat(alice, bob)

            client.portal.call(app.container.shutdown_manager.initiate_shutdown, "test")

            assert alice.receive_json() == {
                "event": "shutdown",
                "data": {"message": "Server is shutting down", "code": 1001},
            }
            with pytest.raises(WebSocketDisconnect) as exc_info:
                alice.receive_json()
            assert exc_info.value.code == 1001

        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect("/ws"):
                pass
        assert exc_info.value.code == 1001

        assert client.get("/health/ready").status_code == 503
