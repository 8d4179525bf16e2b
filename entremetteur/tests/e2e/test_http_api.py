"""
E2E tests for the HTTP surface: probes, stats, metrics, rate limiting.
"""

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient
from starlette.datastructures import Headers

from entremetteur.presentation.api.dependencies import get_client_ip


class TestHealthApi:
    """Tests for health probes."""

    def test_liveness(self, client):
        """Test /health/live."""
        response = client.get("/health/live")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert "service" in body["checks"]

    def test_readiness(self, client):
        """Test /health/ready and its /health alias."""
        ready = client.get("/health/ready")
        alias = client.get("/health")

        assert ready.status_code == 200
        assert alias.status_code == 200
        assert set(ready.json()["checks"]) == {
            "connection_capacity",
            "matchmaking",
            "shutdown",
        }


class TestStatsApi:
    """Tests for /stats."""

    def test_stats_shape(self, client):
        """Test counters on an idle server."""
        body = client.get("/stats").json()

        assert body["total_connections"] == 0
        assert body["waiting"] == 0
        assert body["active_rooms"] == 0
        assert body["limits"]["message_rate_limit"] == 10
        assert body["shutdown"]["state"] == "running"

    def test_stats_reflect_rooms(self, client):
        """Test a live room shows up in stats."""
        with client.websocket_connect("/ws") as alice, client.websocket_connect(
            "/ws"
        ) as bob:
            alice.send_json({"event": "join_queue", "data": {}})
            bob.send_json({"event": "join_queue", "data": {}})
            alice.receive_json()
            bob.receive_json()

            body = client.get("/stats").json()

            assert body["total_connections"] == 2
            assert body["active_rooms"] == 1
            assert body["matchmaking"]["matches"] == 1


class TestMetricsApi:
    """Tests for /metrics."""

    def test_prometheus_exposition(self, client):
        """Test metrics are exposed in text format."""
        client.get("/stats")

        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "entremetteur_http_requests_total" in response.text
        assert "entremetteur_waiting_queue_depth" in response.text


class TestHttpRateLimit:
    """Tests for the per-IP HTTP limiter."""

    def test_limit_returns_429(self, app_factory, test_settings):
        """Test requests beyond the limit are refused with Retry-After."""
        settings = test_settings.model_copy(
            update={
                "http_rate_limit_enabled": True,
                "http_rate_limit_requests": 2,
                "http_rate_limit_window_seconds": 60.0,
            }
        )
        app = app_factory(settings)

        with TestClient(app.app) as client:
            first = client.get("/stats")
            second = client.get("/stats")
            third = client.get("/stats")

            assert first.status_code == 200
            assert first.headers["X-RateLimit-Remaining"] == "1"
            assert second.status_code == 200
            assert third.status_code == 429
            assert third.headers["Retry-After"] == "60"
            assert third.json()["error"] == "rate_limit_exceeded"

            # Probes stay reachable
            assert client.get("/health/live").status_code == 200
            assert client.get("/metrics").status_code == 200

    def test_websocket_handshake_limited(self, app_factory, test_settings):
        """Test handshakes count against the same per-IP limit."""
        settings = test_settings.model_copy(
            update={"http_rate_limit_enabled": True, "http_rate_limit_requests": 1}
        )
        app = app_factory(settings)

        with TestClient(app.app) as client:
            with client.websocket_connect("/ws"):
                pass

            with pytest.raises(WebSocketDisconnect) as exc_info:
                with client.websocket_connect("/ws"):
                    pass

            assert exc_info.value.code == 1008


class TestForwardedFor:
    """Tests for how the client IP is resolved."""

    def test_get_client_ip_ignores_header_by_default(self):
        """Test the transport peer is used unless the proxy is trusted."""
        headers = Headers({"x-forwarded-for": "203.0.113.9, 10.0.0.1"})

        assert get_client_ip(headers, "10.0.0.1") == "10.0.0.1"
        assert get_client_ip(Headers({}), None) == "unknown"
        assert (
            get_client_ip(headers, "10.0.0.1", trust_forwarded_for=True)
            == "203.0.113.9"
        )
        assert (
            get_client_ip(Headers({}), "10.0.0.1", trust_forwarded_for=True)
            == "10.0.0.1"
        )

    def test_spoofed_header_does_not_bypass_limit(self, app_factory, test_settings):
        """Test rotating X-Forwarded-For values share the peer's budget."""
        settings = test_settings.model_copy(
            update={"http_rate_limit_enabled": True, "http_rate_limit_requests": 2}
        )
        app = app_factory(settings)

        with TestClient(app.app) as client:
            codes = [
                client.get(
                    "/stats", headers={"X-Forwarded-For": f"198.51.100.{i}"}
                ).status_code
                for i in range(10)
            ]

            assert codes == [200, 200] + [429] * 8
            assert app.container.http_rate_limiter.tracked_count() == 1

    def test_trusted_header_keys_by_first_hop(self, app_factory, test_settings):
        """Test behind a trusted proxy each forwarded client gets its own budget."""
        settings = test_settings.model_copy(
            update={
                "http_rate_limit_enabled": True,
                "http_rate_limit_requests": 1,
                "trust_forwarded_for": True,
            }
        )
        app = app_factory(settings)

        with TestClient(app.app) as client:
            first = client.get("/stats", headers={"X-Forwarded-For": "198.51.100.1"})
            second = client.get("/stats", headers={"X-Forwarded-For": "198.51.100.2"})
            again = client.get("/stats", headers={"X-Forwarded-For": "198.51.100.1"})

            assert [first.status_code, second.status_code] == [200, 200]
            assert again.status_code == 429


class TestCors:
    """Tests for cross-origin access to the HTTP routes."""

    def test_simple_request_gets_allow_origin(self, client):
        """Test browsers on any origin may read /stats by default."""
        response = client.get("/stats", headers={"Origin": "https://chat.example"})

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"

    def test_preflight_respects_configured_origins(self, app_factory, test_settings):
        """Test only configured origins pass a preflight."""
        settings = test_settings.model_copy(
            update={"cors_origins": ["https://chat.example"]}
        )
        app = app_factory(settings)

        with TestClient(app.app) as client:
            allowed = client.options(
                "/stats",
                headers={
                    "Origin": "https://chat.example",
                    "Access-Control-Request-Method": "GET",
                },
            )
            refused = client.options(
                "/stats",
                headers={
                    "Origin": "https://elsewhere.example",
                    "Access-Control-Request-Method": "GET",
                },
            )

        assert allowed.status_code == 200
        assert allowed.headers["access-control-allow-origin"] == "https://chat.example"
        assert refused.status_code == 400
