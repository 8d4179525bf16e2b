"""
Prometheus metrics collection.
"""

from prometheus_client import Counter, Gauge, Histogram

# ============================================================
# HTTP Metrics
# ============================================================

http_requests_total = Counter(
    "entremetteur_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "entremetteur_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

http_errors_total = Counter(
    "entremetteur_http_errors_total",
    "Total HTTP errors",
    ["method", "endpoint", "error_type"],
)

# ============================================================
# WebSocket Metrics
# ============================================================

ws_connections_total = Counter(
    "entremetteur_ws_connections_total",
    "WebSocket handshakes by outcome",
    ["outcome"],
)

ws_active_connections = Gauge(
    "entremetteur_ws_active_connections",
    "Currently open WebSocket sessions",
)

ws_invalid_frames_total = Counter(
    "entremetteur_ws_invalid_frames_total",
    "Inbound frames dropped before dispatch",
)

ws_outbox_dropped_total = Counter(
    "entremetteur_ws_outbox_dropped_total",
    "Outbound frames dropped (outbox full or connection gone)",
)

# ============================================================
# Matchmaking Metrics
# ============================================================

inbound_events_total = Counter(
    "entremetteur_inbound_events_total",
    "Inbound events dispatched to the coordinator",
    ["event"],
)

matches_total = Counter(
    "entremetteur_matches_total",
    "Rooms created",
)

rooms_dissolved_total = Counter(
    "entremetteur_rooms_dissolved_total",
    "Rooms torn down",
    ["reason"],
)

messages_relayed_total = Counter(
    "entremetteur_messages_relayed_total",
    "Chat messages delivered to a partner",
    ["type"],
)

rate_limited_messages_total = Counter(
    "entremetteur_rate_limited_messages_total",
    "Chat messages rejected by the per-connection limiter",
)

waiting_queue_depth = Gauge(
    "entremetteur_waiting_queue_depth",
    "Connections waiting for a partner",
)

active_rooms = Gauge(
    "entremetteur_active_rooms",
    "Rooms currently open",
)
