"""
Network and transport emoji definitions.

Usage:
    >>> from shared.reporter.emojis.network_emojis import NetworkEmoji
    >>> print(f"{NetworkEmoji.CONNECTED} WebSocket connected")
    🔗 WebSocket connected
"""

from shared.reporter.emojis.base_emojis import ComponentEmoji


class NetworkEmoji(ComponentEmoji):
    """Network connections and data flow."""

    # ============================================================
    # Connection States
    # ============================================================

    CONNECTED = "🔗"  # Connection established
    DISCONNECT = "🔌"  # Connection closed
    REJECTED = "⛔"  # Connection refused at handshake
    TIMEOUT = "⏱️"  # Connection timeout

    # ============================================================
    # Data Flow
    # ============================================================

    SEND = "📤"  # Data sent
    RECEIVE = "📥"  # Data received
    WEBSOCKET = "🌐"  # WebSocket operation
    HTTP = "🔌"  # HTTP request
