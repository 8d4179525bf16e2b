"""
Matchmaking and chat relay emoji definitions.

Usage:
    >>> from shared.reporter.emojis.chat_emojis import ChatEmoji
    >>> print(f"{ChatEmoji.MATCH} Paired conn_a with conn_b")
    🤝 Paired conn_a with conn_b
"""

from shared.reporter.emojis.base_emojis import ComponentEmoji


class ChatEmoji(ComponentEmoji):
    """
    Matchmaking and relay operations.

    Categories:
        - Matchmaking: queue, match, skip
        - Relay: message, typing, edit, delete
        - Security: key exchange, rate limiting
    """

    # ============================================================
    # Matchmaking
    # ============================================================

    QUEUE = "⏳"  # Connection waiting for a partner
    MATCH = "🤝"  # Two connections paired
    SKIP = "⏭️"  # Connection left its room
    PARTNER_LEFT = "👋"  # Partner notified of departure

    # ============================================================
    # Relay
    # ============================================================

    MESSAGE = "💬"  # Chat message relayed
    FILE = "📎"  # File message relayed
    TYPING = "⌨️"  # Typing indicator
    EDIT = "✏️"  # Message edited
    DELETE = "🗑️"  # Message deleted

    # ============================================================
    # Security
    # ============================================================

    KEY = "🔑"  # Public key published/forwarded
    RATE_LIMIT = "🚦"  # Rate limit hit
    ANOMALY = "🤨"  # Protocol misuse ignored
