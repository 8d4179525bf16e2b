"""
System-level operations and lifecycle emoji definitions.
"""

from shared.reporter.emojis.base_emojis import ComponentEmoji


class SystemEmoji(ComponentEmoji):
    """System-level operations and lifecycle events."""

    # ============================================================
    # Lifecycle Operations
    # ============================================================
    STARTUP = "🚀"  # System/component initialization
    SHUTDOWN = "🛑"  # System/component shutdown
    READY = "✅"  # Component initialized successfully
    CONFIG = "⚙️"  # Configuration operation

    # ============================================================
    # Health & Maintenance
    # ============================================================
    HEALTH_CHECK = "🩺"  # Health check performed
    CLEANUP = "🧹"  # Resource cleanup
    RESET = "♻️"  # Reset to initial state
