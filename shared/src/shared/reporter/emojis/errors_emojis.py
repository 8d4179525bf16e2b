"""
Error and warning level emoji definitions.
"""

from shared.reporter.emojis.base_emojis import ComponentEmoji


class ErrorEmoji(ComponentEmoji):
    """Error levels and warning indicators."""

    CRITICAL = "🔴"  # Critical error (system failure)
    ERROR = "❌"  # Error (operation failed)
    WARNING = "⚠️"  # Warning (potential issue)
    DEBUG = "🐛"  # Debug information
    VALIDATION = "🚫"  # Invalid input rejected
