"""
Main Emoji registry with centralized access to all emoji categories.

Usage:
    >>> from shared.reporter.emojis import Emoji
    >>> Emoji.SYSTEM.STARTUP
    '🚀'
    >>> Emoji.format("CHAT", "MATCH", "Paired")
    '🤝 Paired'
"""

from typing import Dict, Type

from shared.reporter.emojis.base_emojis import ComponentEmoji
from shared.reporter.emojis.chat_emojis import ChatEmoji
from shared.reporter.emojis.errors_emojis import ErrorEmoji
from shared.reporter.emojis.network_emojis import NetworkEmoji
from shared.reporter.emojis.system_emojis import SystemEmoji


class Emoji:
    """
    Central emoji registry with semantic categories.

    Categories:
        SYSTEM: System operations and lifecycle
        NETWORK: Network and transport
        CHAT: Matchmaking and relay
        ERROR: Error levels and warnings
    """

    SYSTEM = SystemEmoji
    NETWORK = NetworkEmoji
    CHAT = ChatEmoji
    ERROR = ErrorEmoji

    # Common shortcuts
    SUCCESS = "✅"
    FAILURE = "❌"
    WARNING = "⚠️"

    @classmethod
    def get_all_categories(cls) -> Dict[str, Type[ComponentEmoji]]:
        """Get all registered emoji categories."""
        return {
            name: attr
            for name, attr in vars(cls).items()
            if (
                not name.startswith("_")
                and isinstance(attr, type)
                and issubclass(attr, ComponentEmoji)
            )
        }

    @classmethod
    def format(cls, category: str, name: str, message: str) -> str:
        """
        Format a message with the emoji from a category.

        Unknown categories or names return the message unchanged.

        Args:
            category: Category name (e.g., 'SYSTEM', 'CHAT')
            name: Emoji name (e.g., 'STARTUP', 'MATCH')
            message: Message to format

        Returns:
            Message prefixed with the emoji when found
        """
        category_class = cls.get_all_categories().get(category.upper())
        if category_class is None:
            return message

        emoji = category_class.get_all().get(name.upper())
        if emoji is None:
            return message

        return f"{emoji} {message}"
