"""Emoji definitions for system reporting."""

from shared.reporter.emojis.chat_emojis import ChatEmoji
from shared.reporter.emojis.emoji import Emoji
from shared.reporter.emojis.errors_emojis import ErrorEmoji
from shared.reporter.emojis.network_emojis import NetworkEmoji
from shared.reporter.emojis.system_emojis import SystemEmoji

__all__ = [
    "Emoji",
    "ChatEmoji",
    "ErrorEmoji",
    "NetworkEmoji",
    "SystemEmoji",
]
