"""
WebSocket infrastructure.
"""

from entremetteur.infrastructure.websocket.connection_manager import (
    ConnectionLimitExceeded,
    ConnectionManager,
)

__all__ = ["ConnectionLimitExceeded", "ConnectionManager"]
