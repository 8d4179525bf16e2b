"""
Matchmaking-related exceptions.
"""

from typing import Optional


class MatchmakingError(Exception):
    """Base exception for queue and room errors."""

    pass


class AlreadyPairedError(MatchmakingError):
    """Raised when pairing a connection that already has a room."""

    def __init__(self, connection_id: str, room_id: Optional[str] = None):
        """
        Initialize AlreadyPairedError.

        Args:
            connection_id: Connection that is already paired
            room_id: Room it currently belongs to
        """
        super().__init__(
            f"Connection {connection_id} already paired in {room_id}"
        )
        self.connection_id = connection_id
        self.room_id = room_id


class SelfPairingError(MatchmakingError):
    """Raised when a connection would be paired with itself."""

    def __init__(self, connection_id: str):
        super().__init__(f"Connection {connection_id} cannot pair with itself")
        self.connection_id = connection_id


class UnknownConnectionError(MatchmakingError):
    """Raised when an event references a connection that is not registered."""

    def __init__(self, connection_id: str):
        super().__init__(f"Unknown connection: {connection_id}")
        self.connection_id = connection_id
