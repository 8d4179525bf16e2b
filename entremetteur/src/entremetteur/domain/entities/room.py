"""
Room entity - ephemeral pairing of exactly two connections.
"""

from datetime import datetime
from typing import Optional, Tuple


class Room:
    """
    Room entity pairing two distinct connections.

    The room id is derived from the member ids, which are unique among
    active connections, so ids never collide.

    Attributes:
        id: Room identifier
        first: Connection that triggered the match
        second: Connection that was waiting in the queue
        created_at: Pairing timestamp
    """

    def __init__(
        self,
        first: str,
        second: str,
        created_at: Optional[datetime] = None,
    ):
        """
        Initialize Room entity.

        Args:
            first: First member connection ID
            second: Second member connection ID
            created_at: Optional creation timestamp

        Raises:
            ValueError: If both members are the same connection
        """
        if first == second:
            raise ValueError("A room needs two distinct connections")

        self.first: str = first
        self.second: str = second
        self.id: str = self.build_id(first, second)
        self.created_at: datetime = created_at or datetime.utcnow()

    @staticmethod
    def build_id(first: str, second: str) -> str:
        """Derive the room identifier from its two members."""
        return f"room_{first}_{second}"

    @property
    def members(self) -> Tuple[str, str]:
        """Both member connection IDs."""
        return (self.first, self.second)

    def has_member(self, connection_id: str) -> bool:
        """Check if connection belongs to this room."""
        return connection_id in self.members

    def partner_of(self, connection_id: str) -> Optional[str]:
        """
        Get the other member of the room.

        Args:
            connection_id: One member of the room

        Returns:
            The other member, or None if connection is not a member
        """
        if connection_id == self.first:
            return self.second
        if connection_id == self.second:
            return self.first
        return None

    def __eq__(self, other) -> bool:
        """Check equality based on room ID."""
        if not isinstance(other, Room):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on room ID."""
        return hash(self.id)

    def __repr__(self) -> str:
        """String representation."""
        return f"Room(id={self.id})"
