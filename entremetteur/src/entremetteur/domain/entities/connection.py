"""
Connection entity - one participant's network session.
"""

import uuid
from datetime import datetime
from typing import Optional

from entremetteur.domain.value_objects import DisplayName


def generate_connection_id() -> str:
    """Generate a unique connection identifier."""
    return f"conn_{uuid.uuid4().hex}"


class Connection:
    """
    Connection entity representing a single participant session.

    Identity is server-assigned and stable for the session lifetime.
    Profile attributes are set when the connection joins the queue.

    Attributes:
        id: Unique connection identifier
        display_name: Sanitized display name
        profile_pic: Opaque avatar reference (unvalidated)
        remote_address: Client address, when known
        connected_at: Connection timestamp
    """

    def __init__(
        self,
        connection_id: Optional[str] = None,
        display_name: Optional[DisplayName] = None,
        profile_pic: Optional[str] = None,
        remote_address: Optional[str] = None,
        connected_at: Optional[datetime] = None,
    ):
        """
        Initialize Connection entity.

        Args:
            connection_id: Optional identifier (generated if not provided)
            display_name: Optional display name (defaults to Anonymous)
            profile_pic: Optional avatar reference
            remote_address: Optional client address
            connected_at: Optional connection timestamp
        """
        self.id: str = connection_id or generate_connection_id()
        self.display_name: DisplayName = display_name or DisplayName(
            DisplayName.DEFAULT
        )
        self.profile_pic: Optional[str] = profile_pic
        self.remote_address: Optional[str] = remote_address
        self.connected_at: datetime = connected_at or datetime.utcnow()

    @property
    def username(self) -> str:
        """Display name as plain string."""
        return self.display_name.value

    def update_profile(
        self, display_name: DisplayName, profile_pic: Optional[str]
    ) -> None:
        """Replace profile attributes (on an accepted join)."""
        self.display_name = display_name
        self.profile_pic = profile_pic

    def __eq__(self, other) -> bool:
        """Check equality based on connection ID."""
        if not isinstance(other, Connection):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on connection ID."""
        return hash(self.id)

    def __repr__(self) -> str:
        """String representation."""
        return f"Connection(id={self.id}, name={self.username!r})"
