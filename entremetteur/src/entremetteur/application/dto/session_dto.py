"""
DTOs for participant sessions.
"""

from typing import Optional

from pydantic import BaseModel, Field

from entremetteur.domain.value_objects import ConnectionState


class SessionInfo(BaseModel):
    """
    Snapshot of one connection's matchmaking state.

    Attributes:
        connection_id: Server-assigned connection ID
        username: Sanitized display name
        state: Idle, queued or paired
        room_id: Current room (paired only)
        partner_id: Current partner (paired only)
        queue_position: 1-based position (queued only)
        connected_at: Connection timestamp (ISO format)
    """

    connection_id: str = Field(..., description="Connection ID")
    username: str = Field(..., description="Display name")
    state: ConnectionState = Field(..., description="Matchmaking state")
    room_id: Optional[str] = Field(None, description="Room ID if paired")
    partner_id: Optional[str] = Field(None, description="Partner if paired")
    queue_position: Optional[int] = Field(
        None, description="Position in the waiting queue if queued"
    )
    connected_at: str = Field(..., description="Connection timestamp")
