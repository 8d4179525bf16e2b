"""
ConnectionState value object - lifecycle state of a connection.
"""

from enum import Enum


class ConnectionState(str, Enum):
    """
    Matchmaking state of a connection.

    Transitions:
        IDLE -> QUEUED    join_queue with an empty queue
        IDLE -> PAIRED    join_queue matched with a waiting connection
        QUEUED -> PAIRED  a later join_queue matched this connection
        QUEUED -> IDLE    skip
        PAIRED -> IDLE    skip, or the partner skipped/disconnected
    """

    IDLE = "idle"
    QUEUED = "queued"
    PAIRED = "paired"
