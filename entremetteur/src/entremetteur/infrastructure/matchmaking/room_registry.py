"""
Room registry - bidirectional map between connections and active rooms.
"""

from typing import Dict, List, Optional

from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji

from entremetteur.domain.entities import Room
from entremetteur.domain.exceptions import AlreadyPairedError, SelfPairingError
from entremetteur.infrastructure.matchmaking.waiting_queue import WaitingQueue


class RoomRegistry:
    """
    Owns room creation and teardown.

    Invariants:
        - A room exists iff both of its members map to it
        - A connection maps to at most one room
        - Teardown removes both mappings in the same call
    """

    def __init__(
        self,
        waiting_queue: WaitingQueue,
        reporter: Optional[SystemReporter] = None,
    ):
        """
        Initialize registry.

        Args:
            waiting_queue: Queue that matches are drawn from
            reporter: Optional reporter for logging
        """
        self.waiting_queue = waiting_queue
        self.reporter = reporter
        self._rooms: Dict[str, Room] = {}
        self._membership: Dict[str, str] = {}

    def pair(self, first: str, second: str) -> Room:
        """
        Create a room for two unpaired connections.

        Args:
            first: Connection that triggered the match
            second: Connection it is matched with

        Returns:
            The new Room

        Raises:
            SelfPairingError: If both IDs are the same connection
            AlreadyPairedError: If either connection already has a room
        """
        if first == second:
            raise SelfPairingError(first)

        for connection_id in (first, second):
            if connection_id in self._membership:
                raise AlreadyPairedError(
                    connection_id, self._membership[connection_id]
                )

        room = Room(first=first, second=second)
        self._rooms[room.id] = room
        self._membership[first] = room.id
        self._membership[second] = room.id

        if self.reporter:
            self.reporter.info(
                f"{Emoji.CHAT.MATCH} Room created: room={room.id}, "
                f"active_rooms={len(self._rooms)}",
                context="RoomRegistry",
                verbose_level=2,
            )

        return room

    def pair_with_oldest(self, requester: str) -> Optional[Room]:
        """
        Match requester with the oldest waiting connection.

        Args:
            requester: Connection asking for a partner

        Returns:
            New Room, or None if nobody is waiting

        Raises:
            AlreadyPairedError: If requester already has a room
            SelfPairingError: If requester is itself waiting in the queue
        """
        # Validate before dequeuing: a failed match must not drop a waiter
        if requester in self._membership:
            raise AlreadyPairedError(requester, self._membership[requester])

        if requester in self.waiting_queue:
            raise SelfPairingError(requester)

        while True:
            partner = self.waiting_queue.peek_oldest()
            if partner is None:
                return None
            if partner not in self._membership:
                break
            # A paired connection has no business in the queue; discard it
            self.waiting_queue.remove(partner)
            if self.reporter:
                self.reporter.warning(
                    f"{Emoji.CHAT.ANOMALY} Dropped paired connection from "
                    f"queue: conn={partner}, room={self._membership[partner]}",
                    context="RoomRegistry",
                )

        room = self.pair(requester, partner)
        self.waiting_queue.dequeue_oldest()
        return room

    def enqueue(self, connection_id: str) -> bool:
        """
        Put connection in the waiting queue unless it already has a room.

        Args:
            connection_id: Connection looking for a partner

        Returns:
            True if queued, False if ignored (paired or already queued)
        """
        return self.waiting_queue.enqueue(
            connection_id, paired=self.is_paired(connection_id)
        )

    def lookup(self, connection_id: str) -> Optional[Room]:
        """Get room for connection, or None if unpaired."""
        room_id = self._membership.get(connection_id)
        if room_id is None:
            return None
        return self._rooms.get(room_id)

    def partner_of(self, connection_id: str) -> Optional[str]:
        """Get the other member of the connection's room, or None."""
        room = self.lookup(connection_id)
        if room is None:
            return None
        return room.partner_of(connection_id)

    def is_paired(self, connection_id: str) -> bool:
        """Check if connection currently has a room."""
        return connection_id in self._membership

    def dissolve(self, connection_id: str) -> Optional[str]:
        """
        Tear down the connection's room, removing both mappings.

        Idempotent: dissolving an unpaired connection is a no-op.

        Args:
            connection_id: Either member of the room

        Returns:
            Partner ID (to notify), or None if there was no room
        """
        room_id = self._membership.get(connection_id)
        if room_id is None:
            return None

        room = self._rooms.pop(room_id)
        for member in room.members:
            self._membership.pop(member, None)

        if self.reporter:
            self.reporter.info(
                f"{Emoji.SYSTEM.CLEANUP} Room dissolved: room={room_id}, "
                f"by={connection_id}, active_rooms={len(self._rooms)}",
                context="RoomRegistry",
                verbose_level=2,
            )

        return room.partner_of(connection_id)

    def room_count(self) -> int:
        """Get number of active rooms."""
        return len(self._rooms)

    def rooms(self) -> List[Room]:
        """Get all active rooms."""
        return list(self._rooms.values())

    def paired_connection_count(self) -> int:
        """Get number of connections that currently have a room."""
        return len(self._membership)
