"""
Waiting queue - FIFO of connections looking for a partner.
"""

from collections import OrderedDict
from typing import List, Optional

from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji


class WaitingQueue:
    """
    Arrival-ordered set of waiting connection IDs.

    Guarantees:
        - A connection ID appears at most once
        - dequeue_oldest() returns entries in arrival order
        - remove() keeps the relative order of the remaining entries
        - Paired connections are never admitted
    """

    def __init__(self, reporter: Optional[SystemReporter] = None):
        self._entries: "OrderedDict[str, None]" = OrderedDict()
        self.reporter = reporter

    def enqueue(self, connection_id: str, paired: bool = False) -> bool:
        """
        Append connection to the back of the queue.

        Args:
            connection_id: Connection to enqueue
            paired: Whether the connection currently has a room

        Returns:
            True if appended, False if ignored (already queued or paired)
        """
        if paired:
            self._log_ignored(connection_id, "already paired")
            return False

        if connection_id in self._entries:
            self._log_ignored(connection_id, "already queued")
            return False

        self._entries[connection_id] = None

        if self.reporter:
            self.reporter.info(
                f"{Emoji.CHAT.QUEUE} Connection queued: "
                f"conn={connection_id}, position={len(self._entries)}",
                context="WaitingQueue",
                verbose_level=2,
            )

        return True

    def peek_oldest(self) -> Optional[str]:
        """Get the earliest queued connection without removing it."""
        return next(iter(self._entries), None)

    def dequeue_oldest(self) -> Optional[str]:
        """
        Remove and return the earliest queued connection.

        Returns:
            Connection ID, or None if the queue is empty
        """
        if not self._entries:
            return None

        connection_id, _ = self._entries.popitem(last=False)
        return connection_id

    def remove(self, connection_id: str) -> bool:
        """
        Remove an arbitrary connection from the queue.

        Args:
            connection_id: Connection to remove

        Returns:
            True if it was queued, False if absent (no-op)
        """
        if connection_id not in self._entries:
            return False

        del self._entries[connection_id]

        if self.reporter:
            self.reporter.debug(
                f"Connection left queue: conn={connection_id}, "
                f"remaining={len(self._entries)}",
                context="WaitingQueue",
            )

        return True

    def contains(self, connection_id: str) -> bool:
        """Check if connection is waiting."""
        return connection_id in self._entries

    def snapshot(self) -> List[str]:
        """Get queued connection IDs, oldest first."""
        return list(self._entries)

    def clear(self) -> None:
        """Drop every waiting connection."""
        self._entries.clear()

    def __contains__(self, connection_id: str) -> bool:
        return self.contains(connection_id)

    def __len__(self) -> int:
        return len(self._entries)

    def _log_ignored(self, connection_id: str, reason: str) -> None:
        if self.reporter:
            self.reporter.warning(
                f"{Emoji.CHAT.ANOMALY} Enqueue ignored: conn={connection_id}, "
                f"reason={reason}",
                context="WaitingQueue",
            )
