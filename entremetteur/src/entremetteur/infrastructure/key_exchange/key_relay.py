"""
Key exchange relay - stores each connection's latest public key.
"""

from typing import Dict, Optional

from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji

from entremetteur.domain.value_objects import PublicKeyRecord
from entremetteur.infrastructure.matchmaking import RoomRegistry


class KeyExchangeRelay:
    """
    Holds PublicKeyRecords and resolves who should receive them.

    Keys are opaque: never parsed, never validated beyond being
    non-empty strings. A record belongs to its publisher only; a
    partner leaving does not touch it.
    """

    def __init__(
        self,
        room_registry: RoomRegistry,
        reporter: Optional[SystemReporter] = None,
    ):
        self.room_registry = room_registry
        self.reporter = reporter
        self._records: Dict[str, PublicKeyRecord] = {}

    def publish(self, connection_id: str, public_key: str) -> Optional[str]:
        """
        Store (or overwrite) the connection's key.

        Args:
            connection_id: Publishing connection
            public_key: Opaque key payload

        Returns:
            Partner ID the key should be forwarded to, or None if unpaired
        """
        replaced = connection_id in self._records
        self._records[connection_id] = PublicKeyRecord(
            connection_id=connection_id,
            public_key=public_key,
        )

        partner_id = self.room_registry.partner_of(connection_id)

        if self.reporter:
            self.reporter.info(
                f"{Emoji.CHAT.KEY} Public key stored: conn={connection_id}, "
                f"replaced={replaced}, forward_to={partner_id}",
                context="KeyExchangeRelay",
                verbose_level=2,
            )

        return partner_id

    def get(self, connection_id: str) -> Optional[PublicKeyRecord]:
        """Get the latest key record of a connection."""
        return self._records.get(connection_id)

    def discard(self, connection_id: str) -> bool:
        """
        Drop the connection's key (on its own disconnect).

        Returns:
            True if a record existed
        """
        return self._records.pop(connection_id, None) is not None

    def clear(self) -> None:
        """Drop all records."""
        self._records.clear()

    def count(self) -> int:
        """Get number of stored keys."""
        return len(self._records)
