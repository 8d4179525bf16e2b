"""
Outbound delivery port used by the session coordinator.
"""

from typing import Protocol

from entremetteur.domain.events import OutboundEvent


class EventEmitter(Protocol):
    """
    Fire-and-forget delivery of one event to one connection.

    Implementations must not block and must not raise when the target
    connection is gone; such deliveries are dropped.
    """

    def emit(self, connection_id: str, event: OutboundEvent) -> None:
        ...
