"""
Matchmaking infrastructure: waiting queue and room registry.
"""

from entremetteur.infrastructure.matchmaking.room_registry import RoomRegistry
from entremetteur.infrastructure.matchmaking.waiting_queue import WaitingQueue

__all__ = ["RoomRegistry", "WaitingQueue"]
