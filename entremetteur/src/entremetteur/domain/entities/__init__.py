"""
Domain entities for Entremetteur.
"""

from entremetteur.domain.entities.connection import (
    Connection,
    generate_connection_id,
)
from entremetteur.domain.entities.room import Room

__all__ = ["Connection", "Room", "generate_connection_id"]
