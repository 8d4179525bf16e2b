"""
PublicKeyRecord value object - most recently published key of a connection.
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class PublicKeyRecord:
    """
    Opaque key-exchange payload published by a connection.

    The server never inspects the key; it only stores and forwards it.
    """

    connection_id: str
    public_key: str
    published_at: datetime = field(default_factory=datetime.utcnow)
