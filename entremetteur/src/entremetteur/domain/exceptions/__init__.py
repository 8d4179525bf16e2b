"""
Domain exceptions for Entremetteur.
"""

from entremetteur.domain.exceptions.frame_exceptions import InvalidFrameError
from entremetteur.domain.exceptions.matchmaking_exceptions import (
    AlreadyPairedError,
    MatchmakingError,
    SelfPairingError,
    UnknownConnectionError,
)

__all__ = [
    "AlreadyPairedError",
    "InvalidFrameError",
    "MatchmakingError",
    "SelfPairingError",
    "UnknownConnectionError",
]
