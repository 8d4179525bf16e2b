"""
Graceful shutdown infrastructure.
"""

from entremetteur.infrastructure.shutdown.shutdown_manager import (
    ShutdownManager,
    ShutdownState,
)

__all__ = ["ShutdownManager", "ShutdownState"]
