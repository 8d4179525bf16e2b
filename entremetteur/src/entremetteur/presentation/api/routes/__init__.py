"""
API routes for Entremetteur.
"""

from entremetteur.presentation.api.routes.health import router as health_router
from entremetteur.presentation.api.routes.metrics import router as metrics_router
from entremetteur.presentation.api.routes.stats import router as stats_router
from entremetteur.presentation.api.routes.websocket import (
    router as websocket_router,
)

__all__ = ["health_router", "metrics_router", "stats_router", "websocket_router"]
