"""
Statistics API routes.

Operational counters for the matchmaking server.
"""

from fastapi import APIRouter, Depends

from entremetteur.di import Container
from entremetteur.presentation.api.dependencies import get_container

router = APIRouter(tags=["stats"])


@router.get("/stats")
def get_stats(container: Container = Depends(get_container)):
    """
    Get server statistics.

    Returns:
        Connections, queue depth, active rooms, coordinator counters
        and transport counters
    """
    connection_manager = container.connection_manager
    coordinator = container.session_coordinator
    transport = {
        key: value for key, value in container.stats.items() if key != "start_time"
    }

    return {
        "total_connections": connection_manager.get_total_connections(),
        "waiting": len(coordinator.waiting_queue),
        "active_rooms": coordinator.room_registry.room_count(),
        "uptime_seconds": round(container.get_uptime_seconds(), 1),
        "matchmaking": coordinator.get_stats(),
        "transport": transport,
        "limits": {
            "max_total_connections": connection_manager.max_total_connections,
            "message_rate_limit": container.settings.message_rate_limit,
            "message_rate_window_seconds": (
                container.settings.message_rate_window_seconds
            ),
            "max_message_size": container.settings.max_message_size,
        },
        "shutdown": container.shutdown_manager.get_shutdown_info(),
    }
