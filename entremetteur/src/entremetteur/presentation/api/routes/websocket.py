"""
WebSocket endpoint with Clean Architecture and production logging.
"""

import asyncio
import time
from typing import Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from shared.reporter.emojis import Emoji

from entremetteur.di import Container
from entremetteur.domain.entities import generate_connection_id
from entremetteur.infrastructure.monitoring import metrics
from entremetteur.infrastructure.websocket import ConnectionLimitExceeded
from entremetteur.presentation.api.dependencies import get_client_ip, get_container

router = APIRouter(tags=["websocket"])


@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    container: Container = Depends(get_container),
):
    """
    WebSocket endpoint for one chat participant.

    Rejects new connections during graceful shutdown (1001).
    Applies the per-IP limiter to the handshake (1008).
    Enforces the global connection cap (1013).
    Validates every frame, then hands typed events to the coordinator.
    Always runs session cleanup when the socket goes away.

    Frames (both directions): {"event": "<name>", "data": {...}}
    """
    connection_id = generate_connection_id()
    reporter = container.reporter
    client_ip = get_client_ip(
        websocket.headers,
        websocket.client.host if websocket.client else None,
        trust_forwarded_for=container.settings.trust_forwarded_for,
    )

    shutdown_manager = container.shutdown_manager
    if shutdown_manager.is_shutting_down():
        reporter.warning(
            f"{Emoji.NETWORK.REJECTED} Connection rejected: server shutting down "
            f"[conn={connection_id}] [ip={client_ip}]",
            context="WebSocket",
        )
        container.record_rejection("shutdown")
        metrics.ws_connections_total.labels(outcome="rejected_shutdown").inc()
        await websocket.close(
            code=status.WS_1001_GOING_AWAY,
            reason="Server is shutting down",
        )
        return

    http_limiter = container.http_rate_limiter
    if http_limiter and not http_limiter.admit(client_ip):
        reporter.warning(
            f"{Emoji.CHAT.RATE_LIMIT} Connection rejected: rate limit exceeded "
            f"[conn={connection_id}] [ip={client_ip}]",
            context="WebSocket",
        )
        container.record_rejection("rate_limit")
        metrics.ws_connections_total.labels(outcome="rejected_rate_limit").inc()
        await websocket.close(
            code=status.WS_1008_POLICY_VIOLATION,
            reason="Too many requests",
        )
        return

    await websocket.accept()

    conn_manager = container.connection_manager
    try:
        conn_manager.register(connection_id, websocket)
    except ConnectionLimitExceeded as e:
        reporter.warning(
            f"{Emoji.NETWORK.REJECTED} Connection rejected: {e.limit_type} limit "
            f"exceeded [conn={connection_id}] [ip={client_ip}]",
            context="WebSocket",
        )
        container.record_rejection(e.limit_type)
        metrics.ws_connections_total.labels(outcome="rejected_capacity").inc()
        await websocket.close(
            code=status.WS_1013_TRY_AGAIN_LATER,
            reason="Connection limit exceeded",
        )
        return

    coordinator = container.session_coordinator
    validate_msg_uc = container.validate_message_use_case
    coordinator.connect(connection_id, remote_address=client_ip)

    container.stats["total_connections"] += 1
    metrics.ws_connections_total.labels(outcome="accepted").inc()

    reporter.info(
        f"{Emoji.NETWORK.CONNECTED} Client connected [conn={connection_id}] "
        f"[ip={client_ip}] "
        f"[total_connections={conn_manager.get_total_connections()}]",
        context="WebSocket",
    )

    connection_start_time = time.time()
    frames_processed = 0
    validation_failures = 0
    close_code: Optional[int] = None

    try:
        while not shutdown_manager.is_shutting_down():
            try:
                message = await asyncio.wait_for(
                    websocket.receive(),
                    timeout=container.settings.receive_timeout,
                )
            except asyncio.TimeoutError:
                continue

            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(
                    code=message.get("code", status.WS_1000_NORMAL_CLOSURE)
                )

            data = message.get("text")
            if data is None and message.get("bytes") is not None:
                data = message["bytes"].decode("utf-8", errors="replace")
            if data is None:
                continue

            frames_processed += 1
            container.stats["total_frames_received"] += 1

            validation_result = validate_msg_uc.validate_message(data)
            if not validation_result.valid:
                validation_failures += 1
                container.stats["validation_failures"] += 1
                metrics.ws_invalid_frames_total.inc()
                reporter.warning(
                    f"{Emoji.ERROR.VALIDATION} Frame dropped [conn={connection_id}] "
                    f"[event={validation_result.event_name}] "
                    f"[errors={validation_result.errors}]",
                    context="WebSocket",
                    verbose_level=2,
                )
                continue

            await coordinator.dispatch(connection_id, validation_result.event)

    except WebSocketDisconnect as e:
        close_code = e.code
        reporter.info(
            f"{Emoji.NETWORK.DISCONNECT} Client disconnected "
            f"[conn={connection_id}] [code={e.code}]",
            context="WebSocket",
            verbose_level=2,
        )

    except Exception as e:
        reporter.error(
            f"{Emoji.ERROR.ERROR} WebSocket connection error [conn={connection_id}]: "
            f"{type(e).__name__}: {str(e)}",
            context="WebSocket",
        )

    finally:
        await coordinator.disconnect(connection_id)
        await conn_manager.unregister(connection_id)

        connection_duration = time.time() - connection_start_time
        reporter.info(
            f"Connection closed [conn={connection_id}] "
            f"[code={close_code}] "
            f"[duration={connection_duration:.2f}s] "
            f"[frames={frames_processed}] "
            f"[validation_failures={validation_failures}]",
            context="WebSocket",
        )
