"""
WebSocket connection manager infrastructure with production logging.
"""

import asyncio
from typing import Any, Dict, List, Optional

from fastapi import WebSocket
from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji

from entremetteur.domain.events import OutboundEvent
from entremetteur.infrastructure.monitoring import metrics


class ConnectionLimitExceeded(Exception):
    """Raised when connection limit is exceeded."""

    def __init__(self, message: str, limit_type: str):
        super().__init__(message)
        self.limit_type = limit_type


class _Outlet:
    """Socket, pending-frame queue and writer task of one connection."""

    def __init__(self, websocket: WebSocket, outbox: asyncio.Queue):
        self.websocket = websocket
        self.outbox = outbox
        self.writer: Optional[asyncio.Task] = None


class ConnectionManager:
    """
    Owns open WebSockets and delivers outbound events to them.

    Delivery is fire-and-forget: emit() enqueues a frame on the target's
    outbox and returns; a per-connection writer task performs the send.
    A full outbox or an unknown target drops the frame.
    """

    def __init__(
        self,
        max_total_connections: int = 0,
        outbox_size: int = 256,
        drain_timeout: float = 1.0,
        reporter: Optional[SystemReporter] = None,
    ):
        self.max_total_connections = max_total_connections
        self.outbox_size = outbox_size
        self.drain_timeout = drain_timeout
        self.reporter = reporter
        self._outlets: Dict[str, _Outlet] = {}

        if self.reporter:
            self.reporter.info(
                f"ConnectionManager initialized (limits: "
                f"total={max_total_connections}, outbox={outbox_size})",
                context="ConnectionManager",
                verbose_level=2,
            )

    def check_connection_limits(self) -> None:
        """
        Check if a new connection would exceed the global cap.

        Raises:
            ConnectionLimitExceeded: If the cap is reached
        """
        if self.max_total_connections <= 0:
            return

        total = self.get_total_connections()
        if total >= self.max_total_connections:
            if self.reporter:
                self.reporter.warning(
                    f"{Emoji.NETWORK.REJECTED} Global connection limit exceeded "
                    f"(current={total}, limit={self.max_total_connections})",
                    context="ConnectionManager",
                    verbose_level=1,
                )
            raise ConnectionLimitExceeded(
                f"Global connection limit reached: {self.max_total_connections}",
                limit_type="global",
            )

    def register(self, connection_id: str, websocket: WebSocket) -> None:
        """
        Attach an accepted WebSocket and start its writer task.

        Must be called from the running event loop.
        """
        self.check_connection_limits()

        outlet = _Outlet(websocket, asyncio.Queue(maxsize=self.outbox_size))
        outlet.writer = asyncio.create_task(
            self._drain(connection_id, outlet),
            name=f"writer-{connection_id}",
        )
        self._outlets[connection_id] = outlet
        metrics.ws_active_connections.set(len(self._outlets))

        if self.reporter:
            self.reporter.info(
                f"{Emoji.NETWORK.CONNECTED} Connection registered: "
                f"conn={connection_id}, total={len(self._outlets)}",
                context="ConnectionManager",
                verbose_level=2,
            )

    async def unregister(self, connection_id: str) -> None:
        """
        Detach a connection, letting its writer flush what it can.

        Idempotent.
        """
        outlet = self._outlets.pop(connection_id, None)
        if outlet is None:
            return

        metrics.ws_active_connections.set(len(self._outlets))

        try:
            outlet.outbox.put_nowait(None)
        except asyncio.QueueFull:
            outlet.writer.cancel()

        done, _ = await asyncio.wait({outlet.writer}, timeout=self.drain_timeout)
        if not done:
            outlet.writer.cancel()

        if self.reporter:
            self.reporter.info(
                f"{Emoji.NETWORK.DISCONNECT} Connection removed: "
                f"conn={connection_id}, total={len(self._outlets)}",
                context="ConnectionManager",
                verbose_level=2,
            )

    def emit(self, connection_id: str, event: OutboundEvent) -> None:
        """Queue an event for delivery. Never blocks, never raises."""
        outlet = self._outlets.get(connection_id)
        if outlet is None:
            metrics.ws_outbox_dropped_total.inc()
            if self.reporter:
                self.reporter.debug(
                    f"Emit to unknown connection dropped: conn={connection_id}, "
                    f"event={event.name}",
                    context="ConnectionManager",
                )
            return

        try:
            outlet.outbox.put_nowait(event.to_frame())
        except asyncio.QueueFull:
            metrics.ws_outbox_dropped_total.inc()
            if self.reporter:
                self.reporter.warning(
                    f"{Emoji.ERROR.WARNING} Outbox full, frame dropped: "
                    f"conn={connection_id}, event={event.name}",
                    context="ConnectionManager",
                )

    def broadcast(self, event: OutboundEvent) -> int:
        """
        Queue an event for every connection.

        Returns:
            Number of connections it was queued for
        """
        for connection_id in list(self._outlets):
            self.emit(connection_id, event)
        return len(self._outlets)

    async def close_all(self, code: int = 1001, reason: str = "") -> int:
        """
        Close every WebSocket and detach it.

        Returns:
            Number of connections closed
        """
        closed = 0
        for connection_id, outlet in list(self._outlets.items()):
            await self.unregister(connection_id)
            try:
                await outlet.websocket.close(code=code, reason=reason)
                closed += 1
            except Exception as e:
                # Already closed by the peer
                if self.reporter:
                    self.reporter.debug(
                        f"Close skipped: conn={connection_id}, error={e}",
                        context="ConnectionManager",
                    )

        if self.reporter:
            self.reporter.info(
                f"{Emoji.SYSTEM.CLEANUP} Closed all connections: "
                f"closed={closed}, code={code}",
                context="ConnectionManager",
            )

        return closed

    def is_registered(self, connection_id: str) -> bool:
        """Check if connection has an open outlet."""
        return connection_id in self._outlets

    def get_total_connections(self) -> int:
        """Get total number of active connections."""
        return len(self._outlets)

    def get_connection_ids(self) -> List[str]:
        """Get IDs of all active connections."""
        return list(self._outlets)

    def get_pending_frames(self, connection_id: str) -> int:
        """Get number of frames waiting in a connection's outbox."""
        outlet = self._outlets.get(connection_id)
        return outlet.outbox.qsize() if outlet else 0

    async def _drain(self, connection_id: str, outlet: _Outlet) -> None:
        """Writer task: send queued frames in order until the sentinel."""
        while True:
            frame: Optional[Dict[str, Any]] = await outlet.outbox.get()
            if frame is None:
                return

            try:
                await outlet.websocket.send_json(frame)
            except Exception as e:
                # Receive loop observes the disconnect and runs cleanup
                if self.reporter:
                    self.reporter.warning(
                        f"{Emoji.NETWORK.DISCONNECT} Send failed, writer stopped: "
                        f"conn={connection_id}, error={type(e).__name__}: {e}",
                        context="ConnectionManager",
                        verbose_level=2,
                    )
                return
