"""
Shutdown coordination for the matchmaking server.

SIGTERM and SIGINT start the same sequence a lifespan teardown starts:
refuse new sessions, run the registered callbacks (tell clients, close
sockets, stop uvicorn), then record completion.
"""

import asyncio
import signal
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji

ShutdownCallback = Callable[[], Union[None, Awaitable[None]]]

HANDLED_SIGNALS = (signal.SIGTERM, signal.SIGINT)


class ShutdownState(Enum):
    """Lifecycle phase of the server process."""

    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    SHUTDOWN = "shutdown"


class ShutdownManager:
    """
    Owns the shutdown phase and the callbacks that run when it starts.

    The sequence starts at most once, whoever asks first (a signal or
    the lifespan). Callbacks run in registration order; one failing does
    not stop the next.

    Attributes:
        state: Current lifecycle phase
        shutdown_timeout: Upper bound for uvicorn's own graceful stop
        grace_period: Seconds clients get between notice and close
        shutdown_reason: What started the sequence
    """

    def __init__(
        self,
        shutdown_timeout: int = 30,
        grace_period: float = 5.0,
        reporter: Optional[SystemReporter] = None,
    ):
        """
        Args:
            shutdown_timeout: Seconds uvicorn may spend on its own shutdown
            grace_period: Seconds between the shutdown notice and close
            reporter: Optional reporter for logging
        """
        self.shutdown_timeout = shutdown_timeout
        self.grace_period = grace_period
        self.reporter = reporter

        self.state = ShutdownState.RUNNING
        self.shutdown_reason: Optional[str] = None
        self.shutdown_started_at: Optional[datetime] = None

        self._callbacks: List[ShutdownCallback] = []
        self._started = asyncio.Event()
        self._previous_handlers: Dict[int, Any] = {}
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def is_running(self) -> bool:
        return self.state is ShutdownState.RUNNING

    def is_shutting_down(self) -> bool:
        """True from the moment the sequence starts, including after it ends."""
        return not self.is_running()

    def register_shutdown_callback(self, callback: ShutdownCallback) -> None:
        """Add a sync or async callable to run when shutdown starts."""
        self._callbacks.append(callback)

    # ============================================================
    # Signals
    # ============================================================

    def setup_signal_handlers(self) -> None:
        """
        Route SIGTERM and SIGINT into initiate_shutdown().

        Call from inside the running loop; the handlers schedule onto it.
        """
        self._loop = asyncio.get_running_loop()
        for sig in HANDLED_SIGNALS:
            self._previous_handlers[sig] = signal.getsignal(sig)
            signal.signal(sig, self._handle_signal)

    def restore_signal_handlers(self) -> None:
        """Put back whatever handlers were installed before."""
        while self._previous_handlers:
            sig, handler = self._previous_handlers.popitem()
            signal.signal(sig, handler)

    def _handle_signal(self, signum: int, frame) -> None:
        if self._loop is None:
            return

        reason = signal.Signals(signum).name
        loop = self._loop
        loop.call_soon_threadsafe(
            lambda: loop.create_task(self.initiate_shutdown(reason))
        )

    # ============================================================
    # Sequence
    # ============================================================

    async def initiate_shutdown(self, reason: str = "manual") -> None:
        """
        Enter SHUTTING_DOWN and run every callback. No-op after the first call.

        Args:
            reason: What triggered it (signal name, "lifespan", ...)
        """
        if not self.is_running():
            return

        self.state = ShutdownState.SHUTTING_DOWN
        self.shutdown_reason = reason
        self.shutdown_started_at = datetime.utcnow()
        self._started.set()

        if self.reporter:
            self.reporter.warning(
                f"{Emoji.SYSTEM.SHUTDOWN} Shutdown started: reason={reason}, "
                f"callbacks={len(self._callbacks)}",
                context="ShutdownManager",
                verbose_level=0,
            )

        for callback in self._callbacks:
            try:
                outcome = callback()
                if asyncio.iscoroutine(outcome):
                    await outcome
            except Exception as e:
                if self.reporter:
                    self.reporter.error(
                        f"{Emoji.ERROR.ERROR} Shutdown callback "
                        f"{getattr(callback, '__name__', callback)!s} failed: "
                        f"{type(e).__name__}: {e}",
                        context="ShutdownManager",
                    )

    async def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the sequence has started.

        Returns:
            False if timeout elapsed first
        """
        try:
            await asyncio.wait_for(self._started.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True

    def mark_shutdown_complete(self) -> None:
        self.state = ShutdownState.SHUTDOWN

        if self.reporter:
            self.reporter.info(
                f"{Emoji.SYSTEM.SHUTDOWN} Shutdown complete",
                context="ShutdownManager",
                verbose_level=2,
            )

    def get_shutdown_info(self) -> Dict[str, Any]:
        """Snapshot for /stats and the readiness probe."""
        started = self.shutdown_started_at
        return {
            "state": self.state.value,
            "is_shutting_down": self.is_shutting_down(),
            "reason": self.shutdown_reason,
            "shutdown_started_at": started.isoformat() if started else None,
            "shutdown_timeout": self.shutdown_timeout,
            "grace_period": self.grace_period,
        }
