"""
Dependency Injection container for Entremetteur.

Manages lifecycle and dependencies of all application components.
"""

from datetime import datetime
from typing import Callable, Optional

from shared.reporter import SystemReporter

from entremetteur.application.use_cases import (
    SessionCoordinator,
    ValidateMessageUseCase,
)
from entremetteur.config.settings import Settings
from entremetteur.infrastructure.key_exchange import KeyExchangeRelay
from entremetteur.infrastructure.matchmaking import RoomRegistry, WaitingQueue
from entremetteur.infrastructure.monitoring import EntremetteurHealthChecker
from entremetteur.infrastructure.rate_limiting import FixedWindowRateLimiter
from entremetteur.infrastructure.shutdown import ShutdownManager
from entremetteur.infrastructure.websocket import ConnectionManager


class Container:
    """
    Dependency Injection container.

    Creates and manages all application dependencies.
    Implements singleton pattern for shared resources.
    """

    def __init__(
        self,
        settings: Settings,
        reporter: Optional[SystemReporter] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize container with settings.

        Args:
            settings: Application settings
            reporter: Optional reporter shared by all components
            clock: Optional time source for both rate limiters
        """
        self.settings = settings
        self.reporter = reporter or SystemReporter(
            name="entremetteur", verbose=settings.log_verbose
        )
        self.clock = clock

        self._connection_manager: Optional[ConnectionManager] = None
        self._waiting_queue: Optional[WaitingQueue] = None
        self._room_registry: Optional[RoomRegistry] = None
        self._key_relay: Optional[KeyExchangeRelay] = None
        self._session_coordinator: Optional[SessionCoordinator] = None
        self._validate_message_use_case: Optional[ValidateMessageUseCase] = None
        self._shutdown_manager: Optional[ShutdownManager] = None
        self._health_checker: Optional[EntremetteurHealthChecker] = None

        # Rate limiters
        self._message_rate_limiter: Optional[FixedWindowRateLimiter] = None
        self._http_rate_limiter: Optional[FixedWindowRateLimiter] = None

        # Transport statistics (matchmaking counters live on the coordinator)
        self.stats = {
            "total_connections": 0,
            "total_frames_received": 0,
            "validation_failures": 0,
            "connection_rejections": 0,
            "connection_rejections_by_type": {},
            "start_time": datetime.utcnow(),
        }

    @property
    def connection_manager(self) -> ConnectionManager:
        """Get ConnectionManager singleton with configured limits."""
        if self._connection_manager is None:
            self._connection_manager = ConnectionManager(
                max_total_connections=self.settings.max_total_connections,
                outbox_size=self.settings.outbox_size,
                reporter=self.reporter,
            )
        return self._connection_manager

    @property
    def waiting_queue(self) -> WaitingQueue:
        """Get WaitingQueue singleton."""
        if self._waiting_queue is None:
            self._waiting_queue = WaitingQueue(reporter=self.reporter)
        return self._waiting_queue

    @property
    def room_registry(self) -> RoomRegistry:
        """Get RoomRegistry singleton bound to the waiting queue."""
        if self._room_registry is None:
            self._room_registry = RoomRegistry(
                self.waiting_queue, reporter=self.reporter
            )
        return self._room_registry

    @property
    def key_relay(self) -> KeyExchangeRelay:
        """Get KeyExchangeRelay singleton."""
        if self._key_relay is None:
            self._key_relay = KeyExchangeRelay(
                self.room_registry, reporter=self.reporter
            )
        return self._key_relay

    @property
    def message_rate_limiter(self) -> FixedWindowRateLimiter:
        """Get per-connection chat message limiter singleton."""
        if self._message_rate_limiter is None:
            self._message_rate_limiter = FixedWindowRateLimiter(
                limit=self.settings.message_rate_limit,
                window_seconds=self.settings.message_rate_window_seconds,
                clock=self.clock,
            )
        return self._message_rate_limiter

    @property
    def http_rate_limiter(self) -> Optional[FixedWindowRateLimiter]:
        """
        Get per-IP HTTP limiter singleton.

        Returns:
            FixedWindowRateLimiter if HTTP rate limiting enabled, None otherwise
        """
        if not self.settings.http_rate_limit_enabled:
            return None

        if self._http_rate_limiter is None:
            self._http_rate_limiter = FixedWindowRateLimiter(
                limit=self.settings.http_rate_limit_requests,
                window_seconds=self.settings.http_rate_limit_window_seconds,
                max_tracked=self.settings.http_rate_limit_max_tracked,
                clock=self.clock,
            )
        return self._http_rate_limiter

    @property
    def session_coordinator(self) -> SessionCoordinator:
        """Get SessionCoordinator singleton wired to the connection manager."""
        if self._session_coordinator is None:
            self._session_coordinator = SessionCoordinator(
                emitter=self.connection_manager,
                waiting_queue=self.waiting_queue,
                room_registry=self.room_registry,
                rate_limiter=self.message_rate_limiter,
                key_relay=self.key_relay,
                max_username_length=self.settings.max_username_length,
                default_username=self.settings.default_username,
                forward_keys_on_pair=self.settings.forward_keys_on_pair,
                reporter=self.reporter,
            )
        return self._session_coordinator

    @property
    def validate_message_use_case(self) -> ValidateMessageUseCase:
        """Get ValidateMessageUseCase singleton."""
        if self._validate_message_use_case is None:
            self._validate_message_use_case = ValidateMessageUseCase(
                max_message_size=self.settings.max_message_size,
            )
        return self._validate_message_use_case

    @property
    def shutdown_manager(self) -> ShutdownManager:
        """Get ShutdownManager singleton."""
        if self._shutdown_manager is None:
            self._shutdown_manager = ShutdownManager(
                shutdown_timeout=self.settings.shutdown_timeout,
                grace_period=self.settings.shutdown_grace_period,
                reporter=self.reporter,
            )
        return self._shutdown_manager

    @property
    def health_checker(self) -> EntremetteurHealthChecker:
        """Get EntremetteurHealthChecker singleton."""
        if self._health_checker is None:
            self._health_checker = EntremetteurHealthChecker(
                settings=self.settings,
                connection_manager=self.connection_manager,
                coordinator=self.session_coordinator,
                shutdown_manager=self.shutdown_manager,
            )
        return self._health_checker

    def record_rejection(self, limit_type: str) -> None:
        """Count a refused WebSocket handshake."""
        self.stats["connection_rejections"] += 1
        by_type = self.stats["connection_rejections_by_type"]
        by_type[limit_type] = by_type.get(limit_type, 0) + 1

    def get_uptime_seconds(self) -> float:
        """Get seconds since the container was created."""
        return (datetime.utcnow() - self.stats["start_time"]).total_seconds()
