"""
Session coordinator - the single owner of all matchmaking state.

Every inbound event and every disconnect is applied inside one
asyncio.Lock critical section. Handlers are synchronous: they mutate
state and hand outbound events to the emitter without awaiting, so no
other event can observe a half-applied transition.
"""

import asyncio
import time
from typing import Callable, Dict, Optional, Type

from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji

from entremetteur.application.dto import SessionInfo
from entremetteur.application.emitter import EventEmitter
from entremetteur.domain.entities import Connection, Room
from entremetteur.domain.events import (
    INBOUND_EVENT_TYPES,
    ChatStartEvent,
    DeleteMessageEvent,
    EditMessageEvent,
    ExchangeKeysEvent,
    InboundEvent,
    JoinQueueEvent,
    MessageDeletedEvent,
    MessageEditedEvent,
    PartnerDisconnectedEvent,
    PartnerPublicKeyEvent,
    PartnerStopTypingEvent,
    PartnerTypingEvent,
    RateLimitExceededEvent,
    ReceiveMessageEvent,
    RoomScopedEvent,
    SendMessageEvent,
    SkipEvent,
    StopTypingEvent,
    TypingEvent,
)
from entremetteur.domain.exceptions import MatchmakingError, UnknownConnectionError
from entremetteur.domain.value_objects import ConnectionState, DisplayName
from entremetteur.infrastructure.key_exchange import KeyExchangeRelay
from entremetteur.infrastructure.matchmaking import RoomRegistry, WaitingQueue
from entremetteur.infrastructure.monitoring import metrics
from entremetteur.infrastructure.rate_limiting import FixedWindowRateLimiter

Handler = Callable[[Connection, InboundEvent], None]


class SessionCoordinator:
    """
    Runs the per-connection state machine (Idle, Queued, Paired).

    Owns the connection table, waiting queue, room registry, message
    rate limiter and key relay. Nothing else mutates them.
    """

    def __init__(
        self,
        emitter: EventEmitter,
        waiting_queue: Optional[WaitingQueue] = None,
        room_registry: Optional[RoomRegistry] = None,
        rate_limiter: Optional[FixedWindowRateLimiter] = None,
        key_relay: Optional[KeyExchangeRelay] = None,
        max_username_length: int = DisplayName.MAX_LENGTH,
        default_username: str = DisplayName.DEFAULT,
        forward_keys_on_pair: bool = False,
        reporter: Optional[SystemReporter] = None,
    ):
        """
        Initialize coordinator.

        Args:
            emitter: Outbound delivery port
            waiting_queue: Queue of waiting connections
            room_registry: Registry of active rooms (must share the queue)
            rate_limiter: Per-connection message limiter
            key_relay: Public key store
            max_username_length: Display name truncation length
            default_username: Name used when none is usable
            forward_keys_on_pair: Send stored keys to both members on match
            reporter: Optional reporter for logging

        Raises:
            RuntimeError: If the handler table misses an inbound event type
            ValueError: If room_registry is bound to a different queue
        """
        self.emitter = emitter
        self.reporter = reporter

        # Explicit None checks: an empty queue is falsy
        if waiting_queue is None:
            waiting_queue = WaitingQueue(reporter=reporter)
        if room_registry is None:
            room_registry = RoomRegistry(waiting_queue, reporter=reporter)
        if rate_limiter is None:
            rate_limiter = FixedWindowRateLimiter()
        if key_relay is None:
            key_relay = KeyExchangeRelay(room_registry, reporter=reporter)

        if room_registry.waiting_queue is not waiting_queue:
            raise ValueError("room_registry must draw from the same waiting_queue")

        self.waiting_queue = waiting_queue
        self.room_registry = room_registry
        self.rate_limiter = rate_limiter
        self.key_relay = key_relay

        self.max_username_length = max_username_length
        self.default_username = default_username
        self.forward_keys_on_pair = forward_keys_on_pair

        self._connections: Dict[str, Connection] = {}
        self._lock = asyncio.Lock()

        self._handlers: Dict[Type[InboundEvent], Handler] = {
            JoinQueueEvent: self._on_join_queue,
            ExchangeKeysEvent: self._on_exchange_keys,
            SendMessageEvent: self._on_send_message,
            TypingEvent: self._on_typing,
            StopTypingEvent: self._on_stop_typing,
            EditMessageEvent: self._on_edit_message,
            DeleteMessageEvent: self._on_delete_message,
            SkipEvent: self._on_skip,
        }
        missing = set(INBOUND_EVENT_TYPES.values()) - set(self._handlers)
        if missing:
            names = sorted(event_type.name for event_type in missing)
            raise RuntimeError(f"No handler for inbound events: {names}")

        self.stats = {
            "connections_total": 0,
            "events_dispatched": 0,
            "matches": 0,
            "messages_relayed": 0,
            "rate_limited": 0,
            "anomalies": 0,
            "stale_room_drops": 0,
            "handler_errors": 0,
        }

    # ============================================================
    # Session lifecycle
    # ============================================================

    def connect(
        self,
        connection_id: Optional[str] = None,
        remote_address: Optional[str] = None,
    ) -> Connection:
        """
        Register a new session in the Idle state.

        Registration touches only the connection table, so it does not
        need the lock.

        Args:
            connection_id: Optional server-assigned ID (generated if omitted)
            remote_address: Optional client address

        Returns:
            The new Connection
        """
        connection = Connection(
            connection_id=connection_id,
            display_name=DisplayName.sanitize(
                None, self.max_username_length, self.default_username
            ),
            remote_address=remote_address,
        )
        self._connections[connection.id] = connection
        self.stats["connections_total"] += 1

        if self.reporter:
            self.reporter.debug(
                f"Session registered: conn={connection.id}, "
                f"sessions={len(self._connections)}",
                context="SessionCoordinator",
            )

        return connection

    async def dispatch(self, connection_id: str, event: InboundEvent) -> None:
        """
        Apply one inbound event under the coordinator lock.

        Errors raised by a handler are logged and the event is dropped;
        they never reach the transport.

        Args:
            connection_id: Sending connection
            event: Parsed inbound event
        """
        async with self._lock:
            self.handle(connection_id, event)

    def handle(self, connection_id: str, event: InboundEvent) -> None:
        """
        Apply one inbound event. Caller must hold the lock.

        Args:
            connection_id: Sending connection
            event: Parsed inbound event
        """
        connection = self._connections.get(connection_id)
        if connection is None:
            # Cleanup already ran for this identity
            if self.reporter:
                self.reporter.debug(
                    f"Event after cleanup dropped: conn={connection_id}, "
                    f"event={event.name}",
                    context="SessionCoordinator",
                )
            return

        handler = self._handlers[type(event)]
        self.stats["events_dispatched"] += 1
        metrics.inbound_events_total.labels(event=event.name).inc()

        try:
            handler(connection, event)
        except MatchmakingError as e:
            self._note_anomaly(connection_id, event.name, str(e))
        except Exception as e:
            self.stats["handler_errors"] += 1
            if self.reporter:
                self.reporter.error(
                    f"{Emoji.ERROR.ERROR} Handler failed: conn={connection_id}, "
                    f"event={event.name}, error={type(e).__name__}: {e}",
                    context="SessionCoordinator",
                )

    async def disconnect(self, connection_id: str) -> None:
        """
        Tear down a session under the coordinator lock.

        Idempotent. Once it returns, no event from this identity is
        processed.
        """
        async with self._lock:
            self.terminate(connection_id)

    def terminate(self, connection_id: str) -> None:
        """
        Tear down a session. Caller must hold the lock.

        Removes the connection from the queue, dissolves its room (the
        partner is notified), discards its rate and key records and
        forgets it.
        """
        connection = self._connections.pop(connection_id, None)
        if connection is None:
            return

        was_queued = self.waiting_queue.remove(connection_id)
        partner_id = self.room_registry.dissolve(connection_id)
        if partner_id is not None:
            metrics.rooms_dissolved_total.labels(reason="disconnect").inc()
            self.emitter.emit(partner_id, PartnerDisconnectedEvent())

        self.rate_limiter.forget(connection_id)
        self.key_relay.discard(connection_id)
        self._update_gauges()

        if self.reporter:
            self.reporter.info(
                f"{Emoji.NETWORK.DISCONNECT} Session ended: conn={connection_id}, "
                f"was_queued={was_queued}, partner_notified={partner_id}, "
                f"sessions={len(self._connections)}",
                context="SessionCoordinator",
                verbose_level=2,
            )

    # ============================================================
    # Queries
    # ============================================================

    def get_connection(self, connection_id: str) -> Connection:
        """
        Get a registered connection.

        Raises:
            UnknownConnectionError: If the connection is not registered
        """
        connection = self._connections.get(connection_id)
        if connection is None:
            raise UnknownConnectionError(connection_id)
        return connection

    def get_state(self, connection_id: str) -> ConnectionState:
        """
        Get the matchmaking state of a connection.

        Raises:
            UnknownConnectionError: If the connection is not registered
        """
        self.get_connection(connection_id)
        if self.room_registry.is_paired(connection_id):
            return ConnectionState.PAIRED
        if connection_id in self.waiting_queue:
            return ConnectionState.QUEUED
        return ConnectionState.IDLE

    def describe(self, connection_id: str) -> SessionInfo:
        """Build a SessionInfo snapshot for a connection."""
        connection = self.get_connection(connection_id)
        state = self.get_state(connection_id)
        room = self.room_registry.lookup(connection_id)

        queue_position = None
        if state == ConnectionState.QUEUED:
            queue_position = self.waiting_queue.snapshot().index(connection_id) + 1

        return SessionInfo(
            connection_id=connection.id,
            username=connection.username,
            state=state,
            room_id=room.id if room else None,
            partner_id=room.partner_of(connection_id) if room else None,
            queue_position=queue_position,
            connected_at=connection.connected_at.isoformat(),
        )

    def session_count(self) -> int:
        """Get number of live sessions."""
        return len(self._connections)

    def get_stats(self) -> Dict[str, int]:
        """Get counters plus current queue and room sizes."""
        return {
            **self.stats,
            "sessions": len(self._connections),
            "waiting": len(self.waiting_queue),
            "active_rooms": self.room_registry.room_count(),
            "stored_keys": self.key_relay.count(),
        }

    # ============================================================
    # Handlers
    # ============================================================

    def _on_join_queue(self, connection: Connection, event: JoinQueueEvent) -> None:
        if self.room_registry.is_paired(connection.id):
            self._note_anomaly(connection.id, event.name, "already paired")
            return
        if connection.id in self.waiting_queue:
            self._note_anomaly(connection.id, event.name, "already queued")
            return

        connection.update_profile(
            DisplayName.sanitize(
                event.username, self.max_username_length, self.default_username
            ),
            event.profile_pic if isinstance(event.profile_pic, str) else None,
        )

        room = self.room_registry.pair_with_oldest(connection.id)
        if room is None:
            self.room_registry.enqueue(connection.id)
        else:
            self._announce_room(room)

        self._update_gauges()

    def _on_exchange_keys(
        self, connection: Connection, event: ExchangeKeysEvent
    ) -> None:
        partner_id = self.key_relay.publish(connection.id, event.public_key)
        if partner_id is not None:
            self.emitter.emit(
                partner_id, PartnerPublicKeyEvent(public_key=event.public_key)
            )

    def _on_send_message(
        self, connection: Connection, event: SendMessageEvent
    ) -> None:
        if not self.rate_limiter.admit(connection.id):
            self.stats["rate_limited"] += 1
            metrics.rate_limited_messages_total.inc()
            self.emitter.emit(connection.id, RateLimitExceededEvent())
            if self.reporter:
                self.reporter.warning(
                    f"{Emoji.CHAT.RATE_LIMIT} Message rate exceeded: "
                    f"conn={connection.id}",
                    context="SessionCoordinator",
                    verbose_level=2,
                )
            return

        partner_id = self._resolve_partner(connection.id, event)
        if partner_id is None:
            return

        message_id = event.message_id
        if message_id is None:
            message_id = int(time.time() * 1000)

        self.emitter.emit(
            partner_id,
            ReceiveMessageEvent(
                message_id=message_id,
                text=event.text,
                type=event.type,
                file_content=event.file_content,
                file_type=event.file_type,
                reply_to=(
                    event.reply_to.model_dump(exclude_unset=True)
                    if event.reply_to is not None
                    else None
                ),
                encrypted=event.encrypted,
            ),
        )
        self.stats["messages_relayed"] += 1
        metrics.messages_relayed_total.labels(type=event.type).inc()

        if self.reporter:
            emoji = Emoji.CHAT.FILE if event.type == "file" else Emoji.CHAT.MESSAGE
            self.reporter.debug(
                f"{emoji} Message relayed: from={connection.id}, "
                f"to={partner_id}, id={message_id}",
                context="SessionCoordinator",
            )

    def _on_typing(self, connection: Connection, event: TypingEvent) -> None:
        partner_id = self._resolve_partner(connection.id, event)
        if partner_id is not None:
            self.emitter.emit(partner_id, PartnerTypingEvent())

    def _on_stop_typing(self, connection: Connection, event: StopTypingEvent) -> None:
        partner_id = self._resolve_partner(connection.id, event)
        if partner_id is not None:
            self.emitter.emit(partner_id, PartnerStopTypingEvent())

    def _on_edit_message(
        self, connection: Connection, event: EditMessageEvent
    ) -> None:
        # Authorship is the clients' concern; no history is kept here
        partner_id = self._resolve_partner(connection.id, event)
        if partner_id is None:
            return

        self.emitter.emit(
            partner_id,
            MessageEditedEvent(message_id=event.message_id, text=event.text),
        )
        if self.reporter:
            self.reporter.debug(
                f"{Emoji.CHAT.EDIT} Edit relayed: from={connection.id}, "
                f"id={event.message_id}",
                context="SessionCoordinator",
            )

    def _on_delete_message(
        self, connection: Connection, event: DeleteMessageEvent
    ) -> None:
        partner_id = self._resolve_partner(connection.id, event)
        if partner_id is None:
            return

        self.emitter.emit(partner_id, MessageDeletedEvent(message_id=event.message_id))
        if self.reporter:
            self.reporter.debug(
                f"{Emoji.CHAT.DELETE} Delete relayed: from={connection.id}, "
                f"id={event.message_id}",
                context="SessionCoordinator",
            )

    def _on_skip(self, connection: Connection, event: SkipEvent) -> None:
        partner_id = self.room_registry.dissolve(connection.id)
        if partner_id is not None:
            metrics.rooms_dissolved_total.labels(reason="skip").inc()
            self.emitter.emit(partner_id, PartnerDisconnectedEvent())
            if self.reporter:
                self.reporter.info(
                    f"{Emoji.CHAT.SKIP} Skipped partner: conn={connection.id}, "
                    f"partner={partner_id}",
                    context="SessionCoordinator",
                    verbose_level=2,
                )
        elif self.waiting_queue.remove(connection.id):
            if self.reporter:
                self.reporter.info(
                    f"{Emoji.CHAT.SKIP} Left queue: conn={connection.id}",
                    context="SessionCoordinator",
                    verbose_level=2,
                )
        else:
            self._note_anomaly(connection.id, event.name, "nothing to skip")

        self._update_gauges()

    # ============================================================
    # Helpers
    # ============================================================

    def _announce_room(self, room: Room) -> None:
        """Send chat_start (and optionally stored keys) to both members."""
        for member_id in room.members:
            partner = self._connections[room.partner_of(member_id)]
            self.emitter.emit(
                member_id,
                ChatStartEvent(
                    room_id=room.id,
                    partner_name=partner.username,
                    partner_profile_pic=partner.profile_pic,
                ),
            )

        if self.forward_keys_on_pair:
            for member_id in room.members:
                record = self.key_relay.get(room.partner_of(member_id))
                if record is not None:
                    self.emitter.emit(
                        member_id,
                        PartnerPublicKeyEvent(public_key=record.public_key),
                    )

        self.stats["matches"] += 1
        metrics.matches_total.inc()

        if self.reporter:
            self.reporter.info(
                f"{Emoji.CHAT.MATCH} Matched: room={room.id}, "
                f"waiting={len(self.waiting_queue)}",
                context="SessionCoordinator",
            )

    def _resolve_partner(
        self, connection_id: str, event: RoomScopedEvent
    ) -> Optional[str]:
        """
        Find the partner for a room-scoped event.

        Returns None (drop) when unpaired or when the event names a room
        other than the sender's current one.
        """
        room = self.room_registry.lookup(connection_id)
        if room is None:
            return None

        if event.room_id is not None and event.room_id != room.id:
            self.stats["stale_room_drops"] += 1
            if self.reporter:
                self.reporter.warning(
                    f"{Emoji.CHAT.ANOMALY} Stale room event dropped: "
                    f"conn={connection_id}, event={event.name}, "
                    f"claimed={event.room_id}, current={room.id}",
                    context="SessionCoordinator",
                    verbose_level=2,
                )
            return None

        return room.partner_of(connection_id)

    def _note_anomaly(self, connection_id: str, event_name: str, reason: str) -> None:
        self.stats["anomalies"] += 1
        if self.reporter:
            self.reporter.warning(
                f"{Emoji.CHAT.ANOMALY} Ignored {event_name}: "
                f"conn={connection_id}, reason={reason}",
                context="SessionCoordinator",
                verbose_level=2,
            )

    def _update_gauges(self) -> None:
        metrics.waiting_queue_depth.set(len(self.waiting_queue))
        metrics.active_rooms.set(self.room_registry.room_count())
