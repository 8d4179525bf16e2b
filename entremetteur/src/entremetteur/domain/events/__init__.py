"""
Event catalogue for the chat protocol.

Inbound events are the closed set of client requests; outbound events
are everything the server may emit to a connection.
"""

from typing import Union

from entremetteur.domain.events.inbound import (
    INBOUND_EVENT_TYPES,
    DeleteMessageEvent,
    EditMessageEvent,
    ExchangeKeysEvent,
    InboundEvent,
    JoinQueueEvent,
    ReplyReference,
    RoomScopedEvent,
    SendMessageEvent,
    SkipEvent,
    StopTypingEvent,
    TypingEvent,
    parse_inbound_event,
)
from entremetteur.domain.events.outbound import (
    RATE_LIMIT_MESSAGE,
    ChatStartEvent,
    MessageDeletedEvent,
    MessageEditedEvent,
    OutboundEvent,
    PartnerDisconnectedEvent,
    PartnerPublicKeyEvent,
    PartnerStopTypingEvent,
    PartnerTypingEvent,
    RateLimitExceededEvent,
    ReceiveMessageEvent,
    ShutdownNoticeEvent,
)

# Master union of client requests
ClientEvent = Union[
    JoinQueueEvent,
    ExchangeKeysEvent,
    SendMessageEvent,
    TypingEvent,
    StopTypingEvent,
    EditMessageEvent,
    DeleteMessageEvent,
    SkipEvent,
]

__all__ = [
    # Inbound
    "ClientEvent",
    "DeleteMessageEvent",
    "EditMessageEvent",
    "ExchangeKeysEvent",
    "INBOUND_EVENT_TYPES",
    "InboundEvent",
    "JoinQueueEvent",
    "ReplyReference",
    "RoomScopedEvent",
    "SendMessageEvent",
    "SkipEvent",
    "StopTypingEvent",
    "TypingEvent",
    "parse_inbound_event",
    # Outbound
    "ChatStartEvent",
    "MessageDeletedEvent",
    "MessageEditedEvent",
    "OutboundEvent",
    "PartnerDisconnectedEvent",
    "PartnerPublicKeyEvent",
    "PartnerStopTypingEvent",
    "PartnerTypingEvent",
    "RATE_LIMIT_MESSAGE",
    "RateLimitExceededEvent",
    "ReceiveMessageEvent",
    "ShutdownNoticeEvent",
]
