"""
Inbound event schemas.

Every frame a client sends is parsed into exactly one of these models.
Field names follow Python style; aliases match the camelCase wire names.
"""

from typing import Any, ClassVar, Dict, Literal, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from entremetteur.domain.exceptions import InvalidFrameError

MessageId = Union[int, str]


class InboundEvent(BaseModel):
    """
    Base for all client-to-server events.

    Attributes:
        name: Wire event name (class-level)
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: ClassVar[str] = ""


class RoomScopedEvent(InboundEvent):
    """Event that carries the room id the client believes it is in."""

    room_id: Optional[str] = Field(None, alias="roomId")


class JoinQueueEvent(InboundEvent):
    """Request a partner. Username is untrusted and sanitized later."""

    name: ClassVar[str] = "join_queue"

    username: Any = None
    profile_pic: Any = Field(None, alias="profilePic")


class ExchangeKeysEvent(InboundEvent):
    """Publish this connection's public key."""

    name: ClassVar[str] = "exchange_keys"

    public_key: str = Field(..., alias="publicKey", min_length=1)


class ReplyReference(BaseModel):
    """Reference to the message being replied to, relayed as-is."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[MessageId] = None
    sender: Optional[str] = None
    text: Optional[str] = None


class SendMessageEvent(RoomScopedEvent):
    """Chat message (text or file) for the partner."""

    name: ClassVar[str] = "send_message"

    text: Optional[str] = None
    sender: Optional[str] = None
    type: Literal["text", "file"] = "text"
    file_content: Optional[str] = Field(None, alias="fileContent")
    file_type: Optional[str] = Field(None, alias="fileType")
    message_id: Optional[MessageId] = Field(None, alias="id")
    reply_to: Optional[ReplyReference] = Field(None, alias="replyTo")
    encrypted: Optional[Any] = None


class TypingEvent(RoomScopedEvent):
    """Sender started typing."""

    name: ClassVar[str] = "typing"


class StopTypingEvent(RoomScopedEvent):
    """Sender stopped typing."""

    name: ClassVar[str] = "stop_typing"


class EditMessageEvent(RoomScopedEvent):
    """Replace the text of a previously sent message."""

    name: ClassVar[str] = "edit_message"

    message_id: MessageId = Field(..., alias="id")
    text: str


class DeleteMessageEvent(RoomScopedEvent):
    """Mark a previously sent message as deleted."""

    name: ClassVar[str] = "delete_message"

    message_id: MessageId = Field(..., alias="id")


class SkipEvent(InboundEvent):
    """Leave the current room or the waiting queue."""

    name: ClassVar[str] = "skip"


INBOUND_EVENT_TYPES: Dict[str, Type[InboundEvent]] = {
    event_type.name: event_type
    for event_type in (
        JoinQueueEvent,
        ExchangeKeysEvent,
        SendMessageEvent,
        TypingEvent,
        StopTypingEvent,
        EditMessageEvent,
        DeleteMessageEvent,
        SkipEvent,
    )
}


def parse_inbound_event(name: Any, data: Any) -> InboundEvent:
    """
    Build a typed inbound event from a wire name and payload.

    Args:
        name: Event name from the frame
        data: Event payload (object, or None for payload-less events)

    Returns:
        Parsed InboundEvent subclass instance

    Raises:
        InvalidFrameError: Unknown event name or invalid payload
    """
    if not isinstance(name, str) or name not in INBOUND_EVENT_TYPES:
        raise InvalidFrameError(f"Unknown event: {name!r}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidFrameError("Event data must be a JSON object", name)

    try:
        return INBOUND_EVENT_TYPES[name].model_validate(data)
    except ValidationError as e:
        fields = ", ".join(
            ".".join(str(part) for part in err["loc"]) or "data"
            for err in e.errors()
        )
        raise InvalidFrameError(f"Invalid payload fields: {fields}", name)
