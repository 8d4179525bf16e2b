"""
Outbound event schemas.

Server-to-client events. ``to_frame()`` produces the JSON-ready frame
``{"event": <name>, "data": {...}}`` with camelCase keys.
"""

from typing import Any, ClassVar, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

MessageId = Union[int, str]

RATE_LIMIT_MESSAGE = "Sending messages too fast. Please slow down."


class OutboundEvent(BaseModel):
    """
    Base for all server-to-client events.

    Attributes:
        name: Wire event name (class-level)
        omit_none: Drop unset optional fields from the payload
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: ClassVar[str] = ""
    omit_none: ClassVar[bool] = True

    def to_frame(self) -> Dict[str, Any]:
        """Serialize to a wire frame."""
        return {
            "event": self.name,
            "data": self.model_dump(by_alias=True, exclude_none=self.omit_none),
        }


class ChatStartEvent(OutboundEvent):
    """Sent to both members when a room is formed."""

    name: ClassVar[str] = "chat_start"
    omit_none: ClassVar[bool] = False

    room_id: str = Field(..., alias="roomId")
    partner_name: str = Field(..., alias="partnerName")
    partner_profile_pic: Optional[str] = Field(None, alias="partnerProfilePic")


class ReceiveMessageEvent(OutboundEvent):
    """Chat message delivered to the partner."""

    name: ClassVar[str] = "receive_message"

    message_id: MessageId = Field(..., alias="id")
    text: Optional[str] = None
    sender: Literal["other"] = "other"
    type: Literal["text", "file"] = "text"
    file_content: Optional[str] = Field(None, alias="fileContent")
    file_type: Optional[str] = Field(None, alias="fileType")
    reply_to: Optional[Dict[str, Any]] = Field(None, alias="replyTo")
    encrypted: Optional[Any] = None


class PartnerPublicKeyEvent(OutboundEvent):
    """Partner's published public key."""

    name: ClassVar[str] = "partner_public_key"

    public_key: str = Field(..., alias="publicKey")


class PartnerTypingEvent(OutboundEvent):
    """Partner started typing."""

    name: ClassVar[str] = "typing"


class PartnerStopTypingEvent(OutboundEvent):
    """Partner stopped typing."""

    name: ClassVar[str] = "stop_typing"


class MessageEditedEvent(OutboundEvent):
    """Partner edited one of its messages."""

    name: ClassVar[str] = "message_edited"

    message_id: MessageId = Field(..., alias="id")
    text: str


class MessageDeletedEvent(OutboundEvent):
    """Partner deleted one of its messages."""

    name: ClassVar[str] = "message_deleted"

    message_id: MessageId = Field(..., alias="id")


class PartnerDisconnectedEvent(OutboundEvent):
    """Partner skipped or its session ended."""

    name: ClassVar[str] = "partner_disconnected"


class RateLimitExceededEvent(OutboundEvent):
    """Sender exceeded its message rate; the message was dropped."""

    name: ClassVar[str] = "rate_limit_exceeded"

    message: str = RATE_LIMIT_MESSAGE


class ShutdownNoticeEvent(OutboundEvent):
    """Server is about to close all sessions."""

    name: ClassVar[str] = "shutdown"

    message: str = "Server is shutting down"
    code: int = 1001
