"""
Frame validation use case.

Validates incoming WebSocket frames for:
- Size limits
- JSON structure
- Known event name
- Typed event payload
"""

import json
from dataclasses import dataclass, field
from typing import List, Optional

from entremetteur.domain.events import InboundEvent, parse_inbound_event
from entremetteur.domain.exceptions import InvalidFrameError


@dataclass
class ValidationResult:
    """Result of frame validation."""

    valid: bool
    errors: List[str] = field(default_factory=list)
    event: Optional[InboundEvent] = None
    event_name: Optional[str] = None
    size_bytes: int = 0


class ValidateMessageUseCase:
    """
    Use case turning raw text frames into typed inbound events.

    Frame shape: ``{"event": <name>, "data": {...}}``. ``data`` may be
    omitted for payload-less events.
    """

    def __init__(self, max_message_size: int = 50_000_000):
        """
        Initialize frame validator.

        Args:
            max_message_size: Maximum frame size in bytes
        """
        self.max_message_size = max_message_size

    def validate_message(self, raw_message: str) -> ValidationResult:
        """
        Validate one inbound frame.

        Args:
            raw_message: Raw text frame from the WebSocket

        Returns:
            ValidationResult carrying the parsed event when valid
        """
        size_bytes = len(raw_message.encode("utf-8"))
        if size_bytes > self.max_message_size:
            return ValidationResult(
                valid=False,
                errors=[
                    f"Frame too large: {size_bytes} bytes "
                    f"(max: {self.max_message_size})"
                ],
                size_bytes=size_bytes,
            )

        try:
            frame = json.loads(raw_message)
        except json.JSONDecodeError as e:
            return ValidationResult(
                valid=False,
                errors=[f"Invalid JSON: {str(e)}"],
                size_bytes=size_bytes,
            )

        if not isinstance(frame, dict):
            return ValidationResult(
                valid=False,
                errors=["Frame must be a JSON object"],
                size_bytes=size_bytes,
            )

        event_name = frame.get("event")
        if not isinstance(event_name, str):
            return ValidationResult(
                valid=False,
                errors=["Frame is missing an 'event' name"],
                size_bytes=size_bytes,
            )

        try:
            event = parse_inbound_event(event_name, frame.get("data"))
        except InvalidFrameError as e:
            return ValidationResult(
                valid=False,
                errors=[e.reason],
                event_name=event_name,
                size_bytes=size_bytes,
            )

        return ValidationResult(
            valid=True,
            event=event,
            event_name=event_name,
            size_bytes=size_bytes,
        )
