"""
DisplayName value object - sanitized participant name.
"""

from dataclasses import dataclass
from typing import Any, ClassVar

import bleach


@dataclass(frozen=True)
class DisplayName:
    """
    Value object representing a sanitized display name.

    Sanitization rules:
    - Non-string or blank input falls back to the default name
    - Surrounding whitespace is trimmed
    - All markup is stripped; remaining <, >, & are escaped
    - Result is truncated to the maximum length

    Examples:
        >>> DisplayName.sanitize("  Alice ").value
        'Alice'
        >>> DisplayName.sanitize("<b>Bob</b>").value
        'Bob'
        >>> DisplayName.sanitize(None).value
        'Anonymous'
    """

    value: str

    DEFAULT: ClassVar[str] = "Anonymous"
    MAX_LENGTH: ClassVar[int] = 50

    def __post_init__(self):
        """Validate display name on creation."""
        if not self.value:
            raise ValueError("Display name cannot be empty")

        if len(self.value) > self.MAX_LENGTH:
            raise ValueError(
                f"Display name too long (max {self.MAX_LENGTH} characters)"
            )

    @classmethod
    def sanitize(
        cls,
        raw: Any,
        max_length: int = MAX_LENGTH,
        default: str = DEFAULT,
    ) -> "DisplayName":
        """
        Build a DisplayName from untrusted input.

        Never raises: anything unusable becomes the default name.

        Args:
            raw: Untrusted username value from the client
            max_length: Maximum characters kept
            default: Name used when nothing usable remains

        Returns:
            DisplayName instance
        """
        fallback = default[: min(max_length, cls.MAX_LENGTH)] or cls.DEFAULT

        if not isinstance(raw, str):
            return cls(fallback)

        cleaned = bleach.clean(
            raw.strip(),
            tags=[],
            attributes={},
            strip=True,
            strip_comments=True,
        ).strip()

        limit = min(max_length, cls.MAX_LENGTH)
        return cls(_truncate_escaped(cleaned, limit) or fallback)

    def __str__(self) -> str:
        """String representation."""
        return self.value


def _truncate_escaped(text: str, limit: int) -> str:
    """Cut escaped text to limit characters without splitting an entity."""
    if len(text) <= limit:
        return text

    head = text[:limit]
    amp = head.rfind("&")
    if amp != -1 and ";" not in head[amp:] and ";" in text[amp:]:
        head = head[:amp]
    return head
