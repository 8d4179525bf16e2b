"""
Inbound frame exceptions.
"""


class InvalidFrameError(Exception):
    """Raised when an inbound frame cannot be turned into an event."""

    def __init__(self, reason: str, event_name: str = None):
        """
        Initialize InvalidFrameError.

        Args:
            reason: Why the frame was rejected
            event_name: Event name, if it could be read
        """
        super().__init__(reason)
        self.reason = reason
        self.event_name = event_name
