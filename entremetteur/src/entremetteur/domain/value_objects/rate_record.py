"""
RateRecord value object - fixed-window counter state.
"""

from dataclasses import dataclass


@dataclass
class RateRecord:
    """
    Counter for one identifier inside the current window.

    Attributes:
        count: Events admitted in the current window
        reset_at: Clock value at which the window ends
    """

    count: int
    reset_at: float

    def is_expired(self, now: float) -> bool:
        """Check if the window has ended (strictly after reset_at)."""
        return now > self.reset_at
