"""
Fixed-window rate limiter.

Used per connection for chat messages and per client IP for the HTTP
boundary.
"""

import math
import time
from typing import Callable, Dict, Optional

from entremetteur.domain.value_objects import RateRecord


class FixedWindowRateLimiter:
    """
    Coarse fixed-window limiter keyed by identifier.

    Algorithm:
        - First event, or first event after the window ended: count = 1,
          new window ends at now + window_seconds, allowed
        - Otherwise allowed (and counted) while count < limit
        - At the limit: rejected, count and window left untouched

    Bursts of up to 2 * limit across a window boundary are accepted.

    With max_tracked set, expired records are pruned whenever a new
    identifier would push the table past that size.

    Attributes:
        limit: Events allowed per window
        window_seconds: Window length in seconds
        clock: Monotonic time source (injectable for tests)
        max_tracked: Table size that triggers pruning (None = never)
    """

    def __init__(
        self,
        limit: int = 10,
        window_seconds: float = 1.0,
        clock: Optional[Callable[[], float]] = None,
        max_tracked: Optional[int] = None,
    ):
        """
        Initialize limiter.

        Args:
            limit: Maximum events allowed per window
            window_seconds: Window length in seconds
            clock: Optional time source returning seconds
            max_tracked: Prune expired records once this many are held

        Raises:
            ValueError: If limit or window is not positive
        """
        if limit < 1:
            raise ValueError("limit must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.limit = limit
        self.window_seconds = window_seconds
        self.clock = clock or time.monotonic
        self.max_tracked = max_tracked
        self._records: Dict[str, RateRecord] = {}

    def admit(self, identifier: str) -> bool:
        """
        Count one event for identifier.

        Args:
            identifier: Connection ID, client IP, ...

        Returns:
            True if allowed, False if rate limited
        """
        now = self.clock()
        record = self._records.get(identifier)

        if record is None or record.is_expired(now):
            if (
                record is None
                and self.max_tracked is not None
                and len(self._records) >= self.max_tracked
            ):
                self.prune()
            self._records[identifier] = RateRecord(
                count=1, reset_at=now + self.window_seconds
            )
            return True

        if record.count >= self.limit:
            return False

        record.count += 1
        return True

    def get_record(self, identifier: str) -> Optional[RateRecord]:
        """Get current record for identifier, if any."""
        return self._records.get(identifier)

    def get_remaining(self, identifier: str) -> int:
        """Get events still allowed in the current window."""
        record = self._records.get(identifier)
        if record is None or record.is_expired(self.clock()):
            return self.limit
        return max(0, self.limit - record.count)

    def get_retry_after_seconds(self, identifier: str) -> int:
        """Get whole seconds until identifier may send again (0 if now)."""
        record = self._records.get(identifier)
        if record is None:
            return 0

        now = self.clock()
        if record.is_expired(now) or record.count < self.limit:
            return 0

        return max(1, math.ceil(record.reset_at - now))

    def forget(self, identifier: str) -> None:
        """Drop the record for identifier (on disconnect)."""
        self._records.pop(identifier, None)

    def prune(self) -> int:
        """
        Drop records whose window has ended.

        Returns:
            Number of records removed
        """
        now = self.clock()
        expired = [key for key, rec in self._records.items() if rec.is_expired(now)]
        for key in expired:
            del self._records[key]
        return len(expired)

    def clear(self) -> None:
        """Drop all records."""
        self._records.clear()

    def tracked_count(self) -> int:
        """Get number of identifiers with a live record."""
        return len(self._records)
