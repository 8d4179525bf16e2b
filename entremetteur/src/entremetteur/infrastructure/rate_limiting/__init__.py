"""
Rate limiting infrastructure.
"""

from entremetteur.infrastructure.rate_limiting.rate_limiter import (
    FixedWindowRateLimiter,
)

__all__ = ["FixedWindowRateLimiter"]
