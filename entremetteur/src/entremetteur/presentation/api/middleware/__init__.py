"""
HTTP middleware.
"""

from entremetteur.presentation.api.middleware.metrics_middleware import (
    MetricsMiddleware,
)
from entremetteur.presentation.api.middleware.rate_limit_middleware import (
    HTTPRateLimitMiddleware,
)

__all__ = ["HTTPRateLimitMiddleware", "MetricsMiddleware"]
