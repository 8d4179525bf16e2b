"""
Per-IP rate limiting middleware for FastAPI.

WebSocket handshakes bypass BaseHTTPMiddleware; the WebSocket route
consults the same limiter itself.
"""

from typing import Iterable, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji
from starlette.middleware.base import BaseHTTPMiddleware

from entremetteur.infrastructure.rate_limiting import FixedWindowRateLimiter
from entremetteur.presentation.api.dependencies import get_client_ip

DEFAULT_EXEMPT_ENDPOINTS = frozenset(
    {
        "/health/live",
        "/health/ready",
        "/metrics",
    }
)


class HTTPRateLimitMiddleware(BaseHTTPMiddleware):
    """
    Fixed-window request limit per client IP.

    Features:
    - X-Forwarded-For honoured only when trust_forwarded_for is set
    - Standard rate limit headers (X-RateLimit-*)
    - 429 Too Many Requests with Retry-After
    - Probe and metrics endpoints exempt
    """

    def __init__(
        self,
        app,
        rate_limiter: Optional[FixedWindowRateLimiter],
        reporter: Optional[SystemReporter] = None,
        exempt_endpoints: Iterable[str] = DEFAULT_EXEMPT_ENDPOINTS,
        trust_forwarded_for: bool = False,
    ):
        super().__init__(app)
        self.rate_limiter = rate_limiter
        self.reporter = reporter
        self.exempt_endpoints = set(exempt_endpoints)
        self.trust_forwarded_for = trust_forwarded_for

    async def dispatch(self, request: Request, call_next):
        """
        Process request with rate limiting.

        Args:
            request: FastAPI request
            call_next: Next middleware in chain

        Returns:
            Response with rate limit headers
        """
        if not self.rate_limiter or request.url.path in self.exempt_endpoints:
            return await call_next(request)

        client_ip = get_client_ip(
            request.headers,
            request.client.host if request.client else None,
            trust_forwarded_for=self.trust_forwarded_for,
        )
        allowed = self.rate_limiter.admit(client_ip)

        headers = {
            "X-RateLimit-Limit": str(self.rate_limiter.limit),
            "X-RateLimit-Remaining": str(self.rate_limiter.get_remaining(client_ip)),
        }

        if not allowed:
            retry_after = self.rate_limiter.get_retry_after_seconds(client_ip)
            headers["Retry-After"] = str(retry_after)

            if self.reporter:
                self.reporter.warning(
                    f"{Emoji.CHAT.RATE_LIMIT} HTTP rate limit exceeded: "
                    f"ip={client_ip}, path={request.url.path}, "
                    f"retry_after={retry_after}s",
                    context="HTTPRateLimit",
                )

            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    "error": "rate_limit_exceeded",
                    "message": "Too many requests. Please try again later.",
                    "limit": self.rate_limiter.limit,
                    "retry_after": retry_after,
                },
                headers=headers,
            )

        response = await call_next(request)

        for key, value in headers.items():
            response.headers[key] = value

        return response
