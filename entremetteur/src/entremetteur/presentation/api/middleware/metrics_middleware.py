"""
Prometheus metrics middleware for FastAPI.
"""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from entremetteur.infrastructure.monitoring import metrics


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Collects HTTP request count, duration and errors.

    Only plain HTTP requests pass through here; WebSocket sessions are
    counted by the WebSocket route.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        endpoint = request.url.path
        method = request.method
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception as e:
            metrics.http_request_duration_seconds.labels(
                method=method, endpoint=endpoint
            ).observe(time.time() - start_time)
            metrics.http_errors_total.labels(
                method=method, endpoint=endpoint, error_type=type(e).__name__
            ).inc()
            raise

        metrics.http_request_duration_seconds.labels(
            method=method, endpoint=endpoint
        ).observe(time.time() - start_time)
        metrics.http_requests_total.labels(
            method=method, endpoint=endpoint, status=response.status_code
        ).inc()

        if response.status_code >= 400:
            error_type = (
                "client_error" if response.status_code < 500 else "server_error"
            )
            metrics.http_errors_total.labels(
                method=method, endpoint=endpoint, error_type=error_type
            ).inc()

        return response
