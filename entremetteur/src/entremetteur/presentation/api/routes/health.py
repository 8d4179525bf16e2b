"""
Health check API routes.

Kubernetes-compatible liveness and readiness probes.
"""

from fastapi import APIRouter, Depends, Response, status

from entremetteur.di import Container
from entremetteur.infrastructure.monitoring import EntremetteurHealthChecker
from entremetteur.presentation.api.dependencies import get_container

router = APIRouter(tags=["health"])


def get_health_checker(
    container: Container = Depends(get_container),
) -> EntremetteurHealthChecker:
    """Dependency for health checker."""
    return container.health_checker


@router.get("/health/live", status_code=status.HTTP_200_OK)
def liveness_probe(
    response: Response,
    health_checker: EntremetteurHealthChecker = Depends(get_health_checker),
):
    """
    Liveness probe endpoint.

    Returns 200 if the process is alive, 503 otherwise.
    """
    report = health_checker.check_liveness()

    if not report.is_healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return report.to_dict()


@router.get("/health/ready", status_code=status.HTTP_200_OK)
def readiness_probe(
    response: Response,
    health_checker: EntremetteurHealthChecker = Depends(get_health_checker),
):
    """
    Readiness probe endpoint.

    Returns 200 if new sessions can be accepted, 503 if not.

    Checks:
    - Connection capacity
    - Matchmaking registry consistency
    - Shutdown state
    """
    report = health_checker.check_readiness()

    if not report.is_ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return report.to_dict()


@router.get("/health", status_code=status.HTTP_200_OK)
def health_check_endpoint(
    response: Response,
    health_checker: EntremetteurHealthChecker = Depends(get_health_checker),
):
    """General health check endpoint (alias for readiness)."""
    return readiness_probe(response, health_checker)
