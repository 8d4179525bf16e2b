"""
FastAPI dependencies for Entremetteur API.

Provides dependency injection for routes.
"""

from typing import Optional

from starlette.datastructures import Headers

from entremetteur.di import Container

# Global container (initialized in main.py)
_container: Optional[Container] = None


def get_container() -> Container:
    """
    Get DI container instance.

    Returns:
        Container instance

    Raises:
        RuntimeError: If container not initialized
    """
    if _container is None:
        raise RuntimeError("Container not initialized")
    return _container


def set_container(container: Optional[Container]) -> None:
    """
    Set DI container (called from main.py, cleared by tests).

    Args:
        container: Container instance to set globally
    """
    global _container
    _container = container


def get_client_ip(
    headers: Headers,
    client_host: Optional[str],
    trust_forwarded_for: bool = False,
) -> str:
    """
    Resolve the client IP used as rate-limit key.

    X-Forwarded-For is client-controlled, so its first hop is only used
    when the server sits behind a proxy that sets it.

    Args:
        headers: Request or handshake headers
        client_host: Peer address from the transport
        trust_forwarded_for: Prefer the first X-Forwarded-For hop

    Returns:
        IP string, or "unknown"
    """
    if trust_forwarded_for:
        forwarded_for = headers.get("x-forwarded-for", "").split(",")[0].strip()
        if forwarded_for:
            return forwarded_for
    return client_host or "unknown"
