"""
HTTP Client Module - factory for the shared upstream client.

One httpx.AsyncClient is created per process and shared by every registry
and website request, so connections are pooled and reused across tool
invocations.

Pattern: Factory pattern for creating configured HTTP clients
"""

from typing import Optional

import httpx


# =============================================================================
# Defaults
# =============================================================================


TRANSPORT_TIMEOUT_SECONDS: float = 30.0
"""Upper bound at the socket level. Per-call deadlines are enforced by DeadlineWrapper."""

POOL_MAX_CONNECTIONS: int = 10
"""Registry calls are paced to a few per second, so a small pool suffices."""

POOL_MAX_KEEPALIVE: int = 5

DEFAULT_USER_AGENT: str = "npm-helper-mcp/1.0"


# =============================================================================
# HTTP Client Factory
# =============================================================================


def create_http_client(
    user_agent: Optional[str] = None,
    timeout_seconds: float = TRANSPORT_TIMEOUT_SECONDS,
    max_connections: int = POOL_MAX_CONNECTIONS,
    max_keepalive: int = POOL_MAX_KEEPALIVE,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Create the pooled client used for registry and website requests.

    Redirects are followed (package pages redirect between hosts). The
    transport never retries: a failed attempt reaches the caller at once.

    Args:
        user_agent: User-Agent header sent with every request.
        timeout_seconds: Transport timeout in seconds.
        max_connections: Pool size.
        max_keepalive: Idle connections kept open.
        transport: Replacement transport (tests pass httpx.MockTransport).

    Returns:
        httpx.AsyncClient: Caller owns it and must aclose() it.

    Example:
        >>> client = create_http_client(user_agent=settings.user_agent)
        >>> response = await client.get("https://registry.npmjs.org/react")
    """
    if transport is None:
        transport = httpx.AsyncHTTPTransport(
            retries=0,
            limits=httpx.Limits(
                max_connections=max_connections,
                max_keepalive_connections=max_keepalive,
            ),
        )

    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout_seconds),
        headers={
            "User-Agent": user_agent or DEFAULT_USER_AGENT,
            "Accept": "application/json",
        },
        transport=transport,
        follow_redirects=True,
    )
