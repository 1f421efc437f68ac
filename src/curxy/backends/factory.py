"""Factory for the outbound HTTP client."""

import httpx

from curxy.models.config import ProxyConfig


def create_http_client(
    config: ProxyConfig, transport: httpx.AsyncBaseTransport | None = None
) -> httpx.AsyncClient:
    """
    Create the AsyncClient shared by all proxied requests.

    Args:
        config: Proxy configuration with transport settings.
        transport: Optional transport override, used by tests to stub upstreams.

    Returns:
        Configured AsyncClient. Redirects are relayed, not followed.
    """
    kwargs: dict = {
        "timeout": httpx.Timeout(config.timeout),
        "follow_redirects": False,
    }

    if transport is not None:
        kwargs["transport"] = transport
    elif not config.verify_ssl:
        kwargs["verify"] = False

    return httpx.AsyncClient(**kwargs)
