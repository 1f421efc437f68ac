"""Compose upstream URLs from inbound ones."""

import httpx


def _bracketed_host(url: httpx.URL) -> str:
    # httpx reports IPv6 hosts without brackets
    if ":" in url.host:
        return f"[{url.host}]"
    return url.host


def rewrite_url(inbound_url: str | httpx.URL, target_base: str | httpx.URL) -> str:
    """Move inbound_url onto the scheme, host and port of target_base.

    Path, query string and fragment of the inbound URL are kept verbatim.
    The path of target_base is ignored.
    """
    inbound = httpx.URL(str(inbound_url))
    target = httpx.URL(str(target_base))
    return str(
        inbound.copy_with(
            scheme=target.scheme, host=_bracketed_host(target), port=target.port
        )
    )


def upstream_host(target_base: str | httpx.URL) -> str:
    """Value for the Host header when talking to target_base."""
    target = httpx.URL(str(target_base))
    host = _bracketed_host(target)
    if target.port is None:
        return host
    return f"{host}:{target.port}"


def upstream_origin(target_base: str | httpx.URL) -> str:
    """Value for the Origin header when talking to target_base."""
    target = httpx.URL(str(target_base))
    return f"{target.scheme}://{upstream_host(target)}"
