"""Catch-all proxy endpoint handler."""

import logging

import httpx
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import ValidationError
from starlette.background import BackgroundTask

from curxy.backends.router import select_upstream
from curxy.backends.urls import rewrite_url, upstream_host, upstream_origin
from curxy.errors import (
    ClientRequestError,
    ModelListFetchError,
    UpstreamUnreachableError,
)
from curxy.models.config import ProxyConfig
from curxy.models.openai import ModelSelector
from curxy.translation.models import translate_model_list

logger = logging.getLogger(__name__)

MODEL_LIST_PATH = "/v1/models"
NATIVE_MODEL_LIST_PATH = "/api/tags"

HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "trailers",
        "transfer-encoding",
        "upgrade",
    }
)


def hop_by_hop_names(connection_values: list[str]) -> set[str]:
    """Standard hop-by-hop headers plus those listed in Connection."""
    names = set(HOP_BY_HOP_HEADERS)
    for value in connection_values:
        names.update(token.strip().lower() for token in value.split(",") if token.strip())
    return names


def inbound_url(request: Request) -> httpx.URL:
    """The request URL with its path still percent-encoded as sent.

    request.url is rebuilt from the decoded path, which would turn %2F into /.
    """
    raw_path = request.scope.get("raw_path") or request.url.path.encode()
    # Some servers include the query in raw_path
    raw_path = raw_path.split(b"?", 1)[0]
    query = request.scope.get("query_string", b"")
    if query:
        raw_path += b"?" + query
    return httpx.URL(str(request.url)).copy_with(raw_path=raw_path)


def build_upstream_headers(request: Request, target: str) -> list[tuple[str, str]]:
    """Copy inbound headers for the upstream, pointing Host/Origin at target."""
    dropped = hop_by_hop_names(request.headers.getlist("connection"))
    headers = [
        (name, value)
        for name, value in request.headers.items()
        if name not in dropped and name not in ("host", "content-length")
    ]
    headers.append(("host", upstream_host(target)))

    # Body bytes are relayed undecoded, so only ask for what the client accepts
    if "accept-encoding" not in request.headers:
        headers.append(("accept-encoding", "identity"))

    # Ollama rejects requests whose Origin does not match its own host
    if "origin" in request.headers:
        headers = [(name, value) for name, value in headers if name != "origin"]
        headers.append(("origin", upstream_origin(target)))

    return headers


def filter_response_headers(headers: httpx.Headers) -> list[tuple[str, str]]:
    """Drop hop-by-hop headers from an upstream response, keeping repeats."""
    dropped = hop_by_hop_names(headers.get_list("connection"))
    return [
        (name, value)
        for name, value in headers.multi_items()
        if name.lower() not in dropped
    ]


def parse_model_selector(body: bytes) -> ModelSelector:
    """
    Validate a POST body enough to route it.

    Raises:
        ClientRequestError: If the body is not JSON or lacks a string "model".
    """
    try:
        return ModelSelector.model_validate_json(body)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}"
            for err in e.errors()
        )
        raise ClientRequestError(
            f"Request body must be a JSON object with a string 'model' field ({problems})"
        ) from e


async def forward(
    client: httpx.AsyncClient, request: Request, target: str, body: bytes
) -> StreamingResponse:
    """
    Send request to target and relay the upstream response unmodified.

    The upstream body is streamed as raw bytes. The upstream response is
    closed once the relay finishes or the client goes away.

    Raises:
        UpstreamUnreachableError: If the upstream cannot be reached.
    """
    url = rewrite_url(inbound_url(request), target)
    upstream_request = client.build_request(
        request.method,
        url,
        headers=build_upstream_headers(request, target),
        content=body or None,
    )

    try:
        upstream = await client.send(upstream_request, stream=True)
    except httpx.RequestError as e:
        logger.error(f"Upstream {target} unreachable: {e!r}")
        raise UpstreamUnreachableError(f"Upstream {target} is unreachable") from e

    logger.info(f"<<< {upstream.status_code} from {url}")
    response = StreamingResponse(
        upstream.aiter_raw(),
        status_code=upstream.status_code,
        background=BackgroundTask(upstream.aclose),
    )
    # StreamingResponse(headers=...) would collapse repeated Set-Cookie headers
    for name, value in filter_response_headers(upstream.headers):
        response.headers.append(name, value)
    return response


async def fetch_model_list(client: httpx.AsyncClient, local_endpoint: str) -> dict:
    """
    Fetch Ollama's native model list and translate it.

    Raises:
        ModelListFetchError: On network failure, error status or bad shape.
    """
    url = str(httpx.URL(local_endpoint).join(NATIVE_MODEL_LIST_PATH))
    try:
        response = await client.get(url)
        response.raise_for_status()
        return translate_model_list(response.json())
    except httpx.HTTPError as e:
        logger.error(f"Model list fetch from {url} failed: {e!r}")
        raise ModelListFetchError(f"Failed to get model list: {e}") from e
    except ValueError as e:
        # Invalid JSON or a body that is not an Ollama listing
        logger.error(f"Model list from {url} has an unexpected shape: {e}")
        raise ModelListFetchError(
            "Failed to get model list: unexpected response from local endpoint"
        ) from e


def create_proxy_router(config: ProxyConfig, client: httpx.AsyncClient) -> APIRouter:
    """Create proxy router with configuration."""
    router = APIRouter()

    @router.get(MODEL_LIST_PATH)
    async def list_models() -> JSONResponse:
        """Handle GET /v1/models from the local daemon's listing."""
        logger.info(f">>> GET {MODEL_LIST_PATH} -> {config.local_endpoint}")
        listing = await fetch_model_list(client, config.local_endpoint)
        logger.info(f"<<< {len(listing['data'])} models")
        return JSONResponse(content=listing)

    @router.get("/{path:path}")
    async def proxy_get(request: Request, path: str) -> StreamingResponse:
        """Relay any other GET to the local daemon."""
        logger.info(f">>> GET /{path} -> {config.local_endpoint}")
        body = await request.body()
        return await forward(client, request, config.local_endpoint, body)

    @router.post("/{path:path}")
    async def proxy_post(request: Request, path: str) -> StreamingResponse:
        """Route a POST by the model named in its body."""
        body = await request.body()
        selector = parse_model_selector(body)

        target = select_upstream(
            selector.model, config.local_endpoint, config.remote_endpoint
        )
        logger.info(
            f">>> POST /{path} model={selector.model} stream={selector.stream} -> {target}"
        )
        return await forward(client, request, target, body)

    return router
