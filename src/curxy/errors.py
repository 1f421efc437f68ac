"""Error types surfaced to proxy clients."""

from fastapi import Request
from fastapi.responses import JSONResponse


class ProxyError(Exception):
    """Base class for errors turned into OpenAI-style error responses."""

    status_code = 500
    error_type = "server_error"
    code: str | None = None

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ClientRequestError(ProxyError):
    """The inbound request cannot be routed (bad JSON, missing model)."""

    status_code = 400
    error_type = "invalid_request_error"


class AuthorizationError(ProxyError):
    """Missing or incorrect bearer credential."""

    status_code = 401
    error_type = "invalid_request_error"
    code = "invalid_api_key"


class UpstreamUnreachableError(ProxyError):
    """The upstream could not be contacted."""

    status_code = 502
    error_type = "server_error"
    code = "upstream_unreachable"


class ModelListFetchError(ProxyError):
    """The native model listing could not be fetched or understood."""

    status_code = 500
    error_type = "server_error"
    code = "model_list_unavailable"


def make_error_response(
    status_code: int, error_type: str, message: str, code: str | None = None
) -> JSONResponse:
    """Create OpenAI-style error response."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "message": message,
                "type": error_type,
                "param": None,
                "code": code,
            },
        },
    )


async def proxy_error_handler(request: Request, exc: ProxyError) -> JSONResponse:
    """FastAPI exception handler for ProxyError."""
    return make_error_response(exc.status_code, exc.error_type, exc.message, exc.code)
