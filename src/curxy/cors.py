"""Permissive CORS middleware.

The request Origin is mirrored back verbatim, which also allows credentialed
requests. Preflight requests are answered here and never reach auth or an
upstream.
"""

from fastapi import Request, Response

ALLOWED_METHODS = "GET, POST, OPTIONS"
DEFAULT_ALLOWED_HEADERS = "Content-Type, Authorization"


def cors_headers(request: Request) -> dict[str, str]:
    """Build the CORS headers for a response to request."""
    origin = request.headers.get("Origin")
    headers = {
        "Access-Control-Allow-Origin": origin or "*",
        "Access-Control-Allow-Methods": ALLOWED_METHODS,
        "Access-Control-Allow-Headers": DEFAULT_ALLOWED_HEADERS,
    }
    if origin:
        headers["Access-Control-Allow-Credentials"] = "true"
        headers["Vary"] = "Origin"
    return headers


def make_preflight_response(request: Request) -> Response:
    """Answer an OPTIONS request with 204 and no body."""
    headers = cors_headers(request)
    requested = request.headers.get("Access-Control-Request-Headers")
    if requested:
        headers["Access-Control-Allow-Headers"] = (
            f"{DEFAULT_ALLOWED_HEADERS}, {requested}"
        )
    return Response(status_code=204, headers=headers)


class CORSPolicy:
    """CORS middleware. Install last so it wraps every other middleware."""

    async def __call__(self, request: Request, call_next) -> Response:
        if request.method == "OPTIONS":
            return make_preflight_response(request)

        response = await call_next(request)
        for name, value in cors_headers(request).items():
            if name == "Vary" and response.headers.get("Vary"):
                value = f"{response.headers['Vary']}, {value}"
            response.headers[name] = value
        return response
