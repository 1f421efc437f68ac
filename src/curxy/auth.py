"""Shared-secret bearer authentication middleware."""

import hmac
import logging

from fastapi import Request, Response
from starlette.responses import JSONResponse

from curxy.errors import AuthorizationError, make_error_response

logger = logging.getLogger(__name__)


def get_bearer_token(request: Request) -> str | None:
    """Extract the bearer token from the Authorization header."""
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer":
        return None

    token = token.strip()
    return token or None


def make_auth_error_response() -> JSONResponse:
    """Create the 401 response. Identical for missing and wrong credentials."""
    error = AuthorizationError("Invalid or missing API key")
    response = make_error_response(
        error.status_code, error.error_type, error.message, error.code
    )
    response.headers["WWW-Authenticate"] = "Bearer"
    return response


class BearerAuth:
    """Bearer token authentication middleware."""

    def __init__(self, shared_secret: str | None):
        """
        Initialize auth middleware.

        Args:
            shared_secret: Expected bearer token, or None to disable auth.
        """
        self.shared_secret = shared_secret

    async def __call__(
        self, request: Request, call_next
    ) -> Response:
        """Check the bearer token on each request."""
        # Skip auth if no secret configured
        if self.shared_secret is None:
            return await call_next(request)

        # Preflight requests never carry credentials
        if request.method == "OPTIONS":
            return await call_next(request)

        provided = get_bearer_token(request)
        if provided is None or not hmac.compare_digest(
            provided.encode(), self.shared_secret.encode()
        ):
            logger.warning(f"Rejected {request.method} {request.url.path}: bad credentials")
            return make_auth_error_response()

        return await call_next(request)
