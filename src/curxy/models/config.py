"""Configuration models for curxy."""

from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator


def validate_url(url: str) -> str:
    """Check that url is an absolute http(s) URL with a host.

    Returns the URL without a trailing slash.

    Raises:
        ValueError: If the URL cannot be used as an upstream endpoint.
    """
    if not isinstance(url, str):
        raise ValueError("Invalid URL")

    parts = urlsplit(url.strip())
    if parts.scheme not in ("http", "https") or not parts.hostname:
        raise ValueError(f"Invalid URL: {url!r}")

    try:
        parts.port
    except ValueError as e:
        raise ValueError(f"Invalid URL: {url!r}") from e

    return url.strip().rstrip("/")


class ServerConfig(BaseModel):
    """Server configuration."""

    model_config = ConfigDict(frozen=True)

    host: str = "127.0.0.1"
    port: int | None = None
    tunnel: bool = True
    log_level: str = "info"


class ProxyConfig(BaseModel):
    """Root configuration for the proxy."""

    model_config = ConfigDict(frozen=True)

    local_endpoint: str = "http://localhost:11434"
    remote_endpoint: str = "https://api.openai.com"
    shared_secret: str | None = None
    verify_ssl: bool = True
    timeout: float | None = None
    server: ServerConfig = Field(default_factory=ServerConfig)

    @field_validator("local_endpoint", "remote_endpoint")
    @classmethod
    def _check_endpoint(cls, value: str) -> str:
        return validate_url(value)

    @field_validator("shared_secret")
    @classmethod
    def _check_secret(cls, value: str | None) -> str | None:
        if value is not None and not value:
            raise ValueError("shared_secret must not be empty")
        return value
