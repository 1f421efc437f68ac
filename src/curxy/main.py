"""FastAPI application and command-line entry point."""

import argparse
import logging
from contextlib import asynccontextmanager

import httpx
import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI

from curxy.auth import BearerAuth
from curxy.backends.factory import create_http_client
from curxy.config import build_config
from curxy.cors import CORSPolicy
from curxy.errors import ProxyError, proxy_error_handler
from curxy.models.config import ProxyConfig, validate_url
from curxy.routes.proxy import create_proxy_router
from curxy.tunnel import CloudflaredTunnel, TunnelError

__version__ = "0.1.0"

logger = logging.getLogger(__name__)


def create_app(
    config: ProxyConfig, transport: httpx.AsyncBaseTransport | None = None
) -> FastAPI:
    """Create and configure the FastAPI application.

    Adds BearerAuth middleware using config.shared_secret, then CORSPolicy
    around it so every response carries CORS headers.

    Args:
        config: Resolved proxy configuration.
        transport: Optional httpx transport for the upstream client.

    Returns:
        Configured FastAPI application.
    """
    client = create_http_client(config, transport=transport)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await client.aclose()

    app = FastAPI(
        title="curxy",
        description="OpenAI-compatible proxy routing between Ollama and OpenAI",
        version=__version__,
        lifespan=lifespan,
    )

    # Middleware added last runs first
    app.middleware("http")(BearerAuth(shared_secret=config.shared_secret))
    app.middleware("http")(CORSPolicy())

    app.add_exception_handler(ProxyError, proxy_error_handler)
    app.include_router(create_proxy_router(config, client))

    return app


def build_parser() -> argparse.ArgumentParser:
    """Command-line arguments. Unset options stay None so config files apply."""
    parser = argparse.ArgumentParser(
        prog="curxy",
        description="A proxy worker for using ollama in cursor",
        epilog=(
            "examples:\n"
            "  curxy\n"
            "  curxy --endpoint http://localhost:11434 "
            "--openai-endpoint https://api.openai.com --port 8800\n"
            "  OPENAI_API_KEY=sk-123456 curxy --port 8800"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-e", "--endpoint", type=validate_url,
        help="The endpoint to Ollama server (default: http://localhost:11434).",
    )
    parser.add_argument(
        "-o", "--openai-endpoint", type=validate_url,
        help="The endpoint to OpenAI server (default: https://api.openai.com).",
    )
    parser.add_argument(
        "-p", "--port", type=int,
        help="The port to run the server on. Default is random.",
    )
    parser.add_argument(
        "--hostname",
        help="The hostname to run the server on (default: 127.0.0.1).",
    )
    parser.add_argument(
        "-c", "--cloudflared", action=argparse.BooleanOptionalAction, default=None,
        help="Use cloudflared to tunnel the server (default: on).",
    )
    parser.add_argument(
        "--config",
        help="YAML config file (default: $CURXY_CONFIG).",
    )
    parser.add_argument(
        "--log-level", choices=["critical", "error", "warning", "info", "debug"],
        help="Log level (default: info).",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None):
    """Run the application with uvicorn."""
    # Load .env file if it exists
    load_dotenv()

    args = build_parser().parse_args(argv)
    config = build_config(args)
    server = config.server

    logging.basicConfig(
        level=server.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(
        f"Routing gpt-* models to {config.remote_endpoint}, "
        f"everything else to {config.local_endpoint}"
    )
    if config.shared_secret is None:
        logger.warning("No OPENAI_API_KEY set, the proxy accepts unauthenticated requests")

    tunnel = None
    if server.tunnel:
        tunnel = CloudflaredTunnel(server.host, server.port)
        try:
            tunnel.start()
        except TunnelError as e:
            logger.warning(f"Tunnel disabled: {e}")
            tunnel = None

    try:
        uvicorn.run(
            create_app(config),
            host=server.host,
            port=server.port,
            log_level=server.log_level,
        )
    finally:
        if tunnel is not None:
            tunnel.stop()


if __name__ == "__main__":
    main()
