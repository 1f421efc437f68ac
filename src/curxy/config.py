"""Configuration loading with environment variable substitution."""

import os
import re
import socket
from argparse import Namespace
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from curxy.models.config import ProxyConfig

ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

SHARED_SECRET_ENV = "OPENAI_API_KEY"
CONFIG_PATH_ENV = "CURXY_CONFIG"


def substitute_env_vars(value: str, environ: Mapping[str, str] | None = None) -> str:
    """Replace ${VAR} patterns with values from environ (os.environ by default)."""
    if not isinstance(value, str):
        return value
    environ = os.environ if environ is None else environ

    def lookup(match: re.Match) -> str:
        name = match.group(1)
        if name not in environ:
            raise ValueError(f"Environment variable '{name}' not set")
        return environ[name]

    return ENV_VAR_PATTERN.sub(lookup, value)


def expand_env_vars(obj: Any, environ: Mapping[str, str] | None = None) -> Any:
    """Apply substitute_env_vars to every string in a parsed YAML document."""
    if isinstance(obj, dict):
        return {key: expand_env_vars(item, environ) for key, item in obj.items()}
    if isinstance(obj, list):
        return [expand_env_vars(item, environ) for item in obj]
    return substitute_env_vars(obj, environ)


def read_config_file(path: Path, environ: Mapping[str, str] | None = None) -> dict:
    """Read a YAML config file with env var substitution. Empty files give {}."""
    with open(path) as f:
        raw_config = yaml.safe_load(f) or {}

    if not isinstance(raw_config, dict):
        raise ValueError(f"Config file {path} must contain a mapping")

    return expand_env_vars(raw_config, environ)


def load_config(path: Path, environ: Mapping[str, str] | None = None) -> ProxyConfig:
    """Load configuration from YAML file with env var substitution."""
    return ProxyConfig(**read_config_file(path, environ))


def find_free_port(host: str = "127.0.0.1") -> int:
    """Ask the OS for a free TCP port on host."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((host, 0))
        return sock.getsockname()[1]


def build_config(args: Namespace, environ: Mapping[str, str] | None = None) -> ProxyConfig:
    """
    Resolve the final configuration.

    Command-line flags win over the YAML file, which wins over defaults.
    The shared secret comes from OPENAI_API_KEY unless the file sets one.

    Args:
        args: Parsed command-line arguments. Unset flags are None.
        environ: Environment mapping, os.environ by default.

    Returns:
        Validated configuration with a concrete server port.
    """
    environ = os.environ if environ is None else environ

    config_path = args.config or environ.get(CONFIG_PATH_ENV)
    data = read_config_file(Path(config_path), environ) if config_path else {}
    server = dict(data.get("server") or {})

    if args.endpoint is not None:
        data["local_endpoint"] = args.endpoint
    if args.openai_endpoint is not None:
        data["remote_endpoint"] = args.openai_endpoint
    if data.get("shared_secret") is None and environ.get(SHARED_SECRET_ENV):
        data["shared_secret"] = environ[SHARED_SECRET_ENV]

    if args.hostname is not None:
        server["host"] = args.hostname
    if args.port is not None:
        server["port"] = args.port
    if args.cloudflared is not None:
        server["tunnel"] = args.cloudflared
    if args.log_level is not None:
        server["log_level"] = args.log_level

    if server.get("port") is None:
        server["port"] = find_free_port(server.get("host", "127.0.0.1"))

    data["server"] = server
    return ProxyConfig(**data)
