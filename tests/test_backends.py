"""Tests for upstream selection, URL rewriting and the HTTP client factory."""

import httpx
import pytest

from curxy.backends.factory import create_http_client
from curxy.backends.router import is_remote_model, select_upstream
from curxy.backends.urls import rewrite_url, upstream_host, upstream_origin
from curxy.models.config import ProxyConfig

OLLAMA = "http://localhost:11434"
OPENAI = "https://api.openai.com"


@pytest.mark.parametrize(
    "model",
    ["gpt-3.5", "gpt-3.5-turbo", "gpt-4-turbo", "gpt-4-1106-preview", "gpt-4o"],
)
def test_gpt_models_route_remote(model):
    """gpt-* models go to OpenAI."""
    assert select_upstream(model, OLLAMA, OPENAI) == OPENAI


@pytest.mark.parametrize(
    "model", ["llama3", "mistral-7b-b1.58", "command-r:35b", "GPT-4", "chatgpt-4o"]
)
def test_other_models_route_local(model):
    """Everything else goes to Ollama."""
    assert select_upstream(model, OLLAMA, OPENAI) == OLLAMA


def test_bare_gpt_routes_local():
    """The prefix needs a dash and something after it."""
    assert select_upstream("gpt", OLLAMA, OPENAI) == OLLAMA
    assert select_upstream("gpt-", OLLAMA, OPENAI) == OLLAMA
    assert not is_remote_model("gpt")
    assert is_remote_model("gpt-x")


def test_rewrite_url_replaces_scheme_and_host():
    """OpenAI URL moved onto the Ollama endpoint."""
    result = rewrite_url("https://api.openai.com/v1/chat/completions", OLLAMA)
    assert result == "http://localhost:11434/v1/chat/completions"


def test_rewrite_url_keeps_query():
    """Query string survives the rewrite."""
    result = rewrite_url("http://127.0.0.1:8800/api/show?name=llama3&verbose=1", OPENAI)
    assert result == "https://api.openai.com/api/show?name=llama3&verbose=1"


def test_rewrite_url_ignores_target_path():
    """Only scheme, host and port are taken from the target."""
    result = rewrite_url("http://127.0.0.1:8800/v1/embeddings", "http://gpu-box:8080/ignored")
    assert result == "http://gpu-box:8080/v1/embeddings"


def test_rewrite_url_is_pure():
    """Same inputs, same output."""
    url = "http://127.0.0.1:8800/v1/chat/completions"
    assert rewrite_url(url, OLLAMA) == rewrite_url(url, OLLAMA)


def test_upstream_host_and_origin():
    """Host/Origin values for header overrides."""
    assert upstream_host(OLLAMA) == "localhost:11434"
    assert upstream_host(OPENAI) == "api.openai.com"
    assert upstream_origin(OLLAMA) == "http://localhost:11434"
    assert upstream_origin(OPENAI) == "https://api.openai.com"


def test_upstream_host_ipv6():
    """IPv6 hosts are bracketed."""
    assert upstream_host("http://[::1]:11434") == "[::1]:11434"


def test_create_http_client_defaults():
    """Client does not follow redirects and has no timeout by default."""
    client = create_http_client(ProxyConfig())

    assert isinstance(client, httpx.AsyncClient)
    assert client.follow_redirects is False
    assert client.timeout.read is None


def test_create_http_client_with_timeout():
    """Configured timeout is applied."""
    client = create_http_client(ProxyConfig(timeout=30))

    assert client.timeout.connect == 30
