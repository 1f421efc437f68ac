"""Tests for shared-secret bearer authentication."""

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from curxy.auth import BearerAuth, get_bearer_token


@pytest.fixture
def app_with_auth():
    """FastAPI app with auth middleware."""
    app = FastAPI()
    auth = BearerAuth(shared_secret="test-secret-key")

    @app.get("/protected")
    async def protected(request: Request):
        key = get_bearer_token(request)
        return {"key_preview": key[:8] + "..."}

    @app.options("/protected")
    async def preflight():
        return {"status": "preflight"}

    app.middleware("http")(auth)
    return app


def test_valid_bearer_token(app_with_auth):
    """Valid Authorization Bearer token passes."""
    client = TestClient(app_with_auth)
    response = client.get(
        "/protected",
        headers={"Authorization": "Bearer test-secret-key"},
    )
    assert response.status_code == 200


def test_missing_token(app_with_auth):
    """Missing token returns 401."""
    client = TestClient(app_with_auth)
    response = client.get("/protected")
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "invalid_api_key"
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_invalid_token(app_with_auth):
    """Invalid token returns 401."""
    client = TestClient(app_with_auth)
    response = client.get(
        "/protected",
        headers={"Authorization": "Bearer wrong-key"},
    )
    assert response.status_code == 401


def test_non_bearer_scheme(app_with_auth):
    """Other schemes are not accepted."""
    client = TestClient(app_with_auth)
    response = client.get(
        "/protected",
        headers={"Authorization": "Basic test-secret-key"},
    )
    assert response.status_code == 401


def test_missing_and_wrong_look_the_same(app_with_auth):
    """The body never tells missing from wrong, nor leaks the secret."""
    client = TestClient(app_with_auth)
    missing = client.get("/protected")
    wrong = client.get("/protected", headers={"Authorization": "Bearer nope"})

    assert missing.json() == wrong.json()
    assert "test-secret-key" not in missing.text


def test_options_skips_auth(app_with_auth):
    """Preflight requests do not need credentials."""
    client = TestClient(app_with_auth)
    response = client.options("/protected")
    assert response.status_code == 200


def test_auth_disabled():
    """No auth when shared_secret is None."""
    app = FastAPI()
    auth = BearerAuth(shared_secret=None)

    @app.get("/open")
    async def open_endpoint():
        return {"status": "ok"}

    app.middleware("http")(auth)
    client = TestClient(app)

    response = client.get("/open")
    assert response.status_code == 200
