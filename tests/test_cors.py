"""Tests for the CORS middleware."""

import pytest
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient

from curxy.cors import CORSPolicy


@pytest.fixture
def client():
    """FastAPI app with CORS middleware."""
    app = FastAPI()

    @app.get("/ping")
    async def ping():
        return JSONResponse({"status": "ok"}, headers={"Vary": "Accept-Encoding"})

    @app.post("/fail")
    async def fail():
        return JSONResponse({"error": "nope"}, status_code=500)

    app.middleware("http")(CORSPolicy())
    return TestClient(app)


def test_preflight_returns_no_content(client):
    """OPTIONS is answered with 204 and no body, on any path."""
    response = client.options("/anything/at/all")

    assert response.status_code == 204
    assert response.content == b""
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert "POST" in response.headers["Access-Control-Allow-Methods"]
    assert "Authorization" in response.headers["Access-Control-Allow-Headers"]
    assert "Content-Type" in response.headers["Access-Control-Allow-Headers"]


def test_preflight_mirrors_origin_and_headers(client):
    """Origin and requested headers are echoed back."""
    response = client.options(
        "/v1/chat/completions",
        headers={
            "Origin": "vscode-file://vscode-app",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "x-stainless-os",
        },
    )

    assert response.status_code == 204
    assert response.headers["Access-Control-Allow-Origin"] == "vscode-file://vscode-app"
    assert response.headers["Access-Control-Allow-Credentials"] == "true"
    assert "x-stainless-os" in response.headers["Access-Control-Allow-Headers"]


def test_headers_added_to_responses(client):
    """Ordinary responses get CORS headers."""
    response = client.get("/ping", headers={"Origin": "http://localhost:3000"})

    assert response.status_code == 200
    assert response.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"
    assert response.headers["Vary"] == "Accept-Encoding, Origin"


def test_headers_added_to_errors(client):
    """Error responses get CORS headers too."""
    response = client.post("/fail")

    assert response.status_code == 500
    assert response.headers["Access-Control-Allow-Origin"] == "*"
