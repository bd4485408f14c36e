"""Tests for the request context middleware."""

from fastapi import FastAPI
from fastapi.testclient import TestClient

from learnhub.core.context import get_context
from learnhub.core.middleware import RequestContextMiddleware, extract_traceparent


def build_client() -> TestClient:
    app = FastAPI()
    app.add_middleware(RequestContextMiddleware, exclude_paths=["/health"])

    @app.get("/context")
    async def context():
        return get_context()

    return TestClient(app)


def test_request_id_is_generated_and_echoed() -> None:
    response = build_client().get("/context")

    request_id = response.headers["X-Request-ID"]
    assert request_id
    assert response.json()["request_id"] == request_id


def test_incoming_request_id_is_kept() -> None:
    response = build_client().get("/context", headers={"X-Request-ID": "req-42"})

    assert response.headers["X-Request-ID"] == "req-42"


def test_trace_id_from_traceparent() -> None:
    traceparent = "00-4bf92f3577b34da6a3ce929d0e0e4736-00f067aa0ba902b7-01"
    response = build_client().get("/context", headers={"traceparent": traceparent})

    assert response.json()["trace_id"] == "4bf92f3577b34da6a3ce929d0e0e4736"


def test_extract_traceparent_malformed() -> None:
    assert extract_traceparent(None) is None
    assert extract_traceparent("garbage") is None
