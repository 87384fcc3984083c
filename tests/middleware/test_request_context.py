"""Tests for the request context middleware.

Verifies that every response gets:
- An X-Request-ID header (generated or echoed from the request)
- A timing line in the log carrying the request fields
"""

from __future__ import annotations

import logging
import uuid

import pytest
from fastapi.testclient import TestClient


def test_request_id_generated_when_not_provided(client: TestClient) -> None:
    resp = client.get("/health")
    req_id = resp.headers.get("x-request-id")
    assert req_id is not None
    uuid.UUID(req_id)  # raises ValueError if invalid


def test_request_id_echoed_when_provided(client: TestClient) -> None:
    custom_id = "my-custom-request-id-123"
    resp = client.get("/health", headers={"X-Request-ID": custom_id})
    assert resp.headers.get("x-request-id") == custom_id


def test_request_id_present_on_error_responses(client: TestClient) -> None:
    """Even error responses (401, 404) get an X-Request-ID header."""
    resp = client.get("/v1/progress/my-courses")  # No auth token → 401
    assert resp.status_code == 401
    assert resp.headers.get("x-request-id") is not None

    resp = client.get(f"/v1/courses/{uuid.uuid4()}")
    assert resp.status_code == 404
    assert resp.headers.get("x-request-id") is not None


def test_request_summary_logged(
    client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.INFO, logger="app.middleware.request_context"):
        client.get("/v1/courses", headers={"X-Request-ID": "trace-me"})

    [record] = [
        r for r in caplog.records if r.name == "app.middleware.request_context"
    ]
    assert record.request_id == "trace-me"
    assert record.method == "GET"
    assert record.path == "/v1/courses"
    assert record.status_code == 200
    assert record.duration_ms >= 0
