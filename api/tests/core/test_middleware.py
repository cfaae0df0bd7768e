"""Unit tests for core.middleware module.

Tests ASGI middleware:
- SecurityHeadersMiddleware adds security headers to HTTP responses
- SecurityHeadersMiddleware allows cross-origin embedding
- RequestLoggingMiddleware echoes a request id and logs one line
- Both skip non-HTTP scopes
"""

import logging

import pytest

from core.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware

pytestmark = pytest.mark.unit


async def _noop_receive():
    return {"type": "http.request", "body": b""}


async def _make_app_that_sends_response(scope, receive, send):
    """Simulate an ASGI app that sends a response."""
    await send({"type": "http.response.start", "status": 200, "headers": []})
    await send({"type": "http.response.body", "body": b"OK"})


async def _run(middleware, scope) -> list[dict]:
    sent_messages: list[dict] = []

    async def _send(message):
        sent_messages.append(message)

    await middleware(scope, _noop_receive, _send)
    return sent_messages


def _headers(messages: list[dict]) -> dict[bytes, bytes]:
    start = next(m for m in messages if m["type"] == "http.response.start")
    return dict(start["headers"])


class TestSecurityHeadersMiddleware:
    async def test_adds_security_headers(self):
        middleware = SecurityHeadersMiddleware(_make_app_that_sends_response)
        messages = await _run(middleware, {"type": "http", "path": "/badge/softcat"})

        headers = _headers(messages)
        assert headers[b"x-content-type-options"] == b"nosniff"
        assert b"content-security-policy" in headers
        assert b"permissions-policy" in headers

    async def test_images_can_be_embedded_cross_origin(self):
        middleware = SecurityHeadersMiddleware(_make_app_that_sends_response)
        messages = await _run(middleware, {"type": "http", "path": "/badge/softcat"})

        headers = _headers(messages)
        assert headers[b"cross-origin-resource-policy"] == b"cross-origin"
        assert b"x-frame-options" not in headers

    async def test_skips_non_http_scope(self):
        called = False

        async def _app(scope, receive, send):
            nonlocal called
            called = True

        middleware = SecurityHeadersMiddleware(_app)
        messages = await _run(middleware, {"type": "lifespan"})

        assert called
        assert messages == []


class TestRequestLoggingMiddleware:
    async def test_adds_request_id_header(self):
        middleware = RequestLoggingMiddleware(_make_app_that_sends_response)
        messages = await _run(
            middleware, {"type": "http", "method": "GET", "path": "/health"}
        )

        request_id = _headers(messages)[b"x-request-id"]
        assert len(request_id) == 36

    async def test_request_ids_are_unique(self):
        middleware = RequestLoggingMiddleware(_make_app_that_sends_response)
        scope = {"type": "http", "method": "GET", "path": "/health"}

        first = _headers(await _run(middleware, scope))[b"x-request-id"]
        second = _headers(await _run(middleware, scope))[b"x-request-id"]

        assert first != second

    async def test_logs_one_line_per_request(self, caplog):
        middleware = RequestLoggingMiddleware(_make_app_that_sends_response)

        with caplog.at_level(logging.INFO, logger="core.middleware"):
            await _run(middleware, {"type": "http", "method": "GET", "path": "/x"})

        records = [r for r in caplog.records if r.getMessage() == "http.request"]
        assert len(records) == 1
        assert records[0].http_status_code == 200
        assert records[0].http_path == "/x"

    async def test_logs_even_when_app_raises(self, caplog):
        async def _failing_app(scope, receive, send):
            raise RuntimeError("boom")

        middleware = RequestLoggingMiddleware(_failing_app)

        with caplog.at_level(logging.INFO, logger="core.middleware"):
            with pytest.raises(RuntimeError):
                await _run(
                    middleware, {"type": "http", "method": "GET", "path": "/fail"}
                )

        records = [r for r in caplog.records if r.getMessage() == "http.request"]
        assert len(records) == 1
        assert records[0].http_status_code is None
