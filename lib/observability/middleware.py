"""
ASGI middleware: request correlation and access logging.

    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

Starlette runs the last-added middleware first, so the access log line
already carries the request id.
"""

import logging
import time

from .context import RequestContext, generate_request_id

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = b"x-request-id"


def _header(scope, name: bytes) -> str | None:
    for key, value in scope.get("headers", []):
        if key.lower() == name:
            try:
                return value.decode("utf-8").strip() or None
            except UnicodeDecodeError:
                logger.warning("Ignoring undecodable %s header", name.decode())
                return None
    return None


class _HTTPMiddleware:
    """Passes non-HTTP scopes (lifespan, websocket) straight through."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] == "http":
            await self.handle(scope, receive, send)
        else:
            await self.app(scope, receive, send)

    async def handle(self, scope, receive, send):
        raise NotImplementedError


class CorrelationIdMiddleware(_HTTPMiddleware):
    """Bind X-Request-ID (incoming or generated) to the log context and echo it."""

    async def handle(self, scope, receive, send):
        request_id = _header(scope, REQUEST_ID_HEADER) or generate_request_id()
        encoded = request_id.encode("utf-8")

        async def send_with_id(message):
            if message["type"] == "http.response.start":
                headers = [h for h in message.get("headers", []) if h[0].lower() != REQUEST_ID_HEADER]
                message["headers"] = [*headers, (REQUEST_ID_HEADER, encoded)]
            await send(message)

        with RequestContext(request_id=request_id):
            await self.app(scope, receive, send_with_id)


class AccessLogMiddleware(_HTTPMiddleware):
    """One INFO line per request: method, path, status, duration."""

    async def handle(self, scope, receive, send):
        started = time.perf_counter()
        status_code = 500

        async def send_recording_status(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_recording_status)
        finally:
            elapsed = round((time.perf_counter() - started) * 1000, 1)
            logger.info(
                "%s %s -> %s (%.1f ms)",
                scope.get("method"),
                scope.get("path"),
                status_code,
                elapsed,
                extra={"status_code": status_code, "duration_ms": elapsed},
            )
