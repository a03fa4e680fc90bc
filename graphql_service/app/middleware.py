"""Request ID middleware.

Request IDs are unique per HTTP request or WebSocket connection and are used
to correlate log records. The middleware:

1. Takes the ID from the ``X-Request-ID`` header, or generates a UUID
2. Stores it in ``scope["state"]["request_id"]``
3. Adds it to the logging context
4. Echoes it in the ``X-Request-ID`` response header (HTTP only)
5. Clears the logging context once the request completes
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from starlette.datastructures import MutableHeaders

from graphql_service.infra.logging.context import clear_log_context, set_log_context

if TYPE_CHECKING:
    from fastapi import FastAPI
    from starlette.types import ASGIApp, Message, Receive, Scope, Send


class RequestIDMiddleware:
    """Pure ASGI middleware propagating a request ID into the log context.

    WebSocket connections get an ID as well so that log records emitted while
    serving subscriptions can be correlated; there is no response header to
    add in that case.

    Usage:
        app = FastAPI()
        app.add_middleware(RequestIDMiddleware)
    """

    header_name = "x-request-id"
    state_key = "request_id"

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        request_id = self._extract_or_generate(scope)
        scope.setdefault("state", {})[self.state_key] = request_id
        set_log_context(request_id=request_id)

        async def send_with_header(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers.append(self.header_name, request_id)
            await send(message)

        try:
            await self.app(scope, receive, send_with_header)
        finally:
            clear_log_context()

    def _extract_or_generate(self, scope: Scope) -> str:
        state = scope.get("state", {})
        if existing := state.get(self.state_key):
            return existing

        headers = dict(scope.get("headers", []))
        header_bytes = headers.get(self.header_name.encode("latin-1"))
        if header_bytes:
            return header_bytes.decode("latin-1")

        return str(uuid.uuid4())


def configure_middleware(app: FastAPI) -> None:
    """Install middleware on ``app``."""
    app.add_middleware(RequestIDMiddleware)
