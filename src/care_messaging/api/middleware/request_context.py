"""Pure ASGI middleware: correlation ids for every scope, access log for HTTP.

Runs for WebSocket connections too, so everything logged while serving a
chat socket carries the connection's id.
"""
from __future__ import annotations

import logging
import time
import uuid

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from care_messaging.log_config import correlation_id_ctx

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
TIMING_HEADER = "X-Response-Time-Ms"


class RequestContextMiddleware:
    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        cid = Headers(scope=scope).get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        token = correlation_id_ctx.set(cid)
        start = time.perf_counter()
        status_code = 500

        async def send_with_headers(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                headers = MutableHeaders(scope=message)
                headers[REQUEST_ID_HEADER] = cid
                headers[TIMING_HEADER] = f"{(time.perf_counter() - start) * 1000:.1f}"
            await send(message)

        try:
            await self.app(scope, receive, send_with_headers)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            if scope["type"] == "http":
                logger.info(
                    "%s %s %s %.1fms", scope["method"], scope["path"], status_code, elapsed_ms,
                )
            else:
                logger.info("WS %s closed after %.0fms", scope["path"], elapsed_ms)
            correlation_id_ctx.reset(token)
