"""In-process registry of chat sockets, keyed by identity-provider user id."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Collection
from typing import Any

from fastapi import WebSocket

from care_messaging.infrastructure.ws.protocol import WsOutbound

logger = logging.getLogger(__name__)


class ConnectionManager:
    """A user may hold several sockets (tabs, devices); each gets every event.

    Only users connected to this process are known here; Pub/Sub makes sure
    every process sees every event.
    """

    def __init__(self) -> None:
        self._sockets: dict[str, set[WebSocket]] = {}

    async def connect(self, ws: WebSocket, user_id: str) -> None:
        await ws.accept()
        self._sockets.setdefault(user_id, set()).add(ws)
        logger.debug("WS connected: %s (%d users online)", user_id, len(self._sockets))

    def disconnect(self, ws: WebSocket, user_id: str) -> None:
        sockets = self._sockets.get(user_id)
        if sockets is None:
            return
        sockets.discard(ws)
        if not sockets:
            del self._sockets[user_id]
        logger.debug("WS disconnected: %s", user_id)

    async def send_to_principal(self, user_id: str, event_type: str, data: dict[str, Any]) -> None:
        await self.send_to_many((user_id,), event_type, data)

    async def send_to_many(
        self,
        user_ids: Collection[str],
        event_type: str,
        data: dict[str, Any],
    ) -> None:
        """Deliver one frame to every local socket of ``user_ids`` concurrently.

        Sockets that fail to take the frame are dropped from the registry.
        """
        targets = [
            (user_id, ws)
            for user_id in user_ids
            for ws in list(self._sockets.get(user_id, ()))
        ]
        if not targets:
            return
        raw = WsOutbound(type=event_type, data=data).model_dump_json()
        results = await asyncio.gather(
            *(ws.send_text(raw) for _, ws in targets), return_exceptions=True,
        )
        for (user_id, ws), result in zip(targets, results):
            if isinstance(result, Exception):
                logger.debug("Dropping dead socket for %s: %r", user_id, result)
                self.disconnect(ws, user_id)
