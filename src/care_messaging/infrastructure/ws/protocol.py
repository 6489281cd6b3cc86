"""WebSocket message envelope models."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class WsInbound(BaseModel):
    """Client → Server."""

    type: str  # ping | message.send | mark_read
    data: dict[str, Any] = {}


class WsOutbound(BaseModel):
    """Server → Client."""

    type: str  # pong | message.sent | messages.marked | message.created | messages.read | error
    data: dict[str, Any] = {}


class WsSendData(BaseModel):
    receiver_id: str
    content: str


class WsMarkReadData(BaseModel):
    partner_id: str
