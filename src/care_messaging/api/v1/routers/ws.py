"""Chat WebSocket: one socket per browser tab, frames handled one at a time.

Every inbound frame gets exactly one reply frame (an ack or an ``error``).
Events about other users' actions arrive separately through Pub/Sub.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect
from pydantic import ValidationError as PydanticValidationError

from care_messaging.api.deps import get_verifier
from care_messaging.api.v1.schemas.message import MessageResponse
from care_messaging.application.dto.principal import Principal
from care_messaging.application.exceptions import AppError, AuthenticationError
from care_messaging.application.policies.permissions import assert_onboarded
from care_messaging.application.uow import UnitOfWork
from care_messaging.config import settings
from care_messaging.infrastructure.db.session import AsyncSessionLocal
from care_messaging.infrastructure.db.uow import SqlAlchemyUoW
from care_messaging.infrastructure.ws.manager import ConnectionManager
from care_messaging.infrastructure.ws.protocol import (
    WsInbound,
    WsMarkReadData,
    WsOutbound,
    WsSendData,
)
from care_messaging.log_config import correlation_id_ctx
from care_messaging.services import message_service, read_state_service

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])

manager = ConnectionManager()

Reply = tuple[str, dict[str, Any]]
FrameHandler = Callable[[Principal, dict[str, Any]], Awaitable[Reply]]


def get_manager() -> ConnectionManager:
    return manager


@asynccontextmanager
async def open_uow() -> AsyncIterator[UnitOfWork]:
    """One transaction per inbound frame."""
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUoW(session)


async def _on_ping(principal: Principal, data: dict[str, Any]) -> Reply:
    return "pong", {}


async def _on_send(principal: Principal, data: dict[str, Any]) -> Reply:
    req = WsSendData.model_validate(data)
    assert_onboarded(principal)
    async with open_uow() as uow:
        msg = await message_service.send_message(
            principal.subject_id,
            req.receiver_id,
            req.content,
            uow,
            sender_role=principal.role,
        )
    # Both sides still get message.created once the outbox is published.
    payload = MessageResponse.model_validate(msg, from_attributes=True).model_dump(mode="json")
    return "message.sent", {"message": payload}


async def _on_mark_read(principal: Principal, data: dict[str, Any]) -> Reply:
    req = WsMarkReadData.model_validate(data)
    async with open_uow() as uow:
        updated = await read_state_service.mark_read(req.partner_id, principal.subject_id, uow)
    return "messages.marked", {"partner_id": req.partner_id, "updated": updated}


_HANDLERS: dict[str, FrameHandler] = {
    "ping": _on_ping,
    "message.send": _on_send,
    "mark_read": _on_mark_read,
}

_FAILURE_CODES = {
    "message.send": "send_failed",
    "mark_read": "mark_read_failed",
}


async def handle_frame(principal: Principal, raw: str) -> Reply:
    try:
        frame = WsInbound.model_validate_json(raw)
    except PydanticValidationError:
        return "error", {"code": "invalid_payload"}

    handler = _HANDLERS.get(frame.type)
    if handler is None:
        return "error", {"code": "unknown_type", "type": frame.type}

    token = correlation_id_ctx.set(f"{correlation_id_ctx.get() or 'ws'}/{uuid.uuid4().hex[:8]}")
    try:
        return await handler(principal, frame.data)
    except PydanticValidationError as exc:
        return "error", {"code": "invalid_data", "detail": str(exc)}
    except AppError as exc:
        logger.warning("%s refused for %s: %s", frame.type, principal.subject_id, exc.detail)
        code = _FAILURE_CODES.get(frame.type, "failed")
        return "error", {"code": code, "detail": exc.detail}
    finally:
        correlation_id_ctx.reset(token)


async def _send(ws: WebSocket, event_type: str, data: dict[str, Any]) -> None:
    await ws.send_text(WsOutbound(type=event_type, data=data).model_dump_json())


async def _heartbeat(ws: WebSocket) -> None:
    while True:
        await asyncio.sleep(settings.WS_HEARTBEAT_SECONDS)
        try:
            await _send(ws, "pong", {})
        except Exception:  # noqa: BLE001
            logger.debug("WS heartbeat stopped", exc_info=True)
            return


@router.websocket("/ws/chat")
async def ws_chat(
    websocket: WebSocket,
    token: str = Query(...),
) -> None:
    try:
        principal = await get_verifier().verify(token)
    except AuthenticationError as exc:
        logger.debug("WS auth failed: %s", exc.detail)
        await websocket.close(code=4001, reason="Authentication failed")
        return

    user = principal.principal_key
    await manager.connect(websocket, user)
    heartbeat = asyncio.create_task(_heartbeat(websocket), name=f"ws-heartbeat-{user}")
    try:
        while True:
            reply_type, data = await handle_frame(principal, await websocket.receive_text())
            await _send(websocket, reply_type, data)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for %s", user)
    finally:
        heartbeat.cancel()
        manager.disconnect(websocket, user)
