from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import select

from care_messaging.infrastructure.db.models.message import MessageModel
from care_messaging.infrastructure.db.repositories.outbox import OutboxRepo
from care_messaging.infrastructure.db.session import AsyncSessionLocal

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


async def _check_storage() -> int:
    """Touch the message log and return the unpublished outbox backlog."""
    async with AsyncSessionLocal() as session:
        await session.execute(select(MessageModel.seq).limit(1))
        return await OutboxRepo(session).count_backlog()


@router.get("/readyz")
async def readyz(request: Request) -> JSONResponse:
    """Ready when the message log is queryable and Pub/Sub answers.

    The outbox backlog is reported, not judged: a slow worker delays
    notifications but never loses messages.
    """
    checks: dict[str, str] = {}
    body: dict[str, object] = {}

    try:
        body["outbox_backlog"] = await _check_storage()
        checks["messages"] = "ok"
    except Exception as exc:  # noqa: BLE001
        checks["messages"] = f"{type(exc).__name__}: {exc}"

    try:
        await request.app.state.redis.ping()
        checks["pubsub"] = "ok"
    except Exception as exc:  # noqa: BLE001
        checks["pubsub"] = f"{type(exc).__name__}: {exc}"

    failing = {name: why for name, why in checks.items() if why != "ok"}
    if failing:
        logger.warning("Not ready: %s", failing)
        return JSONResponse(status_code=503, content={"status": "unavailable", "checks": checks})
    return JSONResponse(content={"status": "ready", "checks": checks, **body})
