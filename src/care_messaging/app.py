from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from care_messaging.api.middleware.request_context import RequestContextMiddleware
from care_messaging.api.v1.routers import conversations, health, messages, ws
from care_messaging.application.exceptions import (
    AppError,
    AuthenticationError,
    ForbiddenError,
    InvalidInputError,
    StorageUnavailableError,
)
from care_messaging.config import settings
from care_messaging.domain.events.catalog import ChatEvent
from care_messaging.infrastructure.bus.redis_notifier import ChatEventListener

logger = logging.getLogger(__name__)


async def _on_chat_event(event: ChatEvent) -> None:
    """Push a chat event to the local WS connections of its recipients."""
    await ws.get_manager().send_to_many(event.recipients, event.ws_type, event.payload())


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    app.state.redis = aioredis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
    )
    logger.info("Redis connection pool created")

    listener = ChatEventListener(
        app.state.redis,
        settings.REDIS_PUBSUB_CHANNEL,
        _on_chat_event,
    )
    await listener.start()
    app.state.chat_events = listener

    yield

    await listener.stop()
    await app.state.redis.aclose()
    logger.info("Redis connection pool closed")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Care Messaging Service",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(AppError, _app_error)

    app.include_router(health.router)
    app.include_router(conversations.router)
    app.include_router(messages.router)
    app.include_router(ws.router)

    return app


_ERROR_STATUS: dict[type[AppError], int] = {
    AuthenticationError: 401,
    ForbiddenError: 403,
    InvalidInputError: 422,
    StorageUnavailableError: 503,
}


async def _app_error(request: Request, exc: AppError) -> JSONResponse:
    status_code = next(
        (code for cls, code in _ERROR_STATUS.items() if isinstance(exc, cls)), 500,
    )
    if status_code >= 500:
        # Driver details stay in the log.
        logger.error("%s %s: %s", request.method, request.url.path, exc.detail)
        detail = "Storage unavailable" if status_code == 503 else "Internal error"
        return JSONResponse(status_code=status_code, content={"detail": detail})
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(status_code=status_code, content={"detail": exc.detail}, headers=headers)
