"""Chat event fan-out over Redis Pub/Sub.

The outbox worker publishes through ``RedisChatNotifier``; every API process
runs one ``ChatEventListener`` that hands decoded events to its WebSocket
dispatcher.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

import redis.asyncio as aioredis
from redis.exceptions import ConnectionError as RedisConnectionError

from care_messaging.domain.events.catalog import ChatEvent
from care_messaging.infrastructure.bus import codec

logger = logging.getLogger(__name__)

ChatEventHandler = Callable[[ChatEvent], Awaitable[None]]

RECONNECT_DELAYS = (0.5, 1.0, 2.0, 5.0)


class RedisChatNotifier:
    """Implements application.ports.bus.ChatEventPublisher."""

    def __init__(self, redis: aioredis.Redis, channel: str) -> None:
        self._redis = redis
        self._channel = channel

    async def publish(self, event: ChatEvent) -> None:
        listeners = await self._redis.publish(self._channel, codec.encode(event))
        logger.debug("Published %s to %d listener(s)", event.event_type, listeners)


class ChatEventListener:
    """Background task feeding channel events to ``handler`` until stopped.

    A dropped Redis connection is retried with a growing delay; messages
    published while disconnected are lost, clients recover them by reloading
    their inbox.
    """

    def __init__(
        self,
        redis: aioredis.Redis,
        channel: str,
        handler: ChatEventHandler,
    ) -> None:
        self._redis = redis
        self._channel = channel
        self._handler = handler
        self._failures = 0
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        self._task = asyncio.create_task(self._run(), name=f"chat-events:{self._channel}")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Chat event listener on %s stopped", self._channel)

    async def _run(self) -> None:
        while True:
            try:
                await self._consume()
            except (RedisConnectionError, OSError) as exc:
                delay = RECONNECT_DELAYS[min(self._failures, len(RECONNECT_DELAYS) - 1)]
                self._failures += 1
                logger.warning(
                    "Pub/Sub connection on %s lost (%s), retrying in %.1fs",
                    self._channel, exc, delay,
                )
                await asyncio.sleep(delay)

    async def _consume(self) -> None:
        async with self._redis.pubsub(ignore_subscribe_messages=True) as pubsub:
            await pubsub.subscribe(self._channel)
            self._failures = 0
            logger.info("Chat event listener subscribed to %s", self._channel)
            async for message in pubsub.listen():
                await self.dispatch(message["data"])

    async def dispatch(self, raw: str | bytes) -> None:
        """Decode one channel message and run the handler on it."""
        try:
            event = codec.decode(raw)
        except ValueError:
            logger.warning("Dropping undecodable chat event %r", raw)
            return
        try:
            await self._handler(event)
        except Exception:
            logger.exception("Chat event handler failed for %s", event.event_type)
