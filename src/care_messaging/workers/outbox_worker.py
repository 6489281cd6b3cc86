"""Outbox worker: publishes committed chat events to Redis Pub/Sub."""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone

import redis.asyncio as aioredis

from care_messaging.application.ports.bus import ChatEventPublisher
from care_messaging.application.repositories.outbox import OutboxRecord
from care_messaging.application.uow import UnitOfWork
from care_messaging.config import settings
from care_messaging.domain.events.catalog import ChatEvent
from care_messaging.infrastructure.bus.redis_notifier import RedisChatNotifier
from care_messaging.infrastructure.db.session import AsyncSessionLocal
from care_messaging.infrastructure.db.uow import SqlAlchemyUoW
from care_messaging.log_config import configure_logging

logger = logging.getLogger(__name__)

BASE_DELAY_SECONDS = 5
MAX_DELAY_SECONDS = 300


def calc_backoff(attempts: int, now: datetime) -> datetime:
    delay = min(BASE_DELAY_SECONDS * (2 ** attempts), MAX_DELAY_SECONDS)
    return now + timedelta(seconds=delay)


def _decode(record: OutboxRecord) -> ChatEvent | None:
    """The record's event, or None when it should be dead-lettered."""
    if record.attempts >= settings.OUTBOX_MAX_ATTEMPTS:
        logger.error("Outbox record %d gave up after %d attempts", record.id, record.attempts)
        return None
    try:
        return record.event()
    except ValueError:
        logger.exception("Outbox record %d holds an unreadable %s", record.id, record.event_type)
        return None


async def process_batch(uow: UnitOfWork, publisher: ChatEventPublisher) -> int:
    """Publish one claimed batch. Returns how many records were sent.

    Every claimed record leaves ``processing``: sent, rescheduled with
    backoff, or dead-lettered.
    """
    now = datetime.now(timezone.utc)
    batch = await uow.outbox.fetch_pending(settings.OUTBOX_BATCH_SIZE, now)
    if not batch:
        return 0

    sent_ids: list[int] = []
    for record in batch:
        event = _decode(record)
        if event is None:
            await uow.outbox.mark_dead(record.id)
            continue
        try:
            await publisher.publish(event)
        except Exception:
            logger.exception("Failed to publish outbox record %d", record.id)
            await uow.outbox.mark_failed(record.id, calc_backoff(record.attempts, now))
        else:
            sent_ids.append(record.id)

    await uow.outbox.mark_sent(sent_ids)
    await uow.commit()
    if sent_ids:
        logger.info("Published %d/%d outbox records", len(sent_ids), len(batch))
    return len(sent_ids)


async def run_outbox_worker() -> None:
    redis = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
    notifier = RedisChatNotifier(redis, settings.REDIS_PUBSUB_CHANNEL)
    logger.info(
        "Outbox worker started (channel=%s, poll=%.1fs, batch=%d, max_attempts=%d)",
        settings.REDIS_PUBSUB_CHANNEL,
        settings.OUTBOX_POLL_INTERVAL,
        settings.OUTBOX_BATCH_SIZE,
        settings.OUTBOX_MAX_ATTEMPTS,
    )
    try:
        while True:
            try:
                async with AsyncSessionLocal() as session:
                    await process_batch(SqlAlchemyUoW(session), notifier)
            except Exception:
                logger.exception("Outbox worker loop error")
            await asyncio.sleep(settings.OUTBOX_POLL_INTERVAL)
    finally:
        await redis.aclose()


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    asyncio.run(run_outbox_worker())


if __name__ == "__main__":
    main()
