from __future__ import annotations

import logging

from care_messaging.application.ports.clock import Clock, SystemClock
from care_messaging.application.uow import UnitOfWork
from care_messaging.domain.events.messages_read import MessagesRead

logger = logging.getLogger(__name__)


async def mark_read(
    sender_id: str,
    receiver_id: str,
    uow: UnitOfWork,
    *,
    clock: Clock | None = None,
) -> int:
    """Mark every unread ``sender_id -> receiver_id`` message as read.

    Direction-scoped: replies from ``receiver_id`` are untouched. Returns how
    many messages changed state; repeating the call returns 0.
    """
    updated = await uow.messages_w.mark_read(sender_id, receiver_id)
    if updated:
        event = MessagesRead(
            sender_id=sender_id,
            receiver_id=receiver_id,
            count=updated,
            read_at=(clock or SystemClock()).now(),
        )
        await uow.outbox.add(event)
        logger.debug("Marked %d messages read %s -> %s", updated, sender_id, receiver_id)
    await uow.commit()
    return updated
