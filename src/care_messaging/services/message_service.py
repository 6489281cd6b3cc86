from __future__ import annotations

import logging
import uuid

from care_messaging.application.exceptions import InvalidInputError
from care_messaging.application.ports.clock import Clock, MonotonicClock
from care_messaging.application.uow import UnitOfWork
from care_messaging.config import settings
from care_messaging.domain.entities.message import Message
from care_messaging.domain.events.message_created import MessageCreated
from care_messaging.domain.services import conversation_index

logger = logging.getLogger(__name__)

_clock = MonotonicClock()


def _validate_send(sender_id: str, receiver_id: str, content: str) -> None:
    if not sender_id or not receiver_id:
        raise InvalidInputError("sender_id and receiver_id are required")
    if sender_id == receiver_id:
        raise InvalidInputError("Cannot send a message to yourself")
    if not content or not content.strip():
        raise InvalidInputError("Message content must not be empty")
    if len(content) > settings.MESSAGE_MAX_LENGTH:
        raise InvalidInputError(
            f"Message content exceeds {settings.MESSAGE_MAX_LENGTH} characters"
        )


async def send_message(
    sender_id: str,
    receiver_id: str,
    content: str,
    uow: UnitOfWork,
    *,
    sender_role: str | None = None,
    clock: Clock | None = None,
) -> Message:
    """Append a new unread message and queue its ``chat.message_created`` event.

    Validation happens before anything is written. The event goes through the
    outbox in the same transaction, so a failing notifier never undoes a send.
    """
    _validate_send(sender_id, receiver_id, content)

    msg = Message(
        id=uuid.uuid4(),
        sender_id=sender_id,
        receiver_id=receiver_id,
        sender_role=sender_role,
        content=content,
        read=False,
        created_at=(clock or _clock).now(),
    )
    msg = await uow.messages_w.append(msg)

    await uow.outbox.add(MessageCreated.of(msg))
    await uow.commit()

    logger.debug("Message %s sent %s -> %s", msg.id, sender_id, receiver_id)
    return msg


async def get_transcript(
    user_a: str,
    user_b: str,
    uow: UnitOfWork,
) -> list[Message]:
    """Both directions between two users, oldest first. Empty for strangers."""
    messages = await uow.messages.list_between(user_a, user_b)
    return conversation_index.transcript(messages, user_a, user_b)
