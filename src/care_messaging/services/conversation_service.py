from __future__ import annotations

from care_messaging.application.uow import UnitOfWork
from care_messaging.domain.entities.conversation import ConversationSummary
from care_messaging.domain.services import conversation_index


async def get_inbox(
    user_id: str,
    uow: UnitOfWork,
) -> list[ConversationSummary]:
    """One summary per partner of ``user_id``, most recently active first."""
    messages = await uow.messages.list_involving(user_id)
    return conversation_index.inbox(messages, user_id)


async def get_unread_count(
    user_id: str,
    uow: UnitOfWork,
) -> int:
    return await uow.messages.count_unread(user_id)
