from __future__ import annotations

from sqlalchemy import and_, func, insert, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from care_messaging.domain.entities.message import Message
from care_messaging.infrastructure.db.errors import storage_errors
from care_messaging.infrastructure.db.mappers import message as mapper
from care_messaging.infrastructure.db.models.message import MessageModel

_TIMELINE = MessageModel.seq.asc()


class MessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_between(self, user_a: str, user_b: str) -> list[Message]:
        stmt = (
            select(MessageModel)
            .where(
                or_(
                    and_(MessageModel.sender_id == user_a, MessageModel.receiver_id == user_b),
                    and_(MessageModel.sender_id == user_b, MessageModel.receiver_id == user_a),
                )
            )
            .order_by(_TIMELINE)
        )
        with storage_errors():
            result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def list_involving(self, user_id: str) -> list[Message]:
        stmt = (
            select(MessageModel)
            .where(
                or_(MessageModel.sender_id == user_id, MessageModel.receiver_id == user_id)
            )
            .order_by(_TIMELINE)
        )
        with storage_errors():
            result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def count_unread(self, receiver_id: str) -> int:
        stmt = (
            select(func.count())
            .select_from(MessageModel)
            .where(
                MessageModel.receiver_id == receiver_id,
                MessageModel.read.is_(False),
            )
        )
        with storage_errors():
            result = await self._session.execute(stmt)
        return result.scalar_one()


class MessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def append(self, message: Message) -> Message:
        stmt = (
            insert(MessageModel)
            .values(**mapper.entity_to_values(message))
            .returning(MessageModel)
        )
        with storage_errors():
            result = await self._session.execute(stmt)
        return mapper.model_to_entity(result.scalar_one())

    async def mark_read(self, sender_id: str, receiver_id: str) -> int:
        # Conditional on read = false so concurrent callers never double count.
        stmt = (
            update(MessageModel)
            .where(
                MessageModel.sender_id == sender_id,
                MessageModel.receiver_id == receiver_id,
                MessageModel.read.is_(False),
            )
            .values(read=True)
            .returning(MessageModel.id)
            .execution_options(synchronize_session=False)
        )
        with storage_errors():
            result = await self._session.execute(stmt)
        return len(result.scalars().all())
