from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from care_messaging.infrastructure.db.errors import storage_errors
from care_messaging.infrastructure.db.repositories.message import (
    MessageReaderRepo,
    MessageWriterRepo,
)
from care_messaging.infrastructure.db.repositories.outbox import OutboxRepo


class SqlAlchemyUoW:
    """UnitOfWork over one AsyncSession; the session's owner closes it."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self.messages = MessageReaderRepo(session)
        self.messages_w = MessageWriterRepo(session)
        self.outbox = OutboxRepo(session)

    async def commit(self) -> None:
        with storage_errors():
            await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()
