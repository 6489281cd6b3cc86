from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import ColumnElement, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from care_messaging.application.repositories.outbox import OutboxRecord
from care_messaging.domain.events.catalog import ChatEvent
from care_messaging.domain.value_objects.enums import OutboxStatus
from care_messaging.infrastructure.db.errors import storage_errors
from care_messaging.infrastructure.db.models.outbox import OutboxMessageModel

_WAITING = (OutboxStatus.PENDING, OutboxStatus.FAILED)


def _due(now: datetime) -> ColumnElement[bool]:
    return OutboxMessageModel.next_retry_at.is_(None) | (OutboxMessageModel.next_retry_at <= now)


class OutboxRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, event: ChatEvent) -> None:
        self._session.add(
            OutboxMessageModel(event_type=event.event_type, payload=event.payload())
        )
        with storage_errors():
            await self._session.flush()

    async def fetch_pending(self, batch_size: int, now: datetime) -> list[OutboxRecord]:
        due = (
            select(OutboxMessageModel.id)
            .where(
                OutboxMessageModel.status.in_(_WAITING),
                _due(now),
            )
            .order_by(OutboxMessageModel.id)
            .limit(batch_size)
            .with_for_update(skip_locked=True)
        )
        # Claim and read back in one statement; skip_locked keeps workers apart.
        claim = (
            update(OutboxMessageModel)
            .where(OutboxMessageModel.id.in_(due.scalar_subquery()))
            .values(status=OutboxStatus.PROCESSING)
            .returning(
                OutboxMessageModel.id,
                OutboxMessageModel.event_type,
                OutboxMessageModel.payload,
                OutboxMessageModel.attempts,
            )
        )
        with storage_errors():
            result = await self._session.execute(claim)
        rows = sorted(result.all(), key=lambda r: r.id)
        return [
            OutboxRecord(id=r.id, event_type=r.event_type, payload=r.payload, attempts=r.attempts)
            for r in rows
        ]

    async def mark_sent(self, ids: list[int]) -> None:
        if ids:
            await self._set_status(
                OutboxMessageModel.id.in_(ids),
                OutboxStatus.SENT,
                published_at=func.now(),
            )

    async def mark_failed(self, record_id: int, next_retry_at: datetime) -> None:
        await self._set_status(
            OutboxMessageModel.id == record_id,
            OutboxStatus.FAILED,
            attempts=OutboxMessageModel.attempts + 1,
            next_retry_at=next_retry_at,
        )

    async def mark_dead(self, record_id: int) -> None:
        await self._set_status(OutboxMessageModel.id == record_id, OutboxStatus.DEAD)

    async def count_backlog(self) -> int:
        stmt = (
            select(func.count())
            .select_from(OutboxMessageModel)
            .where(OutboxMessageModel.status.in_(_WAITING))
        )
        with storage_errors():
            result = await self._session.execute(stmt)
        return result.scalar_one()

    async def _set_status(
        self, criterion: ColumnElement[bool], status: OutboxStatus, **values: Any,
    ) -> None:
        stmt = update(OutboxMessageModel).where(criterion).values(status=status, **values)
        with storage_errors():
            await self._session.execute(stmt)
