from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

from care_messaging.domain.events.catalog import ChatEvent, event_from_payload


@dataclass(frozen=True, slots=True)
class OutboxRecord:
    """A stored chat event as the worker sees it."""

    id: int
    event_type: str
    payload: dict[str, Any]
    attempts: int

    def event(self) -> ChatEvent:
        return event_from_payload(self.event_type, self.payload)


class OutboxStore(Protocol):
    async def add(self, event: ChatEvent) -> None:
        """Queue ``event``; it is published only once the transaction commits."""
        ...

    async def fetch_pending(self, batch_size: int, now: datetime) -> list[OutboxRecord]:
        """Claim due records for this worker (they move to ``processing``)."""
        ...

    async def mark_sent(self, ids: list[int]) -> None: ...

    async def mark_failed(self, record_id: int, next_retry_at: datetime) -> None: ...

    async def mark_dead(self, record_id: int) -> None: ...

    async def count_backlog(self) -> int:
        """Records still waiting to be published, retries included."""
        ...
