from __future__ import annotations

from typing import Protocol

from care_messaging.domain.events.catalog import ChatEvent


class ChatEventPublisher(Protocol):
    """Broadcasts a committed chat event to every API process."""

    async def publish(self, event: ChatEvent) -> None: ...
