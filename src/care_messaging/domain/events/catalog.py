"""Every event the messaging service emits, looked up by ``event_type``."""
from __future__ import annotations

from typing import Any

from care_messaging.domain.events.message_created import MessageCreated
from care_messaging.domain.events.messages_read import MessagesRead

ChatEvent = MessageCreated | MessagesRead

EVENT_TYPES: dict[str, type[MessageCreated] | type[MessagesRead]] = {
    MessageCreated.event_type: MessageCreated,
    MessagesRead.event_type: MessagesRead,
}


def event_from_payload(event_type: str, payload: dict[str, Any]) -> ChatEvent:
    """Rebuild a typed event; ``ValueError`` for unknown types or bad payloads."""
    try:
        cls = EVENT_TYPES[event_type]
    except KeyError:
        raise ValueError(f"Unknown chat event type {event_type!r}") from None
    try:
        return cls.from_payload(payload)
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Bad {event_type} payload: {exc}") from exc
