"""JSON envelope for chat events on the Pub/Sub channel."""
from __future__ import annotations

import json

from care_messaging.domain.events.catalog import ChatEvent, event_from_payload


def encode(event: ChatEvent) -> str:
    return json.dumps({"event": event.event_type, "data": event.payload()})


def decode(raw: str | bytes) -> ChatEvent:
    try:
        envelope = json.loads(raw)
        event_type, data = envelope["event"], envelope["data"]
    except (json.JSONDecodeError, KeyError, TypeError) as exc:
        raise ValueError(f"Malformed event envelope: {raw!r}") from exc
    return event_from_payload(event_type, data)
