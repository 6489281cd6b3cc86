from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class ConversationSummary:
    """One inbox row: a partner, the latest message exchanged, unread count."""

    partner_id: str
    last_message_id: UUID
    last_message_content: str
    last_message_at: datetime
    last_message_sender_id: str
    unread_count: int
