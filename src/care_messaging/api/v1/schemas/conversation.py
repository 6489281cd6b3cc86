from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class ConversationSummaryResponse(BaseModel):
    partner_id: str
    last_message_id: UUID
    last_message_content: str
    last_message_at: datetime
    last_message_sender_id: str
    unread_count: int

    model_config = {"from_attributes": True}


class UnreadCountResponse(BaseModel):
    unread_count: int


class MarkReadResponse(BaseModel):
    updated: int
