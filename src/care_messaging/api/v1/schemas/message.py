from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class SendMessageRequest(BaseModel):
    receiver_id: str
    content: str


class MessageResponse(BaseModel):
    id: UUID
    sender_id: str
    receiver_id: str
    sender_role: str | None
    content: str
    read: bool
    created_at: datetime
    seq: int

    model_config = {"from_attributes": True}
