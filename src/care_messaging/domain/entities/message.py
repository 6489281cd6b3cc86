from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Message:
    id: UUID
    sender_id: str
    receiver_id: str
    sender_role: str | None
    content: str
    read: bool
    created_at: datetime
    seq: int = 0  # assigned by storage on append

    @property
    def sort_key(self) -> int:
        # Storage order; created_at is only the sender-side stamp.
        return self.seq

    def involves(self, user_id: str) -> bool:
        return self.sender_id == user_id or self.receiver_id == user_id

    def partner_of(self, user_id: str) -> str:
        return self.receiver_id if self.sender_id == user_id else self.sender_id

    def is_unread_for(self, user_id: str) -> bool:
        return self.receiver_id == user_id and not self.read
