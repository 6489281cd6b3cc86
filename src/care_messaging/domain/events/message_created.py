from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar
from uuid import UUID

from care_messaging.domain.entities.message import Message


@dataclass(frozen=True, slots=True)
class MessageCreated:
    """A message was appended; both participants should see it."""

    event_type: ClassVar[str] = "chat.message_created"
    ws_type: ClassVar[str] = "message.created"

    message_id: UUID
    sender_id: str
    receiver_id: str
    sender_role: str | None
    content: str
    created_at: datetime
    seq: int

    @classmethod
    def of(cls, msg: Message) -> MessageCreated:
        return cls(
            message_id=msg.id,
            sender_id=msg.sender_id,
            receiver_id=msg.receiver_id,
            sender_role=msg.sender_role,
            content=msg.content,
            created_at=msg.created_at,
            seq=msg.seq,
        )

    @property
    def recipients(self) -> frozenset[str]:
        return frozenset((self.sender_id, self.receiver_id))

    def payload(self) -> dict[str, Any]:
        return {
            "message_id": str(self.message_id),
            "sender_id": self.sender_id,
            "receiver_id": self.receiver_id,
            "sender_role": self.sender_role,
            "content": self.content,
            "created_at": self.created_at.isoformat(),
            "seq": self.seq,
        }

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> MessageCreated:
        return cls(
            message_id=UUID(data["message_id"]),
            sender_id=data["sender_id"],
            receiver_id=data["receiver_id"],
            sender_role=data.get("sender_role"),
            content=data["content"],
            created_at=datetime.fromisoformat(data["created_at"]),
            seq=int(data["seq"]),
        )
