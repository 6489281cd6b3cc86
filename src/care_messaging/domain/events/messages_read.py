from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar


@dataclass(frozen=True, slots=True)
class MessagesRead:
    """``receiver_id`` read ``count`` messages from ``sender_id``.

    Only the sender is notified: it is their messages whose state changed.
    """

    event_type: ClassVar[str] = "chat.messages_read"
    ws_type: ClassVar[str] = "messages.read"

    sender_id: str
    receiver_id: str
    count: int
    read_at: datetime

    @property
    def recipients(self) -> frozenset[str]:
        return frozenset((self.sender_id,))

    def payload(self) -> dict[str, Any]:
        return {
            "sender_id": self.sender_id,
            "receiver_id": self.receiver_id,
            "count": self.count,
            "read_at": self.read_at.isoformat(),
        }

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> MessagesRead:
        return cls(
            sender_id=data["sender_id"],
            receiver_id=data["receiver_id"],
            count=int(data["count"]),
            read_at=datetime.fromisoformat(data["read_at"]),
        )
