from __future__ import annotations

from typing import Protocol

from care_messaging.domain.entities.message import Message


class MessageReader(Protocol):
    async def list_between(self, user_a: str, user_b: str) -> list[Message]:
        """Both directions of one pair, in insertion (``seq``) order."""
        ...

    async def list_involving(self, user_id: str) -> list[Message]:
        """Every message sent or received by ``user_id``, in insertion (``seq``) order."""
        ...

    async def count_unread(self, receiver_id: str) -> int: ...


class MessageWriter(Protocol):
    async def append(self, message: Message) -> Message:
        """Insert one message. Returns it with the storage-assigned ``seq``."""
        ...

    async def mark_read(self, sender_id: str, receiver_id: str) -> int:
        """Flip unread sender -> receiver messages to read. Returns rows changed."""
        ...
