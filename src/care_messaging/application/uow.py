from __future__ import annotations

from typing import Protocol

from care_messaging.application.repositories.message import MessageReader, MessageWriter
from care_messaging.application.repositories.outbox import OutboxStore


class UnitOfWork(Protocol):
    """One transaction over the message log and its notification outbox.

    Views read through ``messages``; appends and read-state flips go through
    ``messages_w``. Events queued on ``outbox`` reach the worker only after
    ``commit``, so a rolled-back send never notifies anyone.
    """

    messages: MessageReader
    messages_w: MessageWriter
    outbox: OutboxStore

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
