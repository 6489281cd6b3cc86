"""Shared test fixtures."""
from __future__ import annotations

import dataclasses
import itertools
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import pytest

from care_messaging.application.dto.principal import Principal
from care_messaging.application.repositories.outbox import OutboxRecord
from care_messaging.domain.entities.message import Message
from care_messaging.domain.events.catalog import ChatEvent
from care_messaging.domain.value_objects.enums import UserRole

EPOCH = datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def doctor_principal() -> Principal:
    return Principal(subject_id="doctor_1", role=UserRole.DOCTOR)


@pytest.fixture
def patient_principal() -> Principal:
    return Principal(subject_id="patient_1", role=UserRole.PATIENT)


class StepClock:
    """Advances by ``step`` on every reading; step 0 gives a frozen clock."""

    def __init__(self, start: datetime = EPOCH, step: timedelta = timedelta(seconds=1)) -> None:
        self._next = start
        self._step = step

    def now(self) -> datetime:
        ts = self._next
        self._next += self._step
        return ts


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


def make_message(
    *,
    sender_id: str = "alice",
    receiver_id: str = "bob",
    content: str = "hello",
    read: bool = False,
    created_at: datetime = EPOCH,
    seq: int = 0,
) -> Message:
    return Message(
        id=uuid.uuid4(),
        sender_id=sender_id,
        receiver_id=receiver_id,
        sender_role=None,
        content=content,
        read=read,
        created_at=created_at,
        seq=seq,
    )


@dataclass
class FakeMessageStore:
    """In-memory append log implementing both MessageReader and MessageWriter."""

    _messages: list[Message] = field(default_factory=list)
    _seq: itertools.count = field(default_factory=lambda: itertools.count(1))

    def _ordered(self, messages: list[Message]) -> list[Message]:
        return sorted(messages, key=lambda m: m.sort_key)

    async def list_between(self, user_a: str, user_b: str) -> list[Message]:
        pair = {user_a, user_b}
        return self._ordered([m for m in self._messages if {m.sender_id, m.receiver_id} == pair])

    async def list_involving(self, user_id: str) -> list[Message]:
        return self._ordered([m for m in self._messages if m.involves(user_id)])

    async def count_unread(self, receiver_id: str) -> int:
        return sum(1 for m in self._messages if m.receiver_id == receiver_id and not m.read)

    async def append(self, message: Message) -> Message:
        stored = dataclasses.replace(message, seq=next(self._seq))
        self._messages.append(stored)
        return stored

    async def mark_read(self, sender_id: str, receiver_id: str) -> int:
        updated = 0
        for i, m in enumerate(self._messages):
            if m.sender_id == sender_id and m.receiver_id == receiver_id and not m.read:
                self._messages[i] = dataclasses.replace(m, read=True)
                updated += 1
        return updated


@dataclass
class FakeOutbox:
    _events: list[ChatEvent] = field(default_factory=list)
    _pending: list[OutboxRecord] = field(default_factory=list)
    _sent: list[int] = field(default_factory=list)
    _failed: list[tuple[int, datetime]] = field(default_factory=list)
    _dead: list[int] = field(default_factory=list)

    async def add(self, event: ChatEvent) -> None:
        self._events.append(event)

    async def fetch_pending(self, batch_size: int, now: datetime) -> list[OutboxRecord]:
        batch, self._pending = self._pending[:batch_size], self._pending[batch_size:]
        return batch

    async def mark_sent(self, ids: list[int]) -> None:
        self._sent.extend(ids)

    async def mark_failed(self, record_id: int, next_retry_at: datetime) -> None:
        self._failed.append((record_id, next_retry_at))

    async def mark_dead(self, record_id: int) -> None:
        self._dead.append(record_id)

    async def count_backlog(self) -> int:
        return len(self._pending)


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    messages: FakeMessageStore = field(default_factory=FakeMessageStore)
    messages_w: FakeMessageStore | None = None
    outbox: FakeOutbox = field(default_factory=FakeOutbox)
    _committed: bool = False

    def __post_init__(self) -> None:
        if self.messages_w is None:
            self.messages_w = self.messages

    async def commit(self) -> None:
        self._committed = True

    async def rollback(self) -> None:
        pass
