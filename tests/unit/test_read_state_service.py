from __future__ import annotations

import pytest

from care_messaging.domain.events.messages_read import MessagesRead
from care_messaging.services import message_service, read_state_service
from tests.conftest import FakeUoW


@pytest.mark.asyncio
async def test_mark_read_returns_count_and_is_idempotent(clock):
    uow = FakeUoW()
    for text in ("a", "b"):
        await message_service.send_message("alice", "bob", text, uow, clock=clock)

    assert await read_state_service.mark_read("alice", "bob", uow) == 2
    assert await read_state_service.mark_read("alice", "bob", uow) == 0


@pytest.mark.asyncio
async def test_mark_read_is_direction_scoped(clock):
    uow = FakeUoW()
    await message_service.send_message("alice", "bob", "Hi", uow, clock=clock)
    reply = await message_service.send_message("bob", "alice", "Hello", uow, clock=clock)

    await read_state_service.mark_read("alice", "bob", uow)

    stored = {m.id: m for m in uow.messages._messages}
    assert stored[reply.id].read is False
    assert all(m.read for m in uow.messages._messages if m.sender_id == "alice")


@pytest.mark.asyncio
async def test_mark_read_with_nothing_unread_is_not_an_error():
    uow = FakeUoW()

    assert await read_state_service.mark_read("nobody", "bob", uow) == 0
    assert uow.outbox._events == []


@pytest.mark.asyncio
async def test_mark_read_records_read_receipt_event(clock):
    uow = FakeUoW()
    await message_service.send_message("alice", "bob", "Hi", uow, clock=clock)
    uow.outbox._events.clear()

    await read_state_service.mark_read("alice", "bob", uow, clock=clock)

    (event,) = uow.outbox._events
    assert isinstance(event, MessagesRead)
    assert (event.sender_id, event.receiver_id, event.count) == ("alice", "bob", 1)
    assert event.recipients == {"alice"}
    assert uow._committed is True


@pytest.mark.asyncio
async def test_read_flag_never_reverts(clock):
    uow = FakeUoW()
    await message_service.send_message("alice", "bob", "Hi", uow, clock=clock)
    await read_state_service.mark_read("alice", "bob", uow)

    await message_service.send_message("alice", "bob", "again", uow, clock=clock)

    first, second = await message_service.get_transcript("alice", "bob", uow)
    assert first.read is True
    assert second.read is False
