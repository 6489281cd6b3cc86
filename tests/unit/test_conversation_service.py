from __future__ import annotations

import pytest

from care_messaging.services import conversation_service, message_service, read_state_service
from tests.conftest import FakeUoW


async def _assert_sum_consistent(uow: FakeUoW, user_id: str) -> None:
    inbox = await conversation_service.get_inbox(user_id, uow)
    total = await conversation_service.get_unread_count(user_id, uow)
    assert sum(e.unread_count for e in inbox) == total


@pytest.mark.asyncio
async def test_first_message_shows_in_receiver_inbox(clock):
    uow = FakeUoW()
    await message_service.send_message("alice", "bob", "Hi", uow, clock=clock)

    inbox = await conversation_service.get_inbox("bob", uow)

    assert len(inbox) == 1
    assert inbox[0].partner_id == "alice"
    assert inbox[0].unread_count == 1
    assert inbox[0].last_message_content == "Hi"
    assert await conversation_service.get_unread_count("bob", uow) == 1


@pytest.mark.asyncio
async def test_reply_without_reading_leaves_both_sides_unread(clock):
    uow = FakeUoW()
    await message_service.send_message("alice", "bob", "Hi", uow, clock=clock)
    await message_service.send_message("bob", "alice", "Hello", uow, clock=clock)

    (alice_entry,) = await conversation_service.get_inbox("alice", uow)
    (bob_entry,) = await conversation_service.get_inbox("bob", uow)

    assert alice_entry.partner_id == "bob"
    assert alice_entry.unread_count == 1
    assert alice_entry.last_message_content == "Hello"
    assert bob_entry.partner_id == "alice"
    assert bob_entry.unread_count == 1
    assert bob_entry.last_message_content == "Hello"


@pytest.mark.asyncio
async def test_mark_read_clears_receiver_unread_but_keeps_last_message(clock):
    uow = FakeUoW()
    await message_service.send_message("alice", "bob", "Hi", uow, clock=clock)
    await message_service.send_message("bob", "alice", "Hello", uow, clock=clock)

    updated = await read_state_service.mark_read("alice", "bob", uow)

    assert updated == 1
    assert await conversation_service.get_unread_count("bob", uow) == 0
    (bob_entry,) = await conversation_service.get_inbox("bob", uow)
    assert bob_entry.unread_count == 0
    assert bob_entry.last_message_content == "Hello"
    # Alice still has Bob's reply waiting.
    assert await conversation_service.get_unread_count("alice", uow) == 1


@pytest.mark.asyncio
async def test_unanswered_messages_count_only_for_receiver(clock):
    uow = FakeUoW()
    for text in ("one", "two", "three"):
        await message_service.send_message("alice", "carol", text, uow, clock=clock)

    (carol_entry,) = await conversation_service.get_inbox("carol", uow)
    (alice_entry,) = await conversation_service.get_inbox("alice", uow)

    assert carol_entry.unread_count == 3
    assert carol_entry.last_message_content == "three"
    assert alice_entry.partner_id == "carol"
    assert alice_entry.unread_count == 0


@pytest.mark.asyncio
async def test_empty_log_gives_empty_views():
    uow = FakeUoW()

    assert await conversation_service.get_inbox("anyone", uow) == []
    assert await conversation_service.get_unread_count("anyone", uow) == 0
    assert await message_service.get_transcript("a", "b", uow) == []


@pytest.mark.asyncio
async def test_inbox_orders_partners_by_latest_activity(clock):
    uow = FakeUoW()
    await message_service.send_message("dr_house", "p1", "first", uow, clock=clock)
    await message_service.send_message("p2", "dr_house", "second", uow, clock=clock)
    await message_service.send_message("p3", "dr_house", "third", uow, clock=clock)
    await message_service.send_message("dr_house", "p1", "fourth", uow, clock=clock)

    inbox = await conversation_service.get_inbox("dr_house", uow)

    assert [e.partner_id for e in inbox] == ["p1", "p3", "p2"]
    times = [e.last_message_at for e in inbox]
    assert times == sorted(times, reverse=True)


@pytest.mark.asyncio
async def test_unread_total_equals_inbox_sum_across_history(clock):
    uow = FakeUoW()
    steps = [
        ("p1", "doc", "a"),
        ("p2", "doc", "b"),
        ("doc", "p1", "c"),
        ("p1", "doc", "d"),
        ("p3", "doc", "e"),
    ]
    for sender, receiver, text in steps:
        await message_service.send_message(sender, receiver, text, uow, clock=clock)
        for user in ("doc", "p1", "p2", "p3"):
            await _assert_sum_consistent(uow, user)

    await read_state_service.mark_read("p1", "doc", uow)
    for user in ("doc", "p1", "p2", "p3"):
        await _assert_sum_consistent(uow, user)
    assert await conversation_service.get_unread_count("doc", uow) == 2


@pytest.mark.asyncio
async def test_sent_messages_never_count_as_unread_for_sender(clock):
    uow = FakeUoW()
    await message_service.send_message("doc", "p1", "take with food", uow, clock=clock)
    await message_service.send_message("doc", "p2", "see you monday", uow, clock=clock)

    assert await conversation_service.get_unread_count("doc", uow) == 0
    assert all(e.unread_count == 0 for e in await conversation_service.get_inbox("doc", uow))
