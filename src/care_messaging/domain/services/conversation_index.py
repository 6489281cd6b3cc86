"""Conversation views derived from a flat log of directed messages.

There is no stored conversation entity: a conversation between A and B is
every message A -> B plus every message B -> A. All functions here are pure
and accept any iterable of messages, so they work the same over a repository
query result, an in-memory list or a stream.

Ordering everywhere is by ``Message.sort_key``, the storage-assigned ``seq``,
so two senders racing each other still see one insertion order.
"""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from care_messaging.domain.entities.conversation import ConversationSummary
from care_messaging.domain.entities.message import Message


def transcript(messages: Iterable[Message], user_a: str, user_b: str) -> list[Message]:
    """All messages exchanged between ``user_a`` and ``user_b``, oldest first."""
    pair = {user_a, user_b}
    return sorted(
        (m for m in messages if {m.sender_id, m.receiver_id} == pair),
        key=lambda m: m.sort_key,
    )


@dataclass(slots=True)
class _PartnerFold:
    last: Message
    unread: int = 0


def inbox(messages: Iterable[Message], user_id: str) -> list[ConversationSummary]:
    """Fold the log into one summary per partner, most recently active first.

    The last message is replaced only by a strictly newer one; the unread
    counter is bumped for every unread message received by ``user_id`` no
    matter where it falls in the fold order.
    """
    folds: dict[str, _PartnerFold] = {}
    for msg in messages:
        if not msg.involves(user_id):
            continue
        partner = msg.partner_of(user_id)
        fold = folds.get(partner)
        if fold is None:
            fold = folds[partner] = _PartnerFold(last=msg)
        elif msg.sort_key > fold.last.sort_key:
            fold.last = msg
        if msg.is_unread_for(user_id):
            fold.unread += 1

    ordered = sorted(
        folds.items(), key=lambda item: item[1].last.sort_key, reverse=True,
    )
    return [
        ConversationSummary(
            partner_id=partner,
            last_message_id=fold.last.id,
            last_message_content=fold.last.content,
            last_message_at=fold.last.created_at,
            last_message_sender_id=fold.last.sender_id,
            unread_count=fold.unread,
        )
        for partner, fold in ordered
    ]
