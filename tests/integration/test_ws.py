from __future__ import annotations

from contextlib import asynccontextmanager

import jwt
import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from care_messaging.api.v1.routers import ws as ws_router
from care_messaging.app import _on_chat_event, create_app
from care_messaging.config import settings
from care_messaging.domain.events.message_created import MessageCreated
from care_messaging.domain.events.messages_read import MessagesRead
from tests.conftest import EPOCH, FakeUoW, make_message


def _token(sub: str = "patient_1") -> str:
    return jwt.encode({"sub": sub, "role": "patient"}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


@pytest.fixture
def client():
    return TestClient(create_app())


def test_ws_ping_pong(client):
    with client.websocket_connect(f"/ws/chat?token={_token()}") as ws:
        ws.send_json({"type": "ping"})
        assert ws.receive_json() == {"type": "pong", "data": {}}


def test_ws_rejects_garbage_and_unknown_types(client):
    with client.websocket_connect(f"/ws/chat?token={_token()}") as ws:
        ws.send_text("not json")
        assert ws.receive_json()["data"]["code"] == "invalid_payload"

        ws.send_json({"type": "subscribe", "data": {}})
        assert ws.receive_json()["data"]["code"] == "unknown_type"

        ws.send_json({"type": "message.send", "data": {"content": "no receiver"}})
        assert ws.receive_json()["data"]["code"] == "invalid_data"


def test_ws_bad_token_is_closed(client):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/ws/chat?token=bogus") as ws:
            ws.receive_text()


class RecordingManager:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    async def send_to_principal(self, key, event_type, data) -> None:
        self.sent.append((key, event_type))

    async def send_to_many(self, keys, event_type, data) -> None:
        for key in sorted(keys):
            self.sent.append((key, event_type))


@pytest.mark.asyncio
async def test_message_created_reaches_both_sides(monkeypatch):
    manager = RecordingManager()
    monkeypatch.setattr(ws_router, "manager", manager)

    await _on_chat_event(MessageCreated.of(make_message(sender_id="alice", receiver_id="bob", seq=1)))

    assert manager.sent == [("alice", "message.created"), ("bob", "message.created")]


@pytest.mark.asyncio
async def test_read_receipt_goes_to_message_sender(monkeypatch):
    manager = RecordingManager()
    monkeypatch.setattr(ws_router, "manager", manager)

    await _on_chat_event(MessagesRead(sender_id="alice", receiver_id="bob", count=2, read_at=EPOCH))

    assert manager.sent == [("alice", "messages.read")]


@pytest.fixture
def frame_uow(monkeypatch):
    uow = FakeUoW()

    @asynccontextmanager
    async def _open():
        yield uow

    monkeypatch.setattr(ws_router, "open_uow", _open)
    return uow


def test_ws_mark_read_acknowledges_count(client, frame_uow):
    for seq in (1, 2):
        frame_uow.messages._messages.append(
            make_message(sender_id="doctor_1", receiver_id="patient_1", seq=seq),
        )

    with client.websocket_connect(f"/ws/chat?token={_token('patient_1')}") as ws:
        ws.send_json({"type": "mark_read", "data": {"partner_id": "doctor_1"}})
        assert ws.receive_json() == {
            "type": "messages.marked",
            "data": {"partner_id": "doctor_1", "updated": 2},
        }

        ws.send_json({"type": "mark_read", "data": {"partner_id": "doctor_1"}})
        assert ws.receive_json()["data"]["updated"] == 0


def test_ws_send_acknowledges_stored_message(client, frame_uow):
    with client.websocket_connect(f"/ws/chat?token={_token('patient_1')}") as ws:
        ws.send_json({"type": "message.send", "data": {"receiver_id": "doctor_1", "content": "Hi"}})
        ack = ws.receive_json()

        ws.send_json({"type": "message.send", "data": {"receiver_id": "patient_1", "content": "me"}})
        refused = ws.receive_json()

    assert ack["type"] == "message.sent"
    assert ack["data"]["message"]["seq"] == 1
    assert ack["data"]["message"]["sender_role"] == "patient"
    assert refused["data"]["code"] == "send_failed"
    assert len(frame_uow.messages._messages) == 1
