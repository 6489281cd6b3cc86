from __future__ import annotations

from care_messaging.domain.entities.message import Message
from care_messaging.infrastructure.db.models.message import MessageModel


def model_to_entity(model: MessageModel) -> Message:
    return Message(
        id=model.id,
        sender_id=model.sender_id,
        receiver_id=model.receiver_id,
        sender_role=model.sender_role,
        content=model.content,
        read=model.read,
        created_at=model.created_at,
        seq=model.seq,
    )


def entity_to_values(entity: Message) -> dict[str, object]:
    """Column values for an INSERT; ``seq`` is left to the identity column."""
    return {
        "id": entity.id,
        "sender_id": entity.sender_id,
        "receiver_id": entity.receiver_id,
        "sender_role": entity.sender_role,
        "content": entity.content,
        "read": entity.read,
        "created_at": entity.created_at,
    }
