"""Import all models so Base.metadata sees every table."""
from care_messaging.infrastructure.db.models.message import MessageModel
from care_messaging.infrastructure.db.models.outbox import OutboxMessageModel

__all__ = [
    "MessageModel",
    "OutboxMessageModel",
]
