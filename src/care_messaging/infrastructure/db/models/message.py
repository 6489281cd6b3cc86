from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import BigInteger, Boolean, CheckConstraint, Identity, Index, String, Text, text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from care_messaging.infrastructure.db.base import Base


class MessageModel(Base):
    __tablename__ = "messages"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )
    # Insertion order; every timeline is sorted on this, not on created_at.
    seq: Mapped[int] = mapped_column(BigInteger, Identity(), nullable=False, unique=True)
    sender_id: Mapped[str] = mapped_column(String(255), nullable=False)
    receiver_id: Mapped[str] = mapped_column(String(255), nullable=False)
    sender_role: Mapped[str | None] = mapped_column(String(20), nullable=True)  # doctor | patient
    content: Mapped[str] = mapped_column(Text, nullable=False)
    read: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )

    __table_args__ = (
        CheckConstraint("sender_id <> receiver_id", name="distinct_participants"),
        Index("ix_messages_pair_timeline", "sender_id", "receiver_id", "seq"),
        Index("ix_messages_receiver_read", "receiver_id", "read"),
    )
