from __future__ import annotations

from enum import StrEnum


class UserRole(StrEnum):
    DOCTOR = "doctor"
    PATIENT = "patient"


class OutboxStatus(StrEnum):
    PENDING = "pending"
    PROCESSING = "processing"
    SENT = "sent"
    FAILED = "failed"
    DEAD = "dead"  # out of attempts or undecodable; never retried
