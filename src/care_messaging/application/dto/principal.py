from __future__ import annotations

from dataclasses import dataclass

from care_messaging.domain.value_objects.enums import UserRole


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller identity extracted from JWT."""

    subject_id: str
    role: UserRole | None = None

    @property
    def is_onboarded(self) -> bool:
        return self.role is not None

    @property
    def principal_key(self) -> str:
        """Unique key for WS connection registry."""
        return self.subject_id
