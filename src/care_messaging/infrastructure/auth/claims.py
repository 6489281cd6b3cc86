"""Map identity-provider JWT claims onto a Principal."""
from __future__ import annotations

from typing import Any

from care_messaging.application.dto.principal import Principal
from care_messaging.application.exceptions import AuthenticationError
from care_messaging.domain.value_objects.enums import UserRole

# Hosted identity providers usually carry app roles in a metadata claim.
_ROLE_CLAIM_PATHS: tuple[tuple[str, ...], ...] = (
    ("role",),
    ("metadata", "role"),
    ("public_metadata", "role"),
)


def _lookup(payload: dict[str, Any], path: tuple[str, ...]) -> Any:
    node: Any = payload
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def extract_role(payload: dict[str, Any]) -> UserRole | None:
    for path in _ROLE_CLAIM_PATHS:
        raw = _lookup(payload, path)
        if raw in UserRole.__members__.values():
            return UserRole(raw)
    return None


def principal_from_claims(payload: dict[str, Any]) -> Principal:
    subject = payload.get("sub")
    if not subject:
        raise AuthenticationError("Token has no subject")
    return Principal(subject_id=str(subject), role=extract_role(payload))
