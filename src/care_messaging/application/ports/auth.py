from __future__ import annotations

from typing import Protocol

from care_messaging.application.dto.principal import Principal


class TokenVerifier(Protocol):
    """Turns an identity-provider bearer token into the caller's identity.

    Raises ``AuthenticationError`` for any token it cannot vouch for. A
    principal without a role is still a valid caller (not yet onboarded).
    """

    async def verify(self, token: str) -> Principal: ...
