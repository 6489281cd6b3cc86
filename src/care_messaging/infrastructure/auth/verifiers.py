"""Bearer-token verification against the identity provider."""
from __future__ import annotations

import asyncio
import logging
from typing import Any

import jwt
from jwt import PyJWKClient

from care_messaging.application.dto.principal import Principal
from care_messaging.application.exceptions import AuthenticationError
from care_messaging.application.ports.auth import TokenVerifier
from care_messaging.config import Settings
from care_messaging.infrastructure.auth.claims import principal_from_claims

logger = logging.getLogger(__name__)

_ASYMMETRIC_ALGORITHMS = ["RS256", "ES256"]


class _ClaimsVerifier:
    """Decodes with PyJWT and maps the claims; subclasses pick the key."""

    algorithms: list[str]

    def __init__(self, *, audience: str | None = None, issuer: str | None = None) -> None:
        self._audience = audience
        self._issuer = issuer

    async def _signing_key(self, token: str) -> Any:
        raise NotImplementedError

    async def verify(self, token: str) -> Principal:
        try:
            key = await self._signing_key(token)
            claims = jwt.decode(
                token,
                key,
                algorithms=self.algorithms,
                audience=self._audience,
                issuer=self._issuer,
                options={"require": ["sub"], "verify_aud": self._audience is not None},
            )
        except jwt.PyJWTError as exc:
            raise AuthenticationError(f"Invalid token: {exc}") from exc
        return principal_from_claims(claims)


class HS256Verifier(_ClaimsVerifier):
    """Tokens signed with a secret shared with the identity provider."""

    def __init__(self, secret: str, algorithm: str = "HS256", **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._secret = secret
        self.algorithms = [algorithm]

    async def _signing_key(self, token: str) -> str:
        return self._secret


class JWKSVerifier(_ClaimsVerifier):
    """Tokens signed by the identity provider's published keys."""

    algorithms = _ASYMMETRIC_ALGORITHMS

    def __init__(self, jwks_url: str, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._jwk_client = PyJWKClient(jwks_url, cache_keys=True)

    async def _signing_key(self, token: str) -> Any:
        # Key fetches are blocking HTTP.
        signing_key = await asyncio.to_thread(self._jwk_client.get_signing_key_from_jwt, token)
        return signing_key.key


def build_verifier(settings: Settings) -> TokenVerifier:
    scope = {"audience": settings.JWT_AUDIENCE, "issuer": settings.JWT_ISSUER}
    if settings.JWT_VERIFY_MODE == "jwks":
        logger.info("Verifying tokens against %s", settings.JWKS_URL)
        return JWKSVerifier(settings.JWKS_URL, **scope)
    return HS256Verifier(settings.JWT_SECRET, settings.JWT_ALGORITHM, **scope)
