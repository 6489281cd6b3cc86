"""Request-scoped dependencies: the storage transaction and the caller."""
from __future__ import annotations

from functools import lru_cache
from typing import Annotated, AsyncIterator

from fastapi import Depends, Path
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from care_messaging.application.dto.principal import Principal
from care_messaging.application.exceptions import AuthenticationError
from care_messaging.application.policies.permissions import assert_onboarded
from care_messaging.application.ports.auth import TokenVerifier
from care_messaging.config import settings
from care_messaging.infrastructure.auth.verifiers import build_verifier
from care_messaging.infrastructure.db.session import AsyncSessionLocal
from care_messaging.infrastructure.db.uow import SqlAlchemyUoW

# Missing credentials become AuthenticationError (401), not FastAPI's 403.
_bearer = HTTPBearer(auto_error=False)


async def get_uow() -> AsyncIterator[SqlAlchemyUoW]:
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUoW(session)


UoWDep = Annotated[SqlAlchemyUoW, Depends(get_uow)]


@lru_cache(maxsize=1)
def get_verifier() -> TokenVerifier:
    return build_verifier(settings)


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
) -> Principal:
    if credentials is None:
        raise AuthenticationError("Missing bearer token")
    return await get_verifier().verify(credentials.credentials)


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]


async def get_onboarded_principal(principal: CurrentPrincipal) -> Principal:
    """Callers that may send: the identity provider has assigned a role."""
    assert_onboarded(principal)
    return principal


OnboardedPrincipal = Annotated[Principal, Depends(get_onboarded_principal)]

PartnerId = Annotated[
    str, Path(min_length=1, max_length=255, description="Identity-provider user id"),
]
