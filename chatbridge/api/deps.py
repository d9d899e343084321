"""FastAPI dependencies shared by the routers."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from chatbridge.core.config import load_settings
from chatbridge.core.exceptions import AuthenticationError
from chatbridge.core.security import CredentialCipher, decode_access_token
from chatbridge.logging import bind_user_id
from chatbridge.router.registry import registry
from chatbridge.services.orchestrator import ConversationOrchestrator
from chatbridge.storage import users
from chatbridge.storage.credentials import CredentialStore
from chatbridge.storage.models import User

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> User:
    if credentials is None:
        raise AuthenticationError("Missing bearer token")
    payload = decode_access_token(credentials.credentials, load_settings().jwt_secret)
    user = users.get_user(int(payload["sub"]))
    if user is None:
        raise AuthenticationError("Invalid or expired token")
    bind_user_id(user.id)
    return user


@lru_cache(maxsize=1)
def get_credential_store() -> CredentialStore:
    return CredentialStore(CredentialCipher(load_settings().encryption_key))


@lru_cache(maxsize=1)
def get_orchestrator() -> ConversationOrchestrator:
    return ConversationOrchestrator(registry, get_credential_store())


CurrentUser = Annotated[User, Depends(get_current_user)]
Credentials = Annotated[CredentialStore, Depends(get_credential_store)]
Orchestrator = Annotated[ConversationOrchestrator, Depends(get_orchestrator)]
