"""Endpoints for managing the caller's provider API keys."""

from __future__ import annotations

from fastapi import APIRouter

from chatbridge.api.deps import Credentials, CurrentUser
from chatbridge.api.schemas import CredentialCreate, CredentialOut, CredentialUpdate
from chatbridge.core.exceptions import NotFoundError, UnknownProviderError
from chatbridge.router.registry import registry
from chatbridge.storage.models import Credential
from chatbridge.telemetry.events import record_event

router = APIRouter(prefix="/api/keys", tags=["API Keys"])


@router.post("", response_model=CredentialOut, status_code=201)
def create_key(payload: CredentialCreate, user: CurrentUser, store: Credentials) -> Credential:
    if registry.get(payload.provider) is None:
        raise UnknownProviderError(payload.provider)
    credential = store.create(int(user.id), payload.provider, payload.key_name, payload.api_key)
    record_event(
        "credential_created",
        "INFO",
        user_id=int(user.id),
        provider=payload.provider,
        message=f"API key '{payload.key_name}' added",
    )
    return credential


@router.get("", response_model=list[CredentialOut])
def list_keys(user: CurrentUser, store: Credentials) -> list[Credential]:
    return store.list(int(user.id))


@router.put("/{key_id}", response_model=CredentialOut)
def update_key(
    key_id: int, payload: CredentialUpdate, user: CurrentUser, store: Credentials
) -> Credential:
    credential = store.update(
        int(user.id),
        key_id,
        key_name=payload.key_name,
        api_key=payload.api_key,
        is_active=payload.is_active,
    )
    if credential is None:
        raise NotFoundError("API key")
    if payload.api_key:
        record_event(
            "credential_rotated",
            "INFO",
            user_id=int(user.id),
            provider=str(credential.provider),
            message=f"API key '{credential.key_name}' rotated",
        )
    return credential


@router.delete("/{key_id}")
def delete_key(key_id: int, user: CurrentUser, store: Credentials) -> dict:
    if not store.delete(int(user.id), key_id):
        raise NotFoundError("API key")
    return {"message": "API key deleted successfully"}
