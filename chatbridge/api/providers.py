"""Provider catalogue and activity log endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from chatbridge.api.deps import CurrentUser
from chatbridge.api.schemas import ModelOut, ProviderOut
from chatbridge.core.exceptions import NotFoundError
from chatbridge.router.registry import registry
from chatbridge.telemetry.events import list_recent_events

router = APIRouter(prefix="/api")


@router.get("/providers", response_model=list[ProviderOut], tags=["Providers"])
def list_providers(user: CurrentUser) -> list[ProviderOut]:
    return [
        ProviderOut(
            id=adapter.provider_id,
            name=adapter.name,
            models=[ModelOut.model_validate(model) for model in adapter.config.models],
        )
        for adapter in registry.list()
    ]


@router.get(
    "/providers/{provider_id}/models", response_model=list[ModelOut], tags=["Providers"]
)
def list_provider_models(provider_id: str, user: CurrentUser) -> list[ModelOut]:
    adapter = registry.get(provider_id)
    if adapter is None:
        raise NotFoundError("provider")
    return [ModelOut.model_validate(model) for model in adapter.config.models]


@router.get("/events", tags=["Activity"])
def list_events(user: CurrentUser, limit: int = 25) -> dict:
    """Return the caller's recent activity events."""
    limit_value = max(1, min(limit, 100))
    return {"events": list_recent_events(int(user.id), limit=limit_value)}
