"""User settings: provider API keys and model preference."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from valet.api.deps import bad_request, get_current_user, get_db
from valet.api.schemas.settings import ApiKeyRequest, ModelPreferenceRequest
from valet.core.constants import ProviderId
from valet.core.logging import get_logger
from valet.db.models.user import User
from valet.llm.models import models_by_provider
from valet.llm.registry import get_provider
from valet.repositories import api_keys as api_key_repository

logger = get_logger(__name__)

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("")
async def get_settings(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    keys = await api_key_repository.list_keys(db, current_user.id)
    providers = [k.provider for k in keys]
    return {
        "has_api_key": ProviderId.ANTHROPIC in providers,
        "has_openai_key": ProviderId.OPENAI in providers,
        "configured_providers": providers,
        "model_preference": await api_key_repository.get_model_preference(db, current_user.id),
        "models": models_by_provider(),
    }


@router.post("/api-keys")
async def save_api_key(
    payload: ApiKeyRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Validate the key against its provider, then store it encrypted."""
    provider = get_provider(payload.provider, payload.api_key)
    if not await provider.validate_key(payload.api_key):
        raise bad_request(f"Invalid {payload.provider} API key")

    await api_key_repository.upsert_key(
        db,
        user_id=current_user.id,
        provider=payload.provider,
        api_key=payload.api_key,
    )
    logger.info("API key saved", user_id=current_user.id, provider=payload.provider)
    return {"success": True, "provider": payload.provider}


@router.put("/model")
async def save_model_preference(
    payload: ModelPreferenceRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    updated = await api_key_repository.set_model_preference(db, current_user.id, payload.model)
    if not updated:
        raise bad_request("Add an API key before choosing a model")
    return {"success": True, "model_preference": payload.model}
