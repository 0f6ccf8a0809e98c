"""Trait CRUD endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from valet.api.deps import get_current_user, get_db, not_found, parse_uuid
from valet.api.schemas.traits import TraitRequest, TraitResponse
from valet.core.logging import get_logger
from valet.db.models.user import User
from valet.repositories import traits as trait_repository

logger = get_logger(__name__)

router = APIRouter(prefix="/traits", tags=["Traits"])


@router.get("")
async def list_traits(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, list[TraitResponse]]:
    traits = await trait_repository.list_traits(db, current_user.id)
    return {"traits": [TraitResponse.model_validate(t) for t in traits]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_trait(
    payload: TraitRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    trait = await trait_repository.create_trait(
        db,
        user_id=current_user.id,
        name=payload.name,
        context=payload.context,
        color=payload.color,
    )
    logger.info("Trait created", trait_id=str(trait.id), user_id=current_user.id)
    return {"success": True, "trait": TraitResponse.model_validate(trait)}


@router.put("/{trait_id}")
async def update_trait(
    trait_id: str,
    payload: TraitRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    trait_uuid = parse_uuid(trait_id)
    trait = (
        await trait_repository.update_trait(
            db,
            current_user.id,
            trait_uuid,
            name=payload.name,
            context=payload.context,
            color=payload.color,
        )
        if trait_uuid is not None
        else None
    )
    if trait is None:
        raise not_found("Trait")
    return {"success": True, "trait": TraitResponse.model_validate(trait)}


@router.delete("/{trait_id}")
async def delete_trait(
    trait_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict[str, bool]:
    trait_uuid = parse_uuid(trait_id)
    if trait_uuid is None or not await trait_repository.delete_trait(db, current_user.id, trait_uuid):
        raise not_found("Trait")
    logger.info("Trait deleted", trait_id=trait_id, user_id=current_user.id)
    return {"success": True}
