"""
Trait repository.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from valet.core.constants import DEFAULT_TRAIT_COLOR
from valet.db.models.base import utcnow
from valet.db.models.trait import Trait


async def list_traits(db: AsyncSession, user_id: int) -> list[Trait]:
    """User's traits ordered by name."""
    stmt = select(Trait).where(Trait.user_id == user_id).order_by(Trait.name, Trait.created_at)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_trait(db: AsyncSession, user_id: int, trait_id: uuid.UUID) -> Trait | None:
    stmt = select(Trait).where(Trait.id == trait_id, Trait.user_id == user_id)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_owned_ids(
    db: AsyncSession, user_id: int, trait_ids: Iterable[uuid.UUID]
) -> set[uuid.UUID]:
    """Subset of *trait_ids* that belong to the user."""
    ids = set(trait_ids)
    if not ids:
        return set()
    stmt = select(Trait.id).where(Trait.user_id == user_id, Trait.id.in_(ids))
    result = await db.execute(stmt)
    return set(result.scalars().all())


async def create_trait(
    db: AsyncSession,
    *,
    user_id: int,
    name: str,
    context: str,
    color: str | None = None,
) -> Trait:
    trait = Trait(
        user_id=user_id,
        name=name,
        context=context,
        color=color or DEFAULT_TRAIT_COLOR,
    )
    db.add(trait)
    await db.flush()
    return trait


async def update_trait(
    db: AsyncSession,
    user_id: int,
    trait_id: uuid.UUID,
    *,
    name: str,
    context: str,
    color: str | None = None,
) -> Trait | None:
    """Overwrite a trait's fields. Returns None when not owned."""
    trait = await get_trait(db, user_id, trait_id)
    if trait is None:
        return None
    trait.name = name
    trait.context = context
    trait.color = color or DEFAULT_TRAIT_COLOR
    trait.updated_at = utcnow()
    await db.flush()
    return trait


async def delete_trait(db: AsyncSession, user_id: int, trait_id: uuid.UUID) -> bool:
    """Hard-delete a trait; its agent assignments cascade."""
    result = await db.execute(
        delete(Trait).where(Trait.id == trait_id, Trait.user_id == user_id)
    )
    await db.flush()
    return result.rowcount > 0
