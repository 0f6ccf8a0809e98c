"""
Provider API key repository.

Keys are stored Fernet-encrypted; decryption happens only when a
provider client is about to be built.
"""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from valet.core.config import settings
from valet.core.security import decrypt, encrypt
from valet.db.models.api_key import ApiKey
from valet.db.models.base import utcnow


async def list_keys(db: AsyncSession, user_id: int) -> list[ApiKey]:
    """All key rows of a user, ordered by provider."""
    stmt = select(ApiKey).where(ApiKey.user_id == user_id).order_by(ApiKey.provider)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_key(db: AsyncSession, user_id: int, provider: str) -> ApiKey | None:
    stmt = select(ApiKey).where(ApiKey.user_id == user_id, ApiKey.provider == provider)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_decrypted_key(db: AsyncSession, user_id: int, provider: str) -> str | None:
    """Plaintext key for *provider*, or None when the user has none."""
    row = await get_key(db, user_id, provider)
    if row is None:
        return None
    return decrypt(row.encrypted_key)


async def get_model_preference(db: AsyncSession, user_id: int) -> str:
    """
    The user's preferred model.

    Read from the anthropic row first, then any row, then the default.
    """
    keys = await list_keys(db, user_id)
    by_provider = {k.provider: k for k in keys}
    if "anthropic" in by_provider:
        return by_provider["anthropic"].model_preference
    if keys:
        return keys[0].model_preference
    return settings.DEFAULT_MODEL


async def upsert_key(
    db: AsyncSession,
    *,
    user_id: int,
    provider: str,
    api_key: str,
) -> ApiKey:
    """Create or replace the user's key for *provider*."""
    row = await get_key(db, user_id, provider)
    if row is None:
        row = ApiKey(
            user_id=user_id,
            provider=provider,
            encrypted_key=encrypt(api_key),
            model_preference=await get_model_preference(db, user_id),
        )
        db.add(row)
    else:
        row.encrypted_key = encrypt(api_key)
        row.updated_at = utcnow()
    await db.flush()
    return row


async def set_model_preference(db: AsyncSession, user_id: int, model: str) -> int:
    """Store *model* on every key row of the user. Returns rows updated."""
    result = await db.execute(
        update(ApiKey)
        .where(ApiKey.user_id == user_id)
        .values(model_preference=model, updated_at=utcnow())
    )
    await db.flush()
    return result.rowcount
