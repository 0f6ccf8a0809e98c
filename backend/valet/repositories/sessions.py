"""
Login session repository.

The cookie carries an opaque token; rows are looked up by its digest.
"""

from __future__ import annotations

from datetime import timedelta

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from valet.core.config import settings
from valet.core.security import generate_session_token, hash_session_token
from valet.db.models.base import utcnow
from valet.db.models.user import User
from valet.db.models.user_session import UserSession


async def create_session(db: AsyncSession, user_id: int) -> str:
    """Open a session for *user_id* and return the raw cookie token."""
    token = generate_session_token()
    db.add(
        UserSession(
            user_id=user_id,
            token_hash=hash_session_token(token),
            expires_at=utcnow() + timedelta(seconds=settings.SESSION_TTL_SECONDS),
        )
    )
    await db.flush()
    return token


async def get_user_for_token(db: AsyncSession, token: str) -> User | None:
    """Resolve an active user from an unexpired session token."""
    stmt = (
        select(User)
        .join(UserSession, UserSession.user_id == User.id)
        .where(
            UserSession.token_hash == hash_session_token(token),
            UserSession.expires_at > utcnow(),
            User.is_active.is_(True),
        )
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def delete_session(db: AsyncSession, token: str) -> bool:
    """Remove the session for *token*. Returns True if one existed."""
    result = await db.execute(
        delete(UserSession).where(UserSession.token_hash == hash_session_token(token))
    )
    await db.flush()
    return result.rowcount > 0


async def purge_expired(db: AsyncSession) -> int:
    """Delete expired sessions and return how many were removed."""
    result = await db.execute(delete(UserSession).where(UserSession.expires_at <= utcnow()))
    await db.flush()
    return result.rowcount
