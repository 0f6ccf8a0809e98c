"""
User repository containing all data-access operations for the users table.

Repository rules:
- Pure data-access logic only
- Every function receives AsyncSession explicitly
- Functions flush, but never commit
"""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from valet.core.security import hash_password, verify_password
from valet.db.models.base import utcnow
from valet.db.models.user import User


def normalize_email(email: str) -> str:
    return email.lower().strip()


async def create_user(
    db: AsyncSession,
    *,
    email: str,
    password: str,
    full_name: str | None = None,
) -> User:
    """Create a new user with a hashed password."""
    user = User(
        email=normalize_email(email),
        hashed_password=hash_password(password),
        full_name=full_name.strip() if full_name else None,
    )
    db.add(user)
    await db.flush()
    return user


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Fetch a user by email address (case-insensitive)."""
    stmt = select(User).where(User.email == normalize_email(email))
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def authenticate_user(
    db: AsyncSession,
    *,
    email: str,
    password: str,
) -> User | None:
    """Validate credentials and return active user on success."""
    user = await get_user_by_email(db, email)
    if user is None or not user.is_active:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


async def record_login(db: AsyncSession, user_id: int) -> None:
    """Stamp last_login_at on successful authentication."""
    stmt = update(User).where(User.id == user_id).values(last_login_at=utcnow())
    await db.execute(stmt)
    await db.flush()
