"""Shared dependencies for API routes."""

from __future__ import annotations

import uuid
from typing import AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from valet.core.config import settings
from valet.db.models.user import User
from valet.db.session import async_session
from valet.db.session import get_db as _get_db
from valet.repositories import sessions as session_repository


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async DB session."""
    async for session in _get_db():
        yield session


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """
    Session factory for endpoints that manage their own short sessions
    (the run event stream polls for minutes and must not hold one open).
    """
    return async_session


def get_session_token(request: Request) -> str | None:
    return request.cookies.get(settings.SESSION_COOKIE_NAME) or None


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the active user behind the session cookie."""
    token = get_session_token(request)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )

    user = await session_repository.get_user_for_token(db, token)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return user


def parse_uuid(value: str) -> uuid.UUID | None:
    """Path ids that are not UUIDs simply match nothing."""
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


def not_found(resource: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{resource} not found")


def bad_request(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)
