"""Authentication endpoints: register, login, logout, current user."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from valet.api.deps import get_current_user, get_db, get_session_token
from valet.api.schemas.auth import CurrentUserResponse, LoginRequest, RegisterRequest
from valet.core.config import settings
from valet.core.logging import get_logger
from valet.db.models.user import User
from valet.repositories import sessions as session_repository
from valet.repositories import users as user_repository

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_TTL_SECONDS,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        path="/",
    )


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Create an account and sign it in."""
    if await user_repository.get_user_by_email(db, payload.email) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An account with this email already exists",
        )

    user = await user_repository.create_user(
        db,
        email=payload.email,
        password=payload.password,
        full_name=payload.full_name,
    )
    token = await session_repository.create_session(db, user.id)
    _set_session_cookie(response, token)

    logger.info("User registered", user_id=user.id)
    return {"success": True, "user": CurrentUserResponse.model_validate(user)}


@router.post("/login")
async def login(
    payload: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Verify credentials and open a session."""
    user = await user_repository.authenticate_user(
        db,
        email=payload.email,
        password=payload.password,
    )
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    await user_repository.record_login(db, user.id)
    token = await session_repository.create_session(db, user.id)
    _set_session_cookie(response, token)

    logger.info("User logged in", user_id=user.id)
    return {"success": True, "user": CurrentUserResponse.model_validate(user)}


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> dict[str, bool]:
    """End the current session. Succeeds even without one."""
    token = get_session_token(request)
    if token is not None:
        await session_repository.delete_session(db, token)
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
    return {"success": True}


@router.get("/me", response_model=CurrentUserResponse)
async def read_current_user(current_user: User = Depends(get_current_user)) -> CurrentUserResponse:
    """Return the currently authenticated user."""
    return CurrentUserResponse.model_validate(current_user)
