"""Authentication router: all /api/v1/auth/* endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from imf.auth.dependencies import get_current_user
from imf.auth.jwt import create_access_token
from imf.auth.password import PasswordStrengthError
from imf.auth.schemas import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    UserResponse,
)
from imf.auth.service import (
    InvalidCredentialsError,
    UsernameTakenError,
    authenticate_user,
    register_user,
)
from imf.config import get_settings
from imf.database import get_session
from imf.db.models import User

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


def _user_response(user: User) -> UserResponse:
    """Build a UserResponse from a User model."""
    return UserResponse(id=user.id, username=user.username, created_at=user.created_at)


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_session),
) -> RegisterResponse:
    """Create an account. The caller logs in separately."""
    try:
        user = await register_user(db, body.username, body.password)
        await db.commit()
    except PasswordStrengthError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except UsernameTakenError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e

    return RegisterResponse(user=_user_response(user))


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_session),
) -> LoginResponse:
    """Verify credentials and start a cookie session."""
    try:
        user = await authenticate_user(db, body.username, body.password)
        await db.commit()
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e

    settings = get_settings()
    token = create_access_token(user.id, user.username)
    max_age = settings.jwt_access_token_expire_minutes * 60
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=max_age,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    logger.info("user_logged_in", user_id=user.id)
    return LoginResponse(access_token=token, expires_in=max_age, user=_user_response(user))


@router.post("/logout")
async def logout(response: Response) -> dict[str, str]:
    """Clear the session cookie."""
    settings = get_settings()
    response.delete_cookie(
        key=settings.auth_cookie_name,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    return {"status": "logged_out"}


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)) -> UserResponse:
    """Return the authenticated user."""
    return _user_response(user)
