"""
Authentication business logic.

Handles user registration and username/password login.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select

from imf.auth.password import (
    check_needs_rehash,
    hash_password,
    validate_password_strength,
    verify_password,
)
from imf.db.models import User

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


class UsernameTakenError(ValueError):
    """Raised when registering a username that already exists."""


class InvalidCredentialsError(ValueError):
    """Raised when a username/password pair does not match."""


# ---------------------------------------------------------------------------
# User queries
# ---------------------------------------------------------------------------


async def get_user_by_id(db: AsyncSession, user_id: str) -> User | None:
    """Fetch a user by ID."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_username(db: AsyncSession, username: str) -> User | None:
    """Fetch a user by username (exact match)."""
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


async def register_user(db: AsyncSession, username: str, password: str) -> User:
    """
    Register a new user with username + password.

    Raises:
        PasswordStrengthError: If the password is too weak.
        UsernameTakenError: If the username already exists.
    """
    validate_password_strength(password)

    existing = await get_user_by_username(db, username)
    if existing is not None:
        msg = f"Username taken: {username}"
        raise UsernameTakenError(msg)

    user = User(username=username, password_hash=hash_password(password))
    db.add(user)
    await db.flush()
    logger.info("user_created", user_id=user.id, username=username)
    return user


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


async def authenticate_user(db: AsyncSession, username: str, password: str) -> User:
    """
    Authenticate a user with username + password.

    Raises:
        InvalidCredentialsError: If the user is unknown or the password is wrong.
    """
    user = await get_user_by_username(db, username)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("login_failed", username=username, known_user=user is not None)
        msg = "Invalid username or password"
        raise InvalidCredentialsError(msg)

    if check_needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        await db.flush()
        logger.info("password_rehashed", user_id=user.id)

    return user
