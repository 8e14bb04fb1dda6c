"""Request/response schemas for authentication endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class RegisterRequest(BaseModel):
    """Username + password registration."""

    username: str = Field(..., min_length=3, max_length=64)
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        """Strip surrounding whitespace; reject blank usernames."""
        v = v.strip()
        if not v:
            msg = "Username cannot be blank"
            raise ValueError(msg)
        return v


class LoginRequest(BaseModel):
    """Login with username + password."""

    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        return v.strip()


class UserResponse(BaseModel):
    """Public view of the authenticated user."""

    id: str
    username: str
    created_at: datetime | None = None


class RegisterResponse(BaseModel):
    message: str = "User registered successfully. Please login to continue"
    user: UserResponse


class LoginResponse(BaseModel):
    """Token is also set as an httpOnly cookie."""

    message: str = "Login successful"
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse
