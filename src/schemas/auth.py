"""Pydantic schemas for authentication endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import field_validator, model_validator

from core.passwords import MAX_PASSWORD_BYTES, MIN_PASSWORD_LENGTH, password_too_long
from schemas.base import CamelModel

CREDENTIALS_REQUIRED = "Email and password are required."


class _Credentials(CamelModel):
    email: str | None = None
    password: str | None = None

    @field_validator("email")
    @classmethod
    def strip_email(cls, value: str | None) -> str | None:
        return value.strip() if value else value

    @model_validator(mode="after")
    def require_both(self) -> "_Credentials":
        if not self.email or not self.password:
            raise ValueError(CREDENTIALS_REQUIRED)
        if password_too_long(self.password):
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes.")
        return self


class LoginRequest(_Credentials):
    """Schema for logging in."""


class RegisterRequest(_Credentials):
    """Schema for creating an account."""

    @model_validator(mode="after")
    def check_password_length(self) -> "RegisterRequest":
        if len(self.password or "") < MIN_PASSWORD_LENGTH:
            raise ValueError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters.",
            )
        return self


class UserResponse(CamelModel):
    """Public view of a user (never includes the password hash)."""

    id: UUID
    email: str
    created_at: datetime


class AuthResponse(CamelModel):
    """Returned by register and login; the refresh token travels as a cookie."""

    access_token: str
    user: UserResponse


class RefreshResponse(CamelModel):
    """Returned by refresh; the rotated refresh token travels as a cookie."""

    access_token: str


class MeResponse(CamelModel):
    """Wrapper for the current user's profile."""

    user: UserResponse
