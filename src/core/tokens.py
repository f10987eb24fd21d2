"""
Access/refresh token pair issuing and verification.

Both tokens are stateless HS256 JWTs. The access token carries the user's id and
email and lives for minutes; the refresh token carries only the id (plus a random
jti so two tokens minted in the same second still differ) and lives for days. The
two are signed with different secrets and tagged with a `typ` claim, so neither can
stand in for the other.

Nothing is persisted server-side: a token is valid exactly as long as its signature
verifies and its `exp` lies in the future. Rotating a refresh token therefore does
not revoke the previous one; it is merely replaced in the client's cookie.
"""
import logging
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any
from uuid import UUID

import jwt

from core.config import Settings
from services.exceptions import InvalidTokenError, TokenExpiredError

if TYPE_CHECKING:
    from models.user import User

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


@dataclass(frozen=True)
class TokenPair:
    """A freshly minted access token and its companion refresh token."""

    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class AccessClaims:
    """Verified identity carried by an access token."""

    user_id: UUID
    email: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class RefreshClaims:
    """Verified identity carried by a refresh token."""

    user_id: UUID
    token_id: str
    issued_at: datetime
    expires_at: datetime


def create_access_token(
    user: "User",
    settings: Settings,
    expires_delta: timedelta | None = None,
) -> str:
    """Mint a short-lived access token for the user."""
    now = datetime.now(UTC)
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    payload: dict[str, Any] = {
        "typ": ACCESS_TOKEN_TYPE,
        "sub": str(user.id),
        "email": user.email,
        "iat": now,
        "exp": now + lifetime,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_refresh_token(
    user: "User",
    settings: Settings,
    expires_delta: timedelta | None = None,
) -> str:
    """Mint a long-lived refresh token for the user."""
    now = datetime.now(UTC)
    lifetime = expires_delta or timedelta(days=settings.refresh_token_expire_days)
    payload: dict[str, Any] = {
        "typ": REFRESH_TOKEN_TYPE,
        "sub": str(user.id),
        "jti": secrets.token_urlsafe(16),
        "iat": now,
        "exp": now + lifetime,
    }
    return jwt.encode(
        payload, settings.jwt_refresh_secret, algorithm=settings.jwt_algorithm,
    )


def issue_token_pair(user: "User", settings: Settings) -> TokenPair:
    """Mint a new access/refresh pair (used by register, login and every refresh)."""
    return TokenPair(
        access_token=create_access_token(user, settings),
        refresh_token=create_refresh_token(user, settings),
    )


def _decode(token: str, secret: str, expected_type: str, settings: Settings) -> dict:
    """
    Verify signature, expiry and token type.

    Raises:
        TokenExpiredError: Signature is valid but the token has expired.
        InvalidTokenError: Any other verification failure.
    """
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "iat", "sub"]},
        )
    except jwt.ExpiredSignatureError as e:
        logger.debug("token_expired typ=%s", expected_type)
        raise TokenExpiredError("Token has expired") from e
    except jwt.PyJWTError as e:
        logger.debug("token_invalid typ=%s error=%s", expected_type, type(e).__name__)
        raise InvalidTokenError("Invalid token") from e

    if payload.get("typ") != expected_type:
        raise InvalidTokenError("Invalid token type")

    try:
        payload["sub"] = UUID(payload["sub"])
    except (TypeError, ValueError) as e:
        raise InvalidTokenError("Invalid token subject") from e
    return payload


def _timestamp(value: int | float) -> datetime:
    return datetime.fromtimestamp(value, tz=UTC)


def decode_access_token(token: str, settings: Settings) -> AccessClaims:
    """Verify an access token and return its claims."""
    payload = _decode(token, settings.jwt_secret, ACCESS_TOKEN_TYPE, settings)
    return AccessClaims(
        user_id=payload["sub"],
        email=payload.get("email", ""),
        issued_at=_timestamp(payload["iat"]),
        expires_at=_timestamp(payload["exp"]),
    )


def decode_refresh_token(token: str, settings: Settings) -> RefreshClaims:
    """Verify a refresh token and return its claims."""
    payload = _decode(token, settings.jwt_refresh_secret, REFRESH_TOKEN_TYPE, settings)
    return RefreshClaims(
        user_id=payload["sub"],
        token_id=payload.get("jti", ""),
        issued_at=_timestamp(payload["iat"]),
        expires_at=_timestamp(payload["exp"]),
    )
