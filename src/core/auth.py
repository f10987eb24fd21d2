"""Access token validation for protected routes."""
import logging

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.config import Settings, get_settings
from core.request_context import AuthIdentity
from core.tokens import decode_access_token
from services.exceptions import InvalidTokenError

logger = logging.getLogger(__name__)


# HTTP Bearer token scheme; returns None instead of raising so we control the 401 body
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_identity(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    settings: Settings = Depends(get_settings),
) -> AuthIdentity:
    """
    Dependency that requires `Authorization: Bearer <access token>`.

    Missing or malformed headers are rejected before any token or database work.
    Invalid and expired tokens share one response so clients cannot tell them apart.
    On success the identity is also stored on `request.state.identity`.
    """
    if credentials is None:
        raise _unauthorized("Access denied. No token provided.")

    try:
        claims = decode_access_token(credentials.credentials, settings)
    except InvalidTokenError as e:
        raise _unauthorized("Invalid or expired token.") from e

    identity = AuthIdentity(user_id=claims.user_id, email=claims.email)
    request.state.identity = identity
    return identity
