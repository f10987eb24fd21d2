"""Refresh token transport via an httpOnly cookie."""
from fastapi import Request, Response

from core.config import Settings
from services.exceptions import NoRefreshTokenError

REFRESH_COOKIE_NAME = "refreshToken"


def set_refresh_cookie(response: Response, refresh_token: str, settings: Settings) -> None:
    """
    Attach the refresh token to the response.

    httpOnly keeps it away from page scripts; SameSite=strict keeps it off
    cross-site requests; Secure is only enforced in production so local HTTP works.
    """
    response.set_cookie(
        key=REFRESH_COOKIE_NAME,
        value=refresh_token,
        max_age=settings.refresh_token_max_age,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


def clear_refresh_cookie(response: Response, settings: Settings) -> None:
    """Expire the refresh cookie (logout, account deletion)."""
    response.delete_cookie(
        key=REFRESH_COOKIE_NAME,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


def read_refresh_cookie(request: Request) -> str:
    """
    Return the refresh token sent with the request.

    Raises:
        NoRefreshTokenError: The cookie is missing or empty.
    """
    token = request.cookies.get(REFRESH_COOKIE_NAME)
    if not token:
        raise NoRefreshTokenError("No refresh token")
    return token
