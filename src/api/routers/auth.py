"""Authentication endpoints: register, login, refresh, logout, profile, account."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import (
    get_async_session,
    get_current_identity,
    get_settings,
    get_summary_cache,
)
from core.config import Settings
from core.cookies import clear_refresh_cookie, read_refresh_cookie, set_refresh_cookie
from core.request_context import AuthIdentity
from core.tokens import decode_refresh_token, issue_token_pair
from models.user import User
from schemas.auth import (
    AuthResponse,
    LoginRequest,
    MeResponse,
    RefreshResponse,
    RegisterRequest,
    UserResponse,
)
from schemas.base import MessageResponse
from services import user_service
from services.exceptions import (
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    InvalidTokenError,
    NoRefreshTokenError,
    UserNotFoundError,
)
from services.summary_service import SummaryCache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _login_response(user: User, response: Response, settings: Settings) -> AuthResponse:
    """Issue a token pair: access token in the body, refresh token as a cookie."""
    pair = issue_token_pair(user, settings)
    set_refresh_cookie(response, pair.refresh_token, settings)
    return AuthResponse(
        access_token=pair.access_token,
        user=UserResponse.model_validate(user),
    )


def _refresh_unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    data: RegisterRequest,
    response: Response,
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    """
    Create an account and log it in.

    Returns 400 for missing fields or a short password, 409 if the email is taken.
    """
    try:
        user = await user_service.create_user(db, data.email, data.password)
    except EmailAlreadyRegisteredError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    return _login_response(user, response, settings)


@router.post("/login", response_model=AuthResponse)
async def login(
    data: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    """Exchange email and password for a token pair."""
    try:
        user = await user_service.authenticate(db, data.email, data.password)
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e),
        ) from e
    return _login_response(user, response, settings)


@router.post("/refresh", response_model=RefreshResponse)
async def refresh(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> RefreshResponse:
    """
    Rotate the token pair using the refresh cookie.

    The new refresh token replaces the old cookie. The old token is not recorded
    anywhere and keeps verifying until its own expiry.
    """
    try:
        token = read_refresh_cookie(request)
    except NoRefreshTokenError as e:
        raise _refresh_unauthorized("No refresh token. Please log in again.") from e

    try:
        claims = decode_refresh_token(token, settings)
    except InvalidTokenError as e:
        raise _refresh_unauthorized("Invalid refresh token. Please log in again.") from e

    user = await user_service.get_user(db, claims.user_id)
    if user is None:
        raise _refresh_unauthorized("User no longer exists.")

    pair = issue_token_pair(user, settings)
    set_refresh_cookie(response, pair.refresh_token, settings)
    logger.debug("token_refreshed user_id=%s", user.id)
    return RefreshResponse(access_token=pair.access_token)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    settings: Settings = Depends(get_settings),
) -> MessageResponse:
    """Clear the refresh cookie. Outstanding access tokens expire on their own."""
    clear_refresh_cookie(response, settings)
    return MessageResponse(message="Logged out successfully.")


@router.get("/me", response_model=MeResponse)
async def get_me(
    identity: AuthIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
) -> MeResponse:
    """Return the current user's profile; 404 if the account was deleted."""
    user = await user_service.get_user(db, identity.user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")
    return MeResponse(user=UserResponse.model_validate(user))


@router.delete("/account", response_model=MessageResponse)
async def delete_account(
    response: Response,
    identity: AuthIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
    summary_cache: SummaryCache = Depends(get_summary_cache),
) -> MessageResponse:
    """Delete the account and every transaction it owns, then clear the cookie."""
    try:
        await user_service.delete_account(db, identity.user_id)
    except UserNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="User not found.",
        ) from e
    summary_cache.invalidate(identity.user_id)
    clear_refresh_cookie(response, settings)
    return MessageResponse(message="Account deleted successfully.")
