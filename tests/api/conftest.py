"""Shared fixtures and helpers for API tests."""
import re
from collections.abc import Awaitable, Callable
from typing import Any

import pytest
from httpx import AsyncClient, Response

_REFRESH_COOKIE = re.compile(r"refreshToken=([^;]*)")


def refresh_cookie_value(response: Response) -> str | None:
    """Return the refresh token set by a response, or None if it sets none."""
    for header in response.headers.get_list("set-cookie"):
        match = _REFRESH_COOKIE.search(header)
        if match:
            return match.group(1).strip('"')
    return None


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def refresh_cookie() -> Callable[[Response], str | None]:
    """Expose `refresh_cookie_value` to test modules."""
    return refresh_cookie_value


RegisterUser = Callable[..., Awaitable[dict[str, Any]]]


@pytest.fixture
def register_user(client: AsyncClient) -> RegisterUser:
    """Register an account and return its token, cookie and auth headers."""

    async def _register(
        email: str = "a@x.com", password: str = "secret1",
    ) -> dict[str, Any]:
        response = await client.post(
            "/auth/register", json={"email": email, "password": password},
        )
        assert response.status_code == 201, response.text
        data = response.json()
        return {
            "access_token": data["accessToken"],
            "refresh_token": refresh_cookie_value(response),
            "user": data["user"],
            "headers": bearer(data["accessToken"]),
        }

    return _register


@pytest.fixture
async def auth_headers(register_user: RegisterUser) -> dict[str, str]:
    """Bearer headers for a freshly registered user."""
    user = await register_user()
    return user["headers"]
