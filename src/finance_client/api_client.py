"""Async HTTP client for the FinMind API with transparent token refresh."""
import logging
from typing import Any

import httpx

from finance_client.exceptions import SessionExpiredError
from finance_client.refresh import DEFAULT_REFRESH_TIMEOUT, RefreshCoordinator
from finance_client.token_store import MemoryTokenStore, TokenStore

logger = logging.getLogger(__name__)

REFRESH_PATH = "/auth/refresh"
# A 401 from these means bad credentials or a dead session, not a stale access token
_NO_RETRY_PATHS = frozenset({"/auth/login", "/auth/register", REFRESH_PATH})


class FinanceApiClient:
    """
    Wraps an `httpx.AsyncClient` so callers never handle access token expiry.

    Every request carries the stored access token as a bearer header. The refresh
    token lives in the client's cookie jar, exactly as a browser would hold it. When
    a request comes back 401, the client obtains a new access token (sharing one
    refresh call among all concurrent failures) and replays the request once. If
    the refresh fails, the stored token is cleared and `SessionExpiredError` is
    raised.

    Use as an async context manager, or call `aclose()` when done.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        http_client: httpx.AsyncClient | None = None,
        token_store: TokenStore | None = None,
        refresh_timeout: float | None = DEFAULT_REFRESH_TIMEOUT,
    ) -> None:
        self._http = http_client or httpx.AsyncClient(base_url=base_url, timeout=30.0)
        self._owns_http = http_client is None
        self.token_store = token_store or MemoryTokenStore()
        self.coordinator = RefreshCoordinator(self._refresh_access_token, timeout=refresh_timeout)

    async def __aenter__(self) -> "FinanceApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http:
            await self._http.aclose()

    async def _send(
        self, method: str, path: str, token: str | None, **kwargs: Any,
    ) -> httpx.Response:
        headers = dict(kwargs.pop("headers", None) or {})
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return await self._http.request(method, path, headers=headers, **kwargs)

    async def _refresh_access_token(self) -> str:
        """Exchange the refresh cookie for a new access token and store it."""
        response = await self._http.post(REFRESH_PATH)
        if response.status_code != 200:
            raise SessionExpiredError(_detail(response) or SessionExpiredError().message)
        token = response.json()["accessToken"]
        self.token_store.set(token)
        return token

    async def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """
        Send a request, refreshing the access token and retrying once on 401.

        Responses other than 401 are returned untouched, errors included. The retried
        response is returned as-is even if it is another 401.

        Raises:
            SessionExpiredError: The refresh failed; the stored token has been cleared.
        """
        token = self.token_store.get()
        response = await self._send(method, path, token, **kwargs)
        if response.status_code != httpx.codes.UNAUTHORIZED or path in _NO_RETRY_PATHS:
            return response

        current = self.token_store.get()
        if current and current != token:
            # Another request already refreshed after this one was sent
            new_token = current
        else:
            try:
                new_token = await self.coordinator.refresh()
            except SessionExpiredError:
                self.token_store.clear()
                raise

        logger.debug("request_retry method=%s path=%s", method, path)
        return await self._send(method, path, new_token, **kwargs)

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", path, **kwargs)

    async def register(self, email: str, password: str) -> dict[str, Any]:
        """Create an account and store its access token."""
        return await self._authenticate("/auth/register", email, password)

    async def login(self, email: str, password: str) -> dict[str, Any]:
        """Log in and store the access token."""
        return await self._authenticate("/auth/login", email, password)

    async def _authenticate(self, path: str, email: str, password: str) -> dict[str, Any]:
        response = await self.post(path, json={"email": email, "password": password})
        response.raise_for_status()
        data = response.json()
        self.token_store.set(data["accessToken"])
        return data

    async def restore_session(self) -> dict[str, Any] | None:
        """
        Resume a session from the refresh cookie alone.

        Returns the user profile, or None (with the store cleared) if there is no
        usable refresh cookie.
        """
        try:
            await self.coordinator.refresh()
        except SessionExpiredError:
            self.token_store.clear()
            return None
        response = await self.get("/auth/me")
        response.raise_for_status()
        return response.json()["user"]

    async def logout(self) -> None:
        """Clear the refresh cookie on the server and forget the access token."""
        try:
            await self.post("/auth/logout")
        finally:
            self.token_store.clear()
            self._http.cookies.clear()


def _detail(response: httpx.Response) -> str | None:
    """Return the API's `detail` message from an error response, if any."""
    try:
        detail = response.json().get("detail")
    except (ValueError, AttributeError):
        return None
    return detail if isinstance(detail, str) else None
