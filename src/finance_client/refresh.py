"""Single-flight access token refresh."""
import asyncio
import logging
from collections import deque
from collections.abc import Awaitable, Callable
from enum import Enum

from finance_client.exceptions import SessionExpiredError

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_TIMEOUT = 10.0


class RefreshState(Enum):
    """Whether a refresh call is currently in flight."""

    IDLE = "idle"
    REFRESHING = "refreshing"


class RefreshCoordinator:
    """
    Makes sure at most one refresh call is in flight at a time.

    The first caller to `refresh()` while IDLE performs the refresh. Callers that
    arrive while it is running are parked on a future and receive the same outcome:
    the new access token, or the same `SessionExpiredError`. Parked callers never
    start a refresh of their own.

    An optional timeout bounds the refresh call; on expiry it counts as a failed
    refresh and the coordinator returns to IDLE.
    """

    def __init__(
        self,
        refresh: Callable[[], Awaitable[str]],
        *,
        timeout: float | None = DEFAULT_REFRESH_TIMEOUT,
    ) -> None:
        self._refresh = refresh
        self._timeout = timeout
        self._state = RefreshState.IDLE
        self._pending: deque[asyncio.Future[str]] = deque()
        self.refresh_count = 0

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def pending(self) -> int:
        """Number of callers waiting on the in-flight refresh."""
        return len(self._pending)

    async def refresh(self) -> str:
        """
        Return a fresh access token, joining the in-flight refresh if there is one.

        Raises:
            SessionExpiredError: The refresh call failed, timed out or was cancelled.
        """
        if self._state is RefreshState.REFRESHING:
            future: asyncio.Future[str] = asyncio.get_running_loop().create_future()
            self._pending.append(future)
            return await future

        self._state = RefreshState.REFRESHING
        self.refresh_count += 1
        logger.debug("token_refresh_started")
        try:
            async with asyncio.timeout(self._timeout):
                token = await self._refresh()
        except TimeoutError as e:
            logger.warning("token_refresh_timeout timeout=%s", self._timeout)
            error = SessionExpiredError("Session refresh timed out. Please log in again.")
            self._settle(error=error)
            raise error from e
        except SessionExpiredError as e:
            self._settle(error=e)
            raise
        except Exception as e:
            logger.warning("token_refresh_failed error=%s", e)
            error = SessionExpiredError()
            error.__cause__ = e
            self._settle(error=error)
            raise error from e
        except asyncio.CancelledError:
            self._settle(error=SessionExpiredError("Session refresh was cancelled."))
            raise

        self._settle(token=token)
        return token

    def _settle(
        self,
        *,
        token: str | None = None,
        error: SessionExpiredError | None = None,
    ) -> None:
        """Return to IDLE and hand the outcome to every parked caller, in order."""
        self._state = RefreshState.IDLE
        waiters, self._pending = self._pending, deque()
        for future in waiters:
            if future.done():
                continue
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(token)
        logger.debug(
            "token_refresh_settled ok=%s waiters=%s", error is None, len(waiters),
        )
