"""Where the client keeps the current access token."""
from typing import Protocol


class TokenStore(Protocol):
    """Holder for the access token attached to outgoing requests."""

    def get(self) -> str | None: ...

    def set(self, token: str) -> None: ...

    def clear(self) -> None: ...


class MemoryTokenStore:
    """Keeps the access token in memory; it is lost when the process exits."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token

    def get(self) -> str | None:
        return self._token

    def set(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None
