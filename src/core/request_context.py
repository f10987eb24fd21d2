"""Identity attached to authenticated requests."""
from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class AuthIdentity:
    """
    Identity decoded from a verified access token.

    Trusted as-is for the token's lifetime; the user row is not re-read per request,
    so a deleted account's unexpired token still passes the access check.
    """

    user_id: UUID
    email: str
