"""Shared exceptions for service layer operations."""


class AuthenticationError(Exception):
    """
    Base class for every "please log in again" condition.

    Callers must not distinguish subclasses in user-facing output; the split exists
    for logging and for choosing the response message at the HTTP boundary.
    """


class InvalidTokenError(AuthenticationError):
    """Raised when a token fails signature, type, or claim validation."""


class TokenExpiredError(InvalidTokenError):
    """Raised when a correctly signed token is past its expiry."""


class NoRefreshTokenError(AuthenticationError):
    """Raised when the refresh cookie is absent."""


class InvalidCredentialsError(Exception):
    """Raised when an email/password pair does not match an account."""

    def __init__(self) -> None:
        super().__init__("Invalid email or password.")


class EmailAlreadyRegisteredError(Exception):
    """Raised when registering an email that already has an account."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__("An account with this email already exists.")


class UserNotFoundError(Exception):
    """Raised when the user referenced by a token no longer exists."""


class TransactionNotFoundError(Exception):
    """Raised when a transaction ID does not exist."""

    def __init__(self) -> None:
        super().__init__("Transaction not found.")


class TransactionForbiddenError(Exception):
    """Raised when a transaction exists but belongs to another user."""

    def __init__(self) -> None:
        super().__init__("You are not authorized to delete this transaction.")


class NoValidTransactionsError(Exception):
    """Raised when a batch save contains no usable items."""

    def __init__(self) -> None:
        super().__init__("No valid transactions to save.")


class LLMServiceError(Exception):
    """
    Raised when the hosted completion API cannot produce a usable answer.

    Carries the upstream HTTP status when one was received.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ReceiptScanError(Exception):
    """
    Raised when a receipt image cannot be turned into transactions.

    `error` is the short headline; `detail` is a human-readable hint on what to fix.
    """

    def __init__(self, error: str, detail: str | None = None) -> None:
        self.error = error
        self.detail = detail
        super().__init__(error)
