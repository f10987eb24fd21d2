"""Errors raised by the finance API client."""


class SessionExpiredError(Exception):
    """
    The session could not be renewed and the user must log in again.

    Raised for the request that triggered the refresh and for every request that
    was waiting on it. The underlying failure is chained as `__cause__`.
    """

    def __init__(self, message: str = "Session expired. Please log in again.") -> None:
        self.message = message
        super().__init__(message)
