"""
Error taxonomy for the console sync core.
"""
from typing import Optional


class ConsoleError(Exception):
    """Base exception for sync core errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class TransientNetworkError(ConsoleError):
    """Timeout or connection loss; the next poll tick retries."""
    pass


class ValidationError(ConsoleError):
    """Input rejected locally before any network call."""
    pass


class AuthorizationError(ConsoleError):
    """The server refused the viewer's credentials (401/403)."""

    def __init__(self, message: str, status: int = 401, details: dict = None):
        super().__init__(message, details)
        self.status = status


class ServerRejectionError(ConsoleError):
    """
    The server answered with an error status.

    ``server_message`` is the optional human-readable ``message`` field of
    the response body and is what user-facing notices display.
    """

    def __init__(self, message: str, status: int, server_message: Optional[str] = None,
                 details: dict = None):
        super().__init__(message, details)
        self.status = status
        self.server_message = server_message

    @property
    def is_server_error(self) -> bool:
        return self.status >= 500
