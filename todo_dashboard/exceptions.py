from __future__ import annotations

from typing import Optional


UNREACHABLE_MESSAGE = "Unable to connect to the server. Please try again later."


class TodoDashboardError(Exception):
    """Base error for everything the dashboard surfaces to the user."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationError(TodoDashboardError):
    """Malformed payload, blank title or an illegal status change."""


class ApiError(TodoDashboardError):
    """The todo API answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int = 0, *, endpoint: Optional[str] = None) -> None:
        super().__init__(message)
        self.status_code = int(status_code)
        self.endpoint = endpoint

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code}, message={self.message!r})"


class AuthError(ApiError):
    """Login or registration was rejected."""


class ServerUnreachableError(ApiError):
    """The transport failed before any HTTP status was received."""

    def __init__(self, *, endpoint: Optional[str] = None, cause: Optional[BaseException] = None) -> None:
        super().__init__(UNREACHABLE_MESSAGE, 0, endpoint=endpoint)
        self.cause = cause
