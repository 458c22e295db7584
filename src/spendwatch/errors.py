"""Error taxonomy shared by forms, repositories and the dashboard.

Every error raised on purpose by SpendWatch derives from ``SpendWatchError`` so
UI boundaries can convert it into a notification without crashing the view.
"""

from __future__ import annotations

from typing import Optional


class SpendWatchError(Exception):
    """Base class for application errors with a user-facing message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(SpendWatchError):
    """User input was rejected; the form keeps its values."""

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class AuthError(SpendWatchError):
    """No authenticated identity is available, or credentials were wrong."""


class BackendError(SpendWatchError):
    """The record store or change channel failed; the operation was aborted."""


class UnexpectedError(SpendWatchError):
    """Anything else caught at a form or fetch boundary."""

    GENERIC_MESSAGE = "An unexpected error occurred"

    def __init__(self, message: str = GENERIC_MESSAGE) -> None:
        super().__init__(message)
