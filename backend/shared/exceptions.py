"""
Base exception classes for the Debate Arena backend.

Each module should define its own exceptions that inherit from these bases.
Every base carries the HTTP status the API answers with when one escapes a
route, so the app needs a single handler for the whole hierarchy.
"""

from typing import Optional, Any


class ArenaError(Exception):
    """
    Base exception for all Debate Arena errors.

    All custom exceptions should inherit from this class.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(ArenaError):
    """Resource not found."""

    status_code = 404


class ValidationError(ArenaError):
    """A change would break an invariant of the stored state."""

    status_code = 409


class AuthenticationError(ArenaError):
    """Invalid, expired or out-of-scope credentials."""

    status_code = 401


class ExternalServiceError(ArenaError):
    """Error communicating with an external service (the LLM provider)."""

    status_code = 502

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service
