"""
Base exception classes for the UW Go Rides backend.

Each module should define its own exceptions that inherit from these bases.
Every exception carries an ErrorKind so callers (and the API error handlers)
can react to the category of failure without knowing the concrete class.
"""

from enum import Enum
from typing import Optional, Any


class ErrorKind(str, Enum):
    """Error taxonomy shared by all modules."""

    RATE_LIMITED = "rate_limited"
    INVALID_DOMAIN = "invalid_domain"
    WEAK_PASSWORD = "weak_password"
    INVALID_FIELD = "invalid_field"
    INVALID_DEPARTURE = "invalid_departure"
    MISSING_CREDENTIALS = "missing_credentials"
    INVALID_CREDENTIALS = "invalid_credentials"
    UNVERIFIED_EMAIL = "unverified_email"
    NOT_AUTHENTICATED = "not_authenticated"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    QUOTA_EXCEEDED = "quota_exceeded"
    BACKEND_UNAVAILABLE = "backend_unavailable"


class GoRidesError(Exception):
    """
    Base exception for all UW Go Rides errors.

    All custom exceptions should inherit from this class.
    """

    kind: ErrorKind = ErrorKind.BACKEND_UNAVAILABLE

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
            "kind": self.kind.value,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(GoRidesError):
    """Resource not found."""

    kind = ErrorKind.NOT_FOUND


class ValidationError(GoRidesError):
    """Input validation failed."""

    kind = ErrorKind.INVALID_FIELD


class AuthenticationError(GoRidesError):
    """Authentication failed (invalid or missing credentials)."""

    kind = ErrorKind.NOT_AUTHENTICATED


class AuthorizationError(GoRidesError):
    """Authorization failed (insufficient permissions)."""

    kind = ErrorKind.FORBIDDEN


class RateLimitedError(GoRidesError):
    """Attempt budget exhausted for a key within its window."""

    kind = ErrorKind.RATE_LIMITED


class ExternalServiceError(GoRidesError):
    """Error communicating with an external service."""

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


class BackendUnavailableError(ExternalServiceError):
    """
    The store or auth backend failed for infrastructure reasons.

    Safe to retry with backoff. The backend's own message is kept in
    details["original_error"] for diagnostics.
    """

    kind = ErrorKind.BACKEND_UNAVAILABLE

    def __init__(self, service: str, original_error: Optional[str] = None):
        super().__init__(
            f"{service} is unavailable",
            service=service,
            code="BACKEND_UNAVAILABLE",
            details={"original_error": original_error},
        )
