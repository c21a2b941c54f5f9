"""
Authentication module exceptions.

These exceptions are raised by the auth module and can be caught
by API error handlers to return appropriate HTTP responses.
"""

from typing import Optional

from shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ErrorKind,
    ValidationError,
)
from shared.models import Identity


class InvalidTokenError(AuthenticationError):
    """Raised when a JWT token is invalid or malformed."""

    def __init__(self, message: str = "Invalid authentication token"):
        super().__init__(message, code="INVALID_TOKEN")


class ExpiredTokenError(AuthenticationError):
    """Raised when a JWT token has expired."""

    def __init__(self, message: str = "Authentication token has expired"):
        super().__init__(message, code="TOKEN_EXPIRED")


class MissingTokenError(AuthenticationError):
    """Raised when no authentication token is provided."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="MISSING_TOKEN")


class NotAuthenticatedError(AuthenticationError):
    """Raised when an operation needs an identity and there is none."""

    def __init__(self, message: str = "No user is signed in"):
        super().__init__(message, code="NOT_AUTHENTICATED")


class InvalidCredentialsError(AuthenticationError):
    """Raised when the backend rejects an email/password pair."""

    kind = ErrorKind.INVALID_CREDENTIALS

    def __init__(self, message: str = "Incorrect email or password"):
        super().__init__(message, code="INVALID_CREDENTIALS")


class MissingCredentialsError(ValidationError):
    """Raised when email or password is empty."""

    kind = ErrorKind.MISSING_CREDENTIALS

    def __init__(self):
        super().__init__("Email and password are required", code="MISSING_CREDENTIALS")


class InvalidDomainError(AuthorizationError):
    """Raised when an email is outside the allowed campus domain."""

    kind = ErrorKind.INVALID_DOMAIN

    def __init__(self, email: str, domain: str):
        super().__init__(
            f"Only @{domain} email addresses are allowed",
            code="INVALID_DOMAIN",
            details={"email": email, "domain": domain},
        )


class WeakPasswordError(ValidationError):
    """Raised when a password fails the password policy."""

    kind = ErrorKind.WEAK_PASSWORD

    def __init__(self, message: str = "Password is too weak"):
        super().__init__(message, code="WEAK_PASSWORD")


class InvalidEmailError(ValidationError):
    """Raised when the backend rejects an email as malformed."""

    def __init__(self, email: str):
        super().__init__(
            "Invalid email format",
            code="INVALID_EMAIL",
            details={"email": email},
        )


class EmailAlreadyRegisteredError(ValidationError):
    """Raised when signing up with an email that already has an account."""

    def __init__(self, email: str):
        super().__init__(
            "This email is already registered. Please sign in instead.",
            code="EMAIL_ALREADY_REGISTERED",
            details={"email": email},
        )


class UnverifiedEmailError(AuthorizationError):
    """Raised when an identity exists but has not verified its email."""

    kind = ErrorKind.UNVERIFIED_EMAIL

    def __init__(self, email: str, identity: Optional[Identity] = None):
        super().__init__(
            "Please verify your email before signing in. "
            "Check your inbox for the verification link.",
            code="UNVERIFIED_EMAIL",
            details={"email": email},
        )
        self.identity = identity


class AccountDisabledError(AuthorizationError):
    """Raised when the backend reports the account as disabled."""

    def __init__(self, email: str):
        super().__init__(
            "This account has been disabled. Please contact support.",
            code="ACCOUNT_DISABLED",
            details={"email": email},
        )
