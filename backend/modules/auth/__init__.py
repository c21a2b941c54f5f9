"""
Authentication module.

Handles signup, login, logout, email verification and the authorization
preamble that gates every ride operation.

Public API:
- IIdentityGateway: Interface for auth operations
- IIdentityBackend: Interface for the external auth provider
- IdentityGateway: Per-session implementation
- InMemoryIdentityBackend / SupabaseIdentityBackend: Backends
- VerificationPoller: Cancellable verification re-check loop
- Auth exceptions: InvalidDomainError, UnverifiedEmailError, etc.
"""

from .interfaces import IIdentityBackend, IIdentityGateway
from .models import (
    JWTPayload,
    SessionPersistence,
    SessionState,
    UserProfile,
)
from .policies import EmailDomainPolicy, PasswordPolicy
from .backends import InMemoryAccountDirectory, InMemoryIdentityBackend, SupabaseIdentityBackend
from .service import IdentityGateway
from .verification import VerificationPoller
from .profiles import ProfileRepository
from .exceptions import (
    InvalidTokenError,
    ExpiredTokenError,
    MissingTokenError,
    NotAuthenticatedError,
    InvalidCredentialsError,
    MissingCredentialsError,
    InvalidDomainError,
    WeakPasswordError,
    InvalidEmailError,
    EmailAlreadyRegisteredError,
    UnverifiedEmailError,
    AccountDisabledError,
)

__all__ = [
    # Interfaces
    "IIdentityBackend",
    "IIdentityGateway",
    # Implementations
    "IdentityGateway",
    "InMemoryAccountDirectory",
    "InMemoryIdentityBackend",
    "SupabaseIdentityBackend",
    "VerificationPoller",
    "ProfileRepository",
    "EmailDomainPolicy",
    "PasswordPolicy",
    # Models
    "JWTPayload",
    "SessionPersistence",
    "SessionState",
    "UserProfile",
    # Exceptions
    "InvalidTokenError",
    "ExpiredTokenError",
    "MissingTokenError",
    "NotAuthenticatedError",
    "InvalidCredentialsError",
    "MissingCredentialsError",
    "InvalidDomainError",
    "WeakPasswordError",
    "InvalidEmailError",
    "EmailAlreadyRegisteredError",
    "UnverifiedEmailError",
    "AccountDisabledError",
]
