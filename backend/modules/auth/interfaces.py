"""
Authentication module interface.

Other modules should depend on IIdentityGateway, not the concrete
implementation. The gateway itself depends on IIdentityBackend so the
Supabase Auth client can be swapped for the in-memory backend in tests.
"""

from typing import Protocol, Optional, runtime_checkable

from shared.models import Identity

from .models import SessionPersistence, SessionState


@runtime_checkable
class IIdentityBackend(Protocol):
    """
    Interface for the external authentication provider.

    One backend instance represents one sign-in session: authenticate()
    starts it and end_session() ends it.

    Implementations translate provider failures into auth module exceptions
    (EmailAlreadyRegisteredError, InvalidCredentialsError, ...) and
    anything they cannot classify into BackendUnavailableError.
    """

    async def create_account(self, email: str, password: str) -> Identity:
        """Create an account (and sign it in, as most providers do)."""
        ...

    async def authenticate(self, email: str, password: str) -> Identity:
        """Sign in with email and password."""
        ...

    async def end_session(self) -> None:
        """Sign out the current session, if any."""
        ...

    async def send_verification_email(self, email: str, redirect_url: str) -> None:
        """Send (or re-send) the verification link for an account."""
        ...

    async def reload_identity(self, identity: Identity) -> Identity:
        """Fetch the identity's current state, including email_verified."""
        ...

    def current_identity(self) -> Optional[Identity]:
        """The identity signed in on this session, if any."""
        ...

    def set_persistence(self, mode: SessionPersistence) -> None:
        """Choose whether the next session survives process restarts."""
        ...

    def access_token(self) -> Optional[str]:
        """Bearer token for the current session, if the provider issues one."""
        ...


@runtime_checkable
class IIdentityGateway(Protocol):
    """
    Interface for authentication operations.

    This protocol defines the contract that the auth module exposes
    to other modules and to the HTTP routes.
    """

    @property
    def state(self) -> SessionState:
        """Current session state."""
        ...

    @property
    def current_identity(self) -> Optional[Identity]:
        """Identity signed in on this session (only set while ACTIVE)."""
        ...

    async def signup(self, email: str, password: str) -> Identity:
        """
        Create an account and leave it pending verification.

        Raises:
            RateLimitExceededError, InvalidDomainError, WeakPasswordError,
            EmailAlreadyRegisteredError, InvalidEmailError,
            BackendUnavailableError
        """
        ...

    async def login(self, email: str, password: str, remember_me: bool = False) -> Identity:
        """
        Sign in a verified campus identity.

        Raises:
            RateLimitExceededError, MissingCredentialsError, InvalidDomainError,
            InvalidCredentialsError, UnverifiedEmailError, AccountDisabledError,
            BackendUnavailableError
        """
        ...

    async def logout(self) -> None:
        """End the session unconditionally."""
        ...

    async def resend_verification(self) -> None:
        """
        Re-send the verification email.

        Raises:
            NotAuthenticatedError, RateLimitExceededError
        """
        ...

    async def check_verification(self) -> bool:
        """Reload and return the pending/current identity's verification flag."""
        ...

    async def require_active(self, identity: Optional[Identity] = None) -> Identity:
        """
        Authorization preamble for ride operations.

        Args:
            identity: Identity presented by the caller (e.g. decoded from a
                bearer token). Defaults to this session's identity.

        Returns:
            The identity with a freshly reloaded verification flag

        Raises:
            NotAuthenticatedError, UnverifiedEmailError, InvalidDomainError
        """
        ...
