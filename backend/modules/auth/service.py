"""
Identity gateway implementation.

Owns one session's authentication lifecycle:

    SIGNED_OUT -> PENDING_VERIFICATION -> ACTIVE

Signup always ends in PENDING_VERIFICATION (the new account is signed back
out until its email is verified). Login reaches ACTIVE only for a verified
identity inside the campus domain; an unverified login is signed back out
into PENDING_VERIFICATION.
"""

import logging
from datetime import timedelta
from typing import Awaitable, Callable, Optional

from shared.config import Settings, get_settings
from shared.models import Identity, normalize_email
from modules.rate_limiting import IRateLimiter, RateLimitExceededError, RateLimitPolicy

from .exceptions import (
    MissingCredentialsError,
    NotAuthenticatedError,
    UnverifiedEmailError,
)
from .interfaces import IIdentityBackend, IIdentityGateway
from .models import SessionPersistence, SessionState
from .policies import build_policies
from .profiles import ProfileRepository
from .verification import VerificationPoller

logger = logging.getLogger(__name__)


class IdentityGateway(IIdentityGateway):
    """
    Authentication operations for one session.

    The rate limiter is shared across sessions; the backend is not.
    """

    def __init__(
        self,
        backend: IIdentityBackend,
        rate_limiter: IRateLimiter,
        settings: Optional[Settings] = None,
        profiles: Optional[ProfileRepository] = None,
    ):
        self._settings = settings or get_settings()
        self._backend = backend
        self._rate_limiter = rate_limiter
        self._profiles = profiles
        self._domain, self._passwords = build_policies(self._settings)

        auth_window = timedelta(seconds=self._settings.auth_rate_limit_window_seconds)
        self._signup_policy = RateLimitPolicy(
            key_prefix="signup",
            max_attempts=self._settings.auth_rate_limit_attempts,
            window=auth_window,
        )
        self._login_policy = RateLimitPolicy(
            key_prefix="login",
            max_attempts=self._settings.auth_rate_limit_attempts,
            window=auth_window,
        )
        self._resend_policy = RateLimitPolicy(
            key_prefix="resend",
            max_attempts=self._settings.resend_rate_limit_attempts,
            window=timedelta(seconds=self._settings.resend_rate_limit_window_seconds),
        )

        self._state = SessionState.SIGNED_OUT
        self._current: Optional[Identity] = None
        self._pending: Optional[Identity] = None
        self._pending_email: Optional[str] = None
        self._poller: Optional[VerificationPoller] = None

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def current_identity(self) -> Optional[Identity]:
        return self._current

    @property
    def pending_email(self) -> Optional[str]:
        """Email awaiting verification while PENDING_VERIFICATION."""
        if self._pending is not None:
            return self._pending.email
        return self._pending_email

    def access_token(self) -> Optional[str]:
        """Bearer token for the active session, if the backend issues one."""
        if self._state != SessionState.ACTIVE:
            return None
        return self._backend.access_token()

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _consume(self, policy: RateLimitPolicy, email: str, message: str) -> str:
        key = policy.key_for(email)
        if not self._rate_limiter.allow(key, policy.max_attempts, policy.window):
            logger.debug("Rate limited %s attempt", policy.key_prefix)
            raise RateLimitExceededError(policy.key_prefix, message)
        return key

    def _enter_pending(self, email: str, identity: Optional[Identity]) -> None:
        self._state = SessionState.PENDING_VERIFICATION
        self._current = None
        self._pending = identity
        self._pending_email = email

    def _enter_signed_out(self) -> None:
        self._state = SessionState.SIGNED_OUT
        self._current = None
        self._pending = None
        self._pending_email = None

    def _verification_redirect(self) -> str:
        return self._settings.frontend_url

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def signup(self, email: str, password: str) -> Identity:
        email = normalize_email(email)
        key = self._consume(
            self._signup_policy, email, "Too many signup attempts. Please try again later."
        )
        self._domain.check(email)
        self._passwords.check(password)

        identity = await self._backend.create_account(email, password)
        self._enter_pending(email, identity)
        try:
            await self._backend.send_verification_email(email, self._verification_redirect())
        finally:
            # Verification has to happen out of band before any access.
            await self._backend.end_session()

        self._rate_limiter.reset(key)
        logger.info("Created account %s, awaiting verification", identity.uid)
        return identity

    async def login(self, email: str, password: str, remember_me: bool = False) -> Identity:
        email = normalize_email(email)
        key = self._consume(
            self._login_policy, email, "Too many login attempts. Please try again later."
        )
        if not email or not password:
            raise MissingCredentialsError()
        # The backend doesn't know about the domain restriction, so check first.
        self._domain.check(email)

        self._backend.set_persistence(
            SessionPersistence.DURABLE if remember_me else SessionPersistence.SESSION
        )
        try:
            identity = await self._backend.authenticate(email, password)
        except UnverifiedEmailError as e:
            await self._backend.end_session()
            self._enter_pending(email, e.identity)
            raise

        identity = await self._backend.reload_identity(identity)
        if not identity.email_verified:
            await self._backend.end_session()
            self._enter_pending(identity.email, identity)
            logger.info("Login for %s blocked until email is verified", identity.uid)
            raise UnverifiedEmailError(identity.email, identity)

        if not self._domain.is_allowed(identity.email):
            await self._backend.end_session()
            self._enter_signed_out()
            self._domain.check(identity.email)

        if self._profiles is not None:
            try:
                await self._profiles.ensure(identity)
            except Exception:
                await self._backend.end_session()
                self._enter_signed_out()
                raise

        self._rate_limiter.reset(key)
        self._state = SessionState.ACTIVE
        self._current = identity
        self._pending = None
        self._pending_email = None
        logger.info("User %s signed in", identity.uid)
        return identity

    async def logout(self) -> None:
        self.stop_verification_polling()
        await self._backend.end_session()
        self._enter_signed_out()

    def resume_pending(self, email: str, uid: Optional[str] = None) -> None:
        """
        Put a fresh gateway into PENDING_VERIFICATION for a known account.

        Stateless callers (the HTTP routes) use this to resend or check
        verification for an account created by an earlier request. Without a
        uid only resending is possible.
        """
        email = normalize_email(email)
        identity = Identity(uid=uid, email=email) if uid else None
        self._enter_pending(email, identity)

    async def resend_verification(self) -> None:
        subject = self._current or self._pending
        email = subject.email if subject else self._pending_email
        if not email:
            raise NotAuthenticatedError()
        self._consume(
            self._resend_policy,
            email,
            "Too many verification email requests. Please try again in an hour.",
        )
        await self._backend.send_verification_email(email, self._verification_redirect())
        logger.info("Re-sent verification email")

    async def check_verification(self) -> bool:
        subject = self._current or self._pending
        if subject is None:
            raise NotAuthenticatedError("Sign in again to check verification status")

        fresh = await self._backend.reload_identity(subject)
        if self._current is not None:
            self._current = fresh
        else:
            self._pending = fresh
        return fresh.email_verified

    async def require_active(self, identity: Optional[Identity] = None) -> Identity:
        subject = identity or self._current
        if subject is None:
            raise NotAuthenticatedError()

        if self._settings.auth_reload_on_authorize:
            subject = await self._backend.reload_identity(subject)
        if not subject.email_verified:
            raise UnverifiedEmailError(subject.email, subject)
        self._domain.check(subject.email)
        return subject

    # -------------------------------------------------------------------------
    # Verification polling
    # -------------------------------------------------------------------------

    def start_verification_polling(
        self,
        on_verified: Optional[Callable[[], Awaitable[None]]] = None,
        interval: Optional[float] = None,
    ) -> VerificationPoller:
        """
        Start checking the verification flag on a fixed interval.

        Any poller already running for this session is cancelled first.
        logout() cancels the poller.
        """
        self.stop_verification_polling()
        self._poller = VerificationPoller(
            self.check_verification,
            interval=interval or self._settings.verification_poll_interval_seconds,
            on_verified=on_verified,
        )
        self._poller.start()
        return self._poller

    def stop_verification_polling(self) -> None:
        if self._poller is not None:
            self._poller.cancel()
            self._poller = None
