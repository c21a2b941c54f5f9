"""
Identity backend implementations.

InMemoryIdentityBackend keeps accounts in an InMemoryAccountDirectory and is
used for tests and local development. SupabaseIdentityBackend talks to
Supabase Auth.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

import httpx
import jwt
from supabase import AuthApiError, AuthError, Client
from werkzeug.security import check_password_hash, generate_password_hash

from shared.exceptions import BackendUnavailableError
from shared.models import Identity, normalize_email

from .exceptions import (
    AccountDisabledError,
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    InvalidEmailError,
    NotAuthenticatedError,
    UnverifiedEmailError,
    WeakPasswordError,
)
from .interfaces import IIdentityBackend
from .models import SessionPersistence

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# In-memory backend
# -----------------------------------------------------------------------------


@dataclass
class _Account:
    uid: str
    email: str
    password_hash: str
    email_verified: bool = False
    disabled: bool = False
    verification_emails: list[str] = field(default_factory=list)


class InMemoryAccountDirectory:
    """
    Account storage shared by every InMemoryIdentityBackend session.

    The mark_verified() and disable() helpers stand in for the user clicking
    the emailed link and an administrator disabling an account.
    """

    def __init__(self) -> None:
        self._accounts: dict[str, _Account] = {}

    def add(self, email: str, password: str) -> _Account:
        email = normalize_email(email)
        if email in self._accounts:
            raise EmailAlreadyRegisteredError(email)
        account = _Account(
            uid=str(uuid.uuid4()),
            email=email,
            password_hash=generate_password_hash(password, method="pbkdf2:sha256"),
        )
        self._accounts[email] = account
        return account

    def find(self, email: str) -> Optional[_Account]:
        return self._accounts.get(normalize_email(email))

    def find_by_uid(self, uid: str) -> Optional[_Account]:
        for account in self._accounts.values():
            if account.uid == uid:
                return account
        return None

    def mark_verified(self, email: str) -> None:
        account = self.find(email)
        if account is None:
            raise KeyError(email)
        account.email_verified = True

    def disable(self, email: str) -> None:
        account = self.find(email)
        if account is None:
            raise KeyError(email)
        account.disabled = True

    def verification_emails(self, email: str) -> list[str]:
        """Redirect URLs of every verification email sent to `email`."""
        account = self.find(email)
        return list(account.verification_emails) if account else []


class InMemoryIdentityBackend(IIdentityBackend):
    """
    One sign-in session against an InMemoryAccountDirectory.

    When a JWT secret is given, access_token() mints a Supabase-shaped HS256
    token so the ride endpoints work end to end without Supabase.
    """

    def __init__(
        self,
        directory: Optional[InMemoryAccountDirectory] = None,
        jwt_secret: str = "",
    ):
        self.directory = directory or InMemoryAccountDirectory()
        self._jwt_secret = jwt_secret
        self._current: Optional[Identity] = None
        self.persistence = SessionPersistence.SESSION

    @staticmethod
    def _identity(account: _Account) -> Identity:
        return Identity(uid=account.uid, email=account.email, email_verified=account.email_verified)

    async def create_account(self, email: str, password: str) -> Identity:
        if "@" not in email:
            raise InvalidEmailError(email)
        account = self.directory.add(email, password)
        self._current = self._identity(account)
        return self._current

    async def authenticate(self, email: str, password: str) -> Identity:
        account = self.directory.find(email)
        if account is None or not check_password_hash(account.password_hash, password):
            raise InvalidCredentialsError()
        if account.disabled:
            raise AccountDisabledError(account.email)
        self._current = self._identity(account)
        return self._current

    async def end_session(self) -> None:
        self._current = None

    async def send_verification_email(self, email: str, redirect_url: str) -> None:
        account = self.directory.find(email)
        if account is None:
            raise NotAuthenticatedError(f"No account for {email}")
        account.verification_emails.append(redirect_url)

    async def reload_identity(self, identity: Identity) -> Identity:
        account = self.directory.find_by_uid(identity.uid)
        if account is None:
            raise NotAuthenticatedError(f"Unknown user: {identity.uid}")
        fresh = self._identity(account)
        if self._current is not None and self._current.uid == fresh.uid:
            self._current = fresh
        return fresh

    def current_identity(self) -> Optional[Identity]:
        return self._current

    def set_persistence(self, mode: SessionPersistence) -> None:
        self.persistence = mode

    def access_token(self) -> Optional[str]:
        if self._current is None or not self._jwt_secret:
            return None
        now = datetime.now(timezone.utc)
        payload = {
            "sub": self._current.uid,
            "email": self._current.email,
            "email_confirmed_at": now.isoformat() if self._current.email_verified else None,
            "aud": "authenticated",
            "role": "authenticated",
            "exp": int((now + timedelta(hours=1)).timestamp()),
            "iat": int(now.timestamp()),
        }
        return jwt.encode(payload, self._jwt_secret, algorithm="HS256")


# -----------------------------------------------------------------------------
# Supabase backend
# -----------------------------------------------------------------------------

# Supabase Auth error codes, with the message prefixes older servers return
# instead of a code.
_SIGNUP_ERRORS = {
    "user_already_exists": "already_registered",
    "email_exists": "already_registered",
    "weak_password": "weak_password",
    "email_address_invalid": "invalid_email",
    "validation_failed": "invalid_email",
}
_LOGIN_ERRORS = {
    "invalid_credentials": "invalid_credentials",
    "user_not_found": "invalid_credentials",
    "email_not_confirmed": "unverified",
    "user_banned": "disabled",
    "email_address_invalid": "invalid_email",
    "validation_failed": "invalid_email",
}
_MESSAGE_HINTS = {
    "user already registered": "already_registered",
    "invalid login credentials": "invalid_credentials",
    "email not confirmed": "unverified",
    "password should be": "weak_password",
    "unable to validate email address": "invalid_email",
}


def _classify(error: AuthApiError, table: dict[str, str]) -> Optional[str]:
    code = getattr(error, "code", None)
    if code and code in table:
        return table[code]
    message = (getattr(error, "message", "") or str(error)).lower()
    for hint, outcome in _MESSAGE_HINTS.items():
        if message.startswith(hint):
            return outcome
    return None


def _to_identity(user: Any) -> Identity:
    return Identity(
        uid=str(user.id),
        email=user.email or "",
        email_verified=user.email_confirmed_at is not None,
    )


class SupabaseIdentityBackend(IIdentityBackend):
    """
    Identity backend using Supabase Auth.

    Sign-in state lives in a per-session anon-key client built by
    `client_factory`. Looking up users who are not signed in (for example
    while polling a pending verification) uses the service-role
    `admin_client`.

    Supabase sends the confirmation email itself when an account is created,
    so the first send_verification_email() for a freshly created account is
    a no-op and later calls use the resend endpoint.
    """

    def __init__(
        self,
        client_factory: Callable[[bool], Client],
        admin_client: Optional[Client] = None,
        email_redirect_to: str = "",
    ):
        self._client_factory = client_factory
        self._admin = admin_client
        self._email_redirect_to = email_redirect_to
        self._persistence = SessionPersistence.DURABLE
        self._client = client_factory(True)
        self._current: Optional[Identity] = None
        self._confirmation_sent_to: Optional[str] = None

    def _unavailable(self, error: Exception) -> BackendUnavailableError:
        logger.warning("Supabase Auth call failed: %s", error)
        return BackendUnavailableError("identity backend", str(error))

    async def create_account(self, email: str, password: str) -> Identity:
        credentials: dict[str, Any] = {"email": email, "password": password}
        if self._email_redirect_to:
            credentials["options"] = {"email_redirect_to": self._email_redirect_to}
        try:
            response = self._client.auth.sign_up(credentials)
        except AuthApiError as e:
            outcome = _classify(e, _SIGNUP_ERRORS)
            if outcome == "already_registered":
                raise EmailAlreadyRegisteredError(email) from e
            if outcome == "weak_password":
                raise WeakPasswordError("Password is too weak. Please use a stronger password.") from e
            if outcome == "invalid_email":
                raise InvalidEmailError(email) from e
            raise self._unavailable(e) from e
        except (AuthError, httpx.HTTPError) as e:
            raise self._unavailable(e) from e

        if response.user is None:
            raise BackendUnavailableError("identity backend", "sign_up returned no user")
        self._confirmation_sent_to = email
        self._current = _to_identity(response.user) if response.session else None
        return _to_identity(response.user)

    async def authenticate(self, email: str, password: str) -> Identity:
        try:
            response = self._client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthApiError as e:
            outcome = _classify(e, _LOGIN_ERRORS)
            if outcome == "invalid_credentials":
                raise InvalidCredentialsError() from e
            if outcome == "unverified":
                raise UnverifiedEmailError(email) from e
            if outcome == "disabled":
                raise AccountDisabledError(email) from e
            if outcome == "invalid_email":
                raise InvalidEmailError(email) from e
            raise self._unavailable(e) from e
        except (AuthError, httpx.HTTPError) as e:
            raise self._unavailable(e) from e

        if response.user is None:
            raise InvalidCredentialsError()
        self._current = _to_identity(response.user)
        return self._current

    async def end_session(self) -> None:
        self._current = None
        try:
            self._client.auth.sign_out()
        except (AuthError, httpx.HTTPError) as e:
            # The local session is already gone; the server-side revoke is best effort.
            logger.warning("Supabase sign-out failed: %s", e)

    async def send_verification_email(self, email: str, redirect_url: str) -> None:
        if self._confirmation_sent_to == email:
            self._confirmation_sent_to = None
            logger.debug("Confirmation email for %s already sent by sign-up", email)
            return
        try:
            self._client.auth.resend(
                {
                    "type": "signup",
                    "email": email,
                    "options": {"email_redirect_to": redirect_url},
                }
            )
        except (AuthError, httpx.HTTPError) as e:
            raise self._unavailable(e) from e

    async def reload_identity(self, identity: Identity) -> Identity:
        try:
            if self._current is not None and self._current.uid == identity.uid:
                response = self._client.auth.get_user()
            elif self._admin is not None:
                response = self._admin.auth.admin.get_user_by_id(identity.uid)
            else:
                raise NotAuthenticatedError()
        except AuthApiError as e:
            if getattr(e, "status", None) in (401, 403, 404):
                raise NotAuthenticatedError(f"Unknown user: {identity.uid}") from e
            raise self._unavailable(e) from e
        except (AuthError, httpx.HTTPError) as e:
            raise self._unavailable(e) from e

        if response is None or response.user is None:
            raise NotAuthenticatedError(f"Unknown user: {identity.uid}")
        fresh = _to_identity(response.user)
        if self._current is not None and self._current.uid == fresh.uid:
            self._current = fresh
        return fresh

    def current_identity(self) -> Optional[Identity]:
        return self._current

    def set_persistence(self, mode: SessionPersistence) -> None:
        if mode == self._persistence:
            return
        self._persistence = mode
        self._client = self._client_factory(mode == SessionPersistence.DURABLE)
        self._current = None

    def access_token(self) -> Optional[str]:
        if self._current is None:
            return None
        session = self._client.auth.get_session()
        return session.access_token if session else None
