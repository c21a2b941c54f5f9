"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
"""

from datetime import datetime, timezone, timedelta

import jwt  # PyJWT
import pytest

from api.dependencies import reset_container
from modules.auth.backends import InMemoryAccountDirectory, InMemoryIdentityBackend
from modules.auth.service import IdentityGateway
from modules.rate_limiting import RateLimiter
from shared.config import Settings, get_settings
from shared.document_store import InMemoryDocumentStore
from shared.models import Identity


# Test JWT secret (only for testing)
TEST_JWT_SECRET = "test-secret-key-for-testing-only"

START = datetime(2025, 1, 6, 12, 0, tzinfo=timezone.utc)


def create_test_token(
    user_id: str = "test-user-123",
    email: str = "student@uwaterloo.ca",
    expired: bool = False,
    email_verified: bool = True,
    secret: str = TEST_JWT_SECRET,
) -> str:
    """
    Create a test JWT token for authentication.

    Args:
        user_id: User ID to include in the token
        email: Email to include in the token
        expired: If True, creates an expired token
        email_verified: Whether the email should be marked as verified
        secret: Signing secret

    Returns:
        JWT token string
    """
    now = datetime.now(timezone.utc)
    exp = now - timedelta(hours=1) if expired else now + timedelta(hours=1)

    payload = {
        "sub": user_id,
        "email": email,
        "email_confirmed_at": now.isoformat() if email_verified else None,
        "aud": "authenticated",
        "role": "authenticated",
        "exp": int(exp.timestamp()),
        "iat": int(now.timestamp()),
    }
    return jwt.encode(payload, secret, algorithm="HS256")


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def make_settings(**overrides) -> Settings:
    """Settings for in-memory backends, ignoring any local .env file."""
    values = {
        "storage_backend": "memory",
        "supabase_jwt_secret": TEST_JWT_SECRET,
        "verification_poll_interval_seconds": 0.01,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def add_verified_user(
    directory: InMemoryAccountDirectory,
    email: str = "student@uwaterloo.ca",
    password: str = "secret1",
) -> Identity:
    """Create an account that has already clicked its verification link."""
    account = directory.add(email, password)
    directory.mark_verified(email)
    return Identity(uid=account.uid, email=account.email, email_verified=True)


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset the service container and settings cache around each test."""
    reset_container()
    get_settings.cache_clear()
    yield
    reset_container()
    get_settings.cache_clear()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def directory() -> InMemoryAccountDirectory:
    return InMemoryAccountDirectory()


@pytest.fixture
def rate_limiter(clock: FakeClock) -> RateLimiter:
    return RateLimiter(clock=clock)


@pytest.fixture
def backend(directory: InMemoryAccountDirectory) -> InMemoryIdentityBackend:
    return InMemoryIdentityBackend(directory, jwt_secret=TEST_JWT_SECRET)


@pytest.fixture
def gateway(backend, rate_limiter, settings) -> IdentityGateway:
    return IdentityGateway(backend, rate_limiter, settings=settings)


@pytest.fixture
def test_user_id() -> str:
    """Provide a consistent test user ID."""
    return "test-user-123"


@pytest.fixture
def test_user_email() -> str:
    """Provide a consistent test user email."""
    return "student@uwaterloo.ca"


@pytest.fixture
def auth_token(test_user_id: str, test_user_email: str) -> str:
    """Create a valid auth token for testing."""
    return create_test_token(user_id=test_user_id, email=test_user_email)


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers with a valid token."""
    return {"Authorization": f"Bearer {auth_token}"}
