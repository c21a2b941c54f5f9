"""
Shared infrastructure for the UW Go Rides backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client factory
- document_store / repository: Document store capability and implementations
- clock: Injectable time source
- exceptions: Base exception classes and the error taxonomy

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .clock import Clock, utc_now
from .database import get_supabase_client, create_supabase_auth_client, reset_client_cache
from .document_store import IDocumentStore, InMemoryDocumentStore, RangeFilter
from .exceptions import (
    ErrorKind,
    GoRidesError,
    NotFoundError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    RateLimitedError,
    ExternalServiceError,
    BackendUnavailableError,
)
from .models import Identity, normalize_email

__all__ = [
    "Settings",
    "get_settings",
    "Clock",
    "utc_now",
    "get_supabase_client",
    "create_supabase_auth_client",
    "reset_client_cache",
    "IDocumentStore",
    "InMemoryDocumentStore",
    "RangeFilter",
    "ErrorKind",
    "GoRidesError",
    "NotFoundError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "RateLimitedError",
    "ExternalServiceError",
    "BackendUnavailableError",
    "Identity",
    "normalize_email",
]
