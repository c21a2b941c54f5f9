"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations.

`storage_backend = "memory"` wires in-memory implementations (local
development, tests); `"supabase"` wires Supabase Auth and tables.
"""

from typing import TYPE_CHECKING

from shared.config import Settings, get_settings

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from shared.document_store import IDocumentStore
    from modules.auth.backends import InMemoryAccountDirectory
    from modules.auth.interfaces import IIdentityBackend
    from modules.auth.profiles import ProfileRepository
    from modules.auth.service import IdentityGateway
    from modules.rate_limiting import IRateLimiter
    from modules.rides.interfaces import IRideRegistry


class ServiceContainer:
    """
    Container for all service instances.

    Services are created lazily on first access and cached as singletons
    within the container, except identity gateways: each sign-in flow gets
    its own gateway (and backend session) while sharing the rate limiter.

    Use reset() to clear all cached services for testing.
    """

    def __init__(self, settings: "Settings | None" = None) -> None:
        self._settings = settings
        self._rate_limiter: "IRateLimiter | None" = None
        self._document_store: "IDocumentStore | None" = None
        self._account_directory: "InMemoryAccountDirectory | None" = None
        self._profiles: "ProfileRepository | None" = None
        self._authorizer: "IdentityGateway | None" = None
        self._ride_registry: "IRideRegistry | None" = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def uses_memory(self) -> bool:
        return self.settings.storage_backend == "memory"

    @property
    def rate_limiter(self) -> "IRateLimiter":
        """Get the process-wide rate limiter."""
        if self._rate_limiter is None:
            from modules.rate_limiting import RateLimiter
            self._rate_limiter = RateLimiter()
        return self._rate_limiter

    @property
    def document_store(self) -> "IDocumentStore":
        """Get the document store instance."""
        if self._document_store is None:
            if self.uses_memory:
                from shared.document_store import InMemoryDocumentStore
                self._document_store = InMemoryDocumentStore()
            else:
                from shared.database import get_supabase_client
                from shared.repository import SupabaseDocumentStore
                self._document_store = SupabaseDocumentStore(get_supabase_client())
        return self._document_store

    @property
    def account_directory(self) -> "InMemoryAccountDirectory":
        """Accounts for the in-memory identity backend."""
        if self._account_directory is None:
            from modules.auth.backends import InMemoryAccountDirectory
            self._account_directory = InMemoryAccountDirectory()
        return self._account_directory

    @property
    def profiles(self) -> "ProfileRepository":
        if self._profiles is None:
            from modules.auth.profiles import ProfileRepository
            self._profiles = ProfileRepository(self.document_store)
        return self._profiles

    def new_identity_backend(self) -> "IIdentityBackend":
        """Create a backend for one sign-in session."""
        if self.uses_memory:
            from modules.auth.backends import InMemoryIdentityBackend
            return InMemoryIdentityBackend(
                self.account_directory,
                jwt_secret=self.settings.supabase_jwt_secret,
            )

        from modules.auth.backends import SupabaseIdentityBackend
        from shared.database import create_supabase_auth_client, get_supabase_client
        return SupabaseIdentityBackend(
            client_factory=create_supabase_auth_client,
            admin_client=get_supabase_client(),
            email_redirect_to=self.settings.frontend_url,
        )

    def new_identity_gateway(self) -> "IdentityGateway":
        """Create a gateway for one sign-in flow."""
        from modules.auth.service import IdentityGateway
        return IdentityGateway(
            self.new_identity_backend(),
            self.rate_limiter,
            settings=self.settings,
            profiles=self.profiles,
        )

    @property
    def authorizer(self) -> "IdentityGateway":
        """Session-less gateway used to authorize bearer-token identities."""
        if self._authorizer is None:
            self._authorizer = self.new_identity_gateway()
        return self._authorizer

    @property
    def rides(self) -> "IRideRegistry":
        """Get the ride registry instance."""
        if self._ride_registry is None:
            from modules.rides.repository import RideRepository
            from modules.rides.service import RideRegistry
            self._ride_registry = RideRegistry(
                RideRepository(self.document_store),
                auth=self.authorizer,
                settings=self.settings,
            )
        return self._ride_registry

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different mock dependencies.
        """
        self._rate_limiter = None
        self._document_store = None
        self._account_directory = None
        self._profiles = None
        self._authorizer = None
        self._ride_registry = None


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """
    Reset the service container.

    This clears the cached container, so the next call to get_container()
    will create a fresh container with new service instances.

    Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_identity_gateway() -> "IdentityGateway":
    """FastAPI dependency: a fresh identity gateway for this request."""
    return get_container().new_identity_gateway()


def get_ride_registry() -> "IRideRegistry":
    """FastAPI dependency for the ride registry."""
    return get_container().rides
