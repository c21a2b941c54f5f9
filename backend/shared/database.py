"""
Database client factory for Supabase.

Provides the service-role client (for backend operations bypassing RLS)
and fresh anon-key clients for per-session authentication flows.
"""

from typing import Optional
from supabase import create_client, Client, ClientOptions

from .config import get_settings

# Module-level client cache
_service_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """
    Get Supabase client with service role (bypasses RLS).

    Use this for the document store and for admin lookups such as reloading
    a signed-out user's verification state.

    Returns:
        Supabase client configured with service role key
    """
    global _service_client

    if _service_client is None:
        settings = get_settings()
        if not settings.supabase_url or not settings.supabase_service_role_key:
            raise RuntimeError(
                "Supabase configuration missing. "
                "Set GORIDES_SUPABASE_URL and GORIDES_SUPABASE_SERVICE_ROLE_KEY environment variables."
            )
        _service_client = create_client(
            settings.supabase_url,
            settings.supabase_service_role_key,
        )

    return _service_client


def create_supabase_auth_client(persist_session: bool = True) -> Client:
    """
    Create a Supabase client for one user's sign-in session.

    Each session gets its own client so that signing one user in or out
    never affects another. The anon key is used, so Supabase Auth applies
    its normal email/password rules.

    Args:
        persist_session: Whether the auth client keeps and refreshes the
            session in its storage ("remember me") or drops it when the
            process ends.

    Returns:
        A new Supabase client
    """
    settings = get_settings()
    if not settings.supabase_url or not settings.supabase_anon_key:
        raise RuntimeError(
            "Supabase configuration missing. "
            "Set GORIDES_SUPABASE_URL and GORIDES_SUPABASE_ANON_KEY environment variables."
        )

    return create_client(
        settings.supabase_url,
        settings.supabase_anon_key,
        options=ClientOptions(
            persist_session=persist_session,
            auto_refresh_token=persist_session,
        ),
    )


def reset_client_cache() -> None:
    """
    Reset the cached database client.

    Useful for testing or when configuration changes.
    """
    global _service_client
    _service_client = None
