"""
Centralized configuration for the UW Go Rides backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings are namespaced by prefix (e.g., SUPABASE_*, RIDE_*).
"""

from functools import lru_cache
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GORIDES_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "UW Go Rides API"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Supabase
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_role_key: str = ""
    supabase_jwt_secret: str = ""
    supabase_db_url: str = ""

    # Which implementation backs the document store and identity backend
    storage_backend: Literal["memory", "supabase"] = "supabase"

    # Frontend URL (verification emails redirect here)
    frontend_url: str = "http://localhost:5173"

    # Identity policy
    allowed_email_domain: str = "uwaterloo.ca"
    password_min_length: int = 6
    password_require_mixed_case: bool = False
    password_require_digit: bool = False
    auth_reload_on_authorize: bool = True

    # Rate limiting (signup/login share one policy, resend has its own)
    auth_rate_limit_attempts: int = 5
    auth_rate_limit_window_seconds: int = 15 * 60
    resend_rate_limit_attempts: int = 3
    resend_rate_limit_window_seconds: int = 60 * 60

    # Verification polling
    verification_poll_interval_seconds: float = 5.0

    # Rides
    ride_quota: int = 3
    ride_min_lead_minutes: int = 60
    ride_location_min_length: int = 3
    ride_notes_max_length: int = 500
    ride_atomic_quota: bool = True
    cleanup_api_key: str = ""


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
