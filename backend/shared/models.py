"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from pydantic import BaseModel, Field, field_validator


def normalize_email(email: str | None) -> str:
    """Trim and lowercase an email address."""
    return (email or "").strip().lower()


class Identity(BaseModel):
    """
    An authenticated principal.

    Produced by the identity backend (or decoded from a Supabase JWT) and
    passed to every operation that needs to know who is acting. The
    verification flag is a snapshot; call the backend's reload to refresh it.
    """

    uid: str = Field(..., description="Stable user ID assigned by the auth backend")
    email: str = Field(..., description="Lowercase-normalized email address")
    email_verified: bool = Field(default=False, description="Whether email is verified")

    model_config = {
        "frozen": True,  # Make immutable for safety
        "extra": "ignore",  # Ignore extra fields from JWT
    }

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value: str | None) -> str:
        return normalize_email(value)
