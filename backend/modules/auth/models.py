"""
Authentication module data models.

These models define the data structures used by the auth module
and exposed to other modules through the interface.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from shared.models import Identity


class SessionState(str, Enum):
    """Lifecycle of one sign-in session."""

    SIGNED_OUT = "signed_out"
    PENDING_VERIFICATION = "pending_verification"  # Account exists, email not verified
    ACTIVE = "active"                              # Verified campus identity signed in


class SessionPersistence(str, Enum):
    """How long the backend keeps a session."""

    DURABLE = "durable"  # Survives process restarts ("remember me")
    SESSION = "session"  # Dropped when the process ends


class JWTPayload(BaseModel):
    """
    Decoded JWT token payload from Supabase.

    This matches the structure of Supabase Auth JWTs.
    """

    sub: str = Field(..., description="Subject (user ID)")
    email: Optional[str] = Field(None, description="User's email")
    email_confirmed_at: Optional[str] = Field(None, description="When the email was confirmed")
    exp: int = Field(..., description="Expiration timestamp")
    iat: int = Field(..., description="Issued at timestamp")
    aud: str = Field(default="authenticated", description="Audience")
    role: str = Field(default="authenticated", description="User role")

    def to_identity(self) -> Identity:
        return Identity(
            uid=self.sub,
            email=self.email or "",
            email_verified=self.email_confirmed_at is not None,
        )


class UserProfile(BaseModel):
    """Profile document kept in the `users` collection."""

    uid: str = Field(..., description="User ID")
    email: str = Field(..., description="Email address")
    created_at: datetime = Field(..., description="Profile creation time")


class SignupRequest(BaseModel):
    """Request to create an account."""

    email: str = Field(..., description="Campus email address")
    password: str = Field(..., description="Account password")


class LoginRequest(BaseModel):
    """Request to sign in."""

    email: str = Field(default="", description="Campus email address")
    password: str = Field(default="", description="Account password")
    remember_me: bool = Field(default=False, description="Keep the session across restarts")


class EmailRequest(BaseModel):
    """Request naming an account by email (resend / verification status)."""

    email: str = Field(..., description="Account email address")


class VerificationStatusRequest(EmailRequest):
    """Account to check, as returned by signup."""

    uid: Optional[str] = Field(None, description="User ID returned by signup")


class SignupResponse(BaseModel):
    """Result of a successful signup."""

    uid: str
    email: str
    state: SessionState


class LoginResponse(BaseModel):
    """Result of a successful login."""

    identity: Identity
    state: SessionState
    access_token: Optional[str] = Field(None, description="Bearer token for ride endpoints")


class VerificationStatus(BaseModel):
    """Result of a verification check."""

    email: str
    email_verified: bool
    state: SessionState
