"""
Rate limiting data models.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from pydantic import BaseModel, Field


@dataclass
class RateLimitRecord:
    """Attempts observed for one key inside the current window."""

    count: int
    window_start: datetime
    window: timedelta

    def expired(self, now: datetime) -> bool:
        return now - self.window_start > self.window


class RateLimitPolicy(BaseModel):
    """A named attempt budget, e.g. 5 login attempts per 15 minutes."""

    key_prefix: str = Field(..., description="Prefix joined to the subject to form the key")
    max_attempts: int = Field(..., ge=1, description="Attempts allowed per window")
    window: timedelta = Field(..., description="Window length")

    model_config = {"frozen": True}

    def key_for(self, subject: str) -> str:
        """Build the limiter key for a subject (usually an email)."""
        return f"{self.key_prefix}_{subject}"
