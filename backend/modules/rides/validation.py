"""
Field rules shared by ride creation and update.
"""

from datetime import datetime, timedelta
from typing import Optional

from shared.clock import to_utc
from shared.config import Settings

from .exceptions import InvalidDepartureError, InvalidRideFieldError


class RideRules:
    """Validates and normalizes ride fields according to settings."""

    def __init__(self, settings: Settings):
        self.min_lead = timedelta(minutes=settings.ride_min_lead_minutes)
        self.location_min_length = settings.ride_location_min_length
        self.notes_max_length = settings.ride_notes_max_length

    def departure(self, value: Optional[datetime], now: datetime) -> datetime:
        """Departure must be strictly later than now + the minimum lead time."""
        if value is None:
            raise InvalidRideFieldError("departure_time", "Departure time is required")
        value = to_utc(value)
        earliest = now + self.min_lead
        if value <= earliest:
            raise InvalidDepartureError(value, earliest)
        return value

    def location(self, field: str, value: Optional[str]) -> str:
        cleaned = (value or "").strip()
        if len(cleaned) < self.location_min_length:
            label = field.replace("_", " ").capitalize()
            raise InvalidRideFieldError(
                field,
                f"{label} must be at least {self.location_min_length} characters",
            )
        return cleaned

    def notes(self, value: Optional[str]) -> str:
        cleaned = (value or "").strip()
        if len(cleaned) > self.notes_max_length:
            raise InvalidRideFieldError(
                "notes",
                f"Notes must be at most {self.notes_max_length} characters",
            )
        return cleaned
