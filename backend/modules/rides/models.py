"""
Rides module data models.
"""

from datetime import datetime
from typing import Optional
from urllib.parse import quote

from pydantic import BaseModel, Field, computed_field

CONTACT_SUBJECT = "UW Go Ride Inquiry"


class Ride(BaseModel):
    """A posted ride offer."""

    id: str = Field(..., description="Ride ID assigned by the store")
    owner_uid: str = Field(..., description="User ID of the poster")
    owner_email: str = Field(..., description="Email of the poster")
    departure_time: datetime = Field(..., description="When the ride leaves (UTC)")
    start_location: str = Field(..., description="Where the ride starts")
    destination: str = Field(..., description="Where the ride goes")
    notes: str = Field(default="", description="Free-form notes from the poster")
    created_at: datetime = Field(..., description="When the ride was posted")
    updated_at: datetime = Field(..., description="Last modification time")

    @computed_field
    @property
    def contact_url(self) -> str:
        """mailto: link for contacting the poster."""
        return f"mailto:{self.owner_email}?subject={quote(CONTACT_SUBJECT)}"

    def is_active(self, now: datetime) -> bool:
        return self.departure_time > now


class CreateRideRequest(BaseModel):
    """Request to post a ride. Field rules are enforced by the registry."""

    departure_time: datetime = Field(..., description="When the ride leaves")
    start_location: str = Field(..., description="Where the ride starts")
    destination: str = Field(..., description="Where the ride goes")
    notes: Optional[str] = Field(None, description="Optional notes")


class UpdateRideRequest(BaseModel):
    """
    Partial update of a ride.

    Only fields that are explicitly set are changed.
    """

    departure_time: Optional[datetime] = None
    start_location: Optional[str] = None
    destination: Optional[str] = None
    notes: Optional[str] = None


class CleanupResult(BaseModel):
    """Outcome of an expiry cleanup pass."""

    removed: int = Field(default=0, description="Rides deleted")
    failed_ids: list[str] = Field(default_factory=list, description="Rides that could not be deleted")
