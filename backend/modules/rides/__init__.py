"""
Rides module.

Handles posting, listing, editing and deleting ride offers, the per-owner
active-ride quota, and removal of rides that have departed.

Public API:
- IRideRegistry: Interface for ride operations
- RideRegistry: Document-store backed implementation
- Ride: A posted ride
- CreateRideRequest / UpdateRideRequest: Requests
"""

from .interfaces import IRideRegistry
from .models import CleanupResult, CreateRideRequest, Ride, UpdateRideRequest
from .repository import RideRepository
from .service import RideRegistry
from .validation import RideRules
from .exceptions import (
    RideNotFoundError,
    RideAccessDeniedError,
    QuotaExceededError,
    InvalidDepartureError,
    InvalidRideFieldError,
)

__all__ = [
    # Interface
    "IRideRegistry",
    # Implementation
    "RideRegistry",
    "RideRepository",
    "RideRules",
    # Models
    "Ride",
    "CreateRideRequest",
    "UpdateRideRequest",
    "CleanupResult",
    # Exceptions
    "RideNotFoundError",
    "RideAccessDeniedError",
    "QuotaExceededError",
    "InvalidDepartureError",
    "InvalidRideFieldError",
]
