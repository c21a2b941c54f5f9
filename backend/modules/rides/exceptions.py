"""
Rides module exceptions.
"""

from datetime import datetime

from shared.exceptions import (
    AuthorizationError,
    ErrorKind,
    GoRidesError,
    NotFoundError,
    ValidationError,
)


class RideNotFoundError(NotFoundError):
    """Raised when a ride is not found."""

    def __init__(self, ride_id: str):
        super().__init__(
            f"Ride not found: {ride_id}",
            code="RIDE_NOT_FOUND",
            details={"ride_id": ride_id},
        )


class RideAccessDeniedError(AuthorizationError):
    """Raised when a user tries to modify a ride they don't own."""

    def __init__(self, ride_id: str, user_id: str):
        super().__init__(
            f"Access denied to ride: {ride_id}",
            code="RIDE_ACCESS_DENIED",
            details={"ride_id": ride_id, "user_id": user_id},
        )


class QuotaExceededError(GoRidesError):
    """Raised when a user already has the maximum number of active rides."""

    kind = ErrorKind.QUOTA_EXCEEDED

    def __init__(self, user_id: str, quota: int):
        super().__init__(
            f"Maximum of {quota} active rides allowed",
            code="QUOTA_EXCEEDED",
            details={"user_id": user_id, "quota": quota},
        )


class InvalidDepartureError(ValidationError):
    """Raised when a departure time is not far enough in the future."""

    kind = ErrorKind.INVALID_DEPARTURE

    def __init__(self, departure_time: datetime, earliest: datetime):
        super().__init__(
            "Departure time must be more than an hour from now",
            code="INVALID_DEPARTURE",
            details={
                "departure_time": departure_time.isoformat(),
                "earliest": earliest.isoformat(),
            },
        )


class InvalidRideFieldError(ValidationError):
    """Raised when a ride field fails its validation rule."""

    def __init__(self, field: str, message: str):
        super().__init__(
            message,
            code="INVALID_FIELD",
            details={"field": field},
        )
