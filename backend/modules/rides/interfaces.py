"""
Rides module interface.

Routes and other modules should depend on IRideRegistry, not the concrete
implementation.
"""

from typing import Protocol, Optional, runtime_checkable

from shared.models import Identity

from .models import CleanupResult, CreateRideRequest, Ride, UpdateRideRequest


@runtime_checkable
class IRideRegistry(Protocol):
    """
    Interface for ride operations.

    Every operation except cleanup_expired first authorizes the caller:
    signed in, email verified, campus domain.
    """

    async def create(self, identity: Optional[Identity], request: CreateRideRequest) -> Ride:
        """
        Post a new ride owned by the caller.

        Raises:
            NotAuthenticatedError, UnverifiedEmailError, InvalidDomainError,
            InvalidDepartureError, InvalidRideFieldError, QuotaExceededError
        """
        ...

    async def list_active(
        self,
        identity: Optional[Identity],
        owner_uid: Optional[str] = None,
    ) -> list[Ride]:
        """
        List rides that haven't departed yet, soonest first.

        Args:
            identity: The caller
            owner_uid: Only list this owner's rides
        """
        ...

    async def update(
        self,
        identity: Optional[Identity],
        ride_id: str,
        request: UpdateRideRequest,
    ) -> Ride:
        """
        Change some fields of a ride the caller owns.

        Raises:
            RideNotFoundError, RideAccessDeniedError, InvalidDepartureError,
            InvalidRideFieldError (plus the authorization errors)
        """
        ...

    async def delete(self, identity: Optional[Identity], ride_id: str) -> None:
        """
        Delete a ride the caller owns.

        Raises:
            RideNotFoundError, RideAccessDeniedError (plus the authorization errors)
        """
        ...

    async def cleanup_expired(self) -> CleanupResult:
        """Delete every ride that has departed. Not gated by identity."""
        ...
