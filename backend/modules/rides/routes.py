"""
Ride API endpoints.

All endpoints except cleanup require a bearer token; the registry then
re-checks verification and domain through the identity gateway.
"""

import hmac
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query

from api.dependencies import get_container, get_ride_registry
from api.middleware.auth import get_current_identity
from api.models.errors import ErrorResponse
from shared.exceptions import AuthorizationError
from shared.models import Identity

from .interfaces import IRideRegistry
from .models import CleanupResult, CreateRideRequest, Ride, UpdateRideRequest

router = APIRouter()


@router.get("", response_model=list[Ride])
async def list_rides(
    mine: bool = Query(default=False, description="Only list the caller's rides"),
    identity: Identity = Depends(get_current_identity),
    registry: IRideRegistry = Depends(get_ride_registry),
) -> list[Ride]:
    """
    List rides that haven't departed yet, soonest first.
    """
    return await registry.list_active(identity, owner_uid=identity.uid if mine else None)


@router.post(
    "",
    response_model=Ride,
    status_code=201,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def create_ride(
    request: CreateRideRequest,
    identity: Identity = Depends(get_current_identity),
    registry: IRideRegistry = Depends(get_ride_registry),
) -> Ride:
    """
    Post a ride.

    Each user may have a limited number of rides that haven't departed yet.
    """
    return await registry.create(identity, request)


@router.patch(
    "/{ride_id}",
    response_model=Ride,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_ride(
    ride_id: str,
    request: UpdateRideRequest,
    identity: Identity = Depends(get_current_identity),
    registry: IRideRegistry = Depends(get_ride_registry),
) -> Ride:
    """Change fields of one of the caller's rides."""
    return await registry.update(identity, ride_id, request)


@router.delete(
    "/{ride_id}",
    status_code=204,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_ride(
    ride_id: str,
    identity: Identity = Depends(get_current_identity),
    registry: IRideRegistry = Depends(get_ride_registry),
) -> None:
    """Delete one of the caller's rides."""
    await registry.delete(identity, ride_id)


@router.post("/cleanup", response_model=CleanupResult, responses={403: {"model": ErrorResponse}})
async def cleanup_expired_rides(
    x_cleanup_key: Optional[str] = Header(default=None),
    registry: IRideRegistry = Depends(get_ride_registry),
) -> CleanupResult:
    """
    Delete rides that have departed.

    Meant for a scheduler. Disabled unless a cleanup key is configured.
    """
    expected = get_container().settings.cleanup_api_key
    if not expected or not x_cleanup_key or not hmac.compare_digest(x_cleanup_key, expected):
        raise AuthorizationError("Invalid cleanup key")
    return await registry.cleanup_expired()
