"""
Ride registry implementation.

Owns the ride lifecycle: creation under the per-owner active-ride quota,
time-windowed listing, owner-only update and delete, and expiry cleanup.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from shared.clock import Clock, utc_now
from shared.config import Settings, get_settings
from shared.exceptions import GoRidesError
from shared.models import Identity
from modules.auth.interfaces import IIdentityGateway

from .exceptions import QuotaExceededError, RideAccessDeniedError, RideNotFoundError
from .interfaces import IRideRegistry
from .models import CleanupResult, CreateRideRequest, Ride, UpdateRideRequest
from .repository import RideRepository
from .validation import RideRules

logger = logging.getLogger(__name__)


class RideRegistry(IRideRegistry):
    """
    Ride service backed by a document store.

    With `ride_atomic_quota` enabled (the default) the quota count and the
    write are a single conditional write in the store, both for creates and
    for updates that move a departed ride back into the future. Disabling it
    falls back to reading the owner's active rides and then writing, which
    lets concurrent creates from one owner overshoot the quota.
    """

    def __init__(
        self,
        repository: RideRepository,
        auth: IIdentityGateway,
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None,
    ):
        self._repo = repository
        self._auth = auth
        self._settings = settings or get_settings()
        self._clock = clock or utc_now
        self._rules = RideRules(self._settings)
        self._quota = self._settings.ride_quota

    async def _load_owned(self, caller: Identity, ride_id: str) -> Ride:
        ride = await self._repo.get(ride_id)
        if ride is None:
            raise RideNotFoundError(ride_id)
        if ride.owner_uid != caller.uid:
            raise RideAccessDeniedError(ride_id, caller.uid)
        return ride

    async def create(self, identity: Optional[Identity], request: CreateRideRequest) -> Ride:
        caller = await self._auth.require_active(identity)
        now = self._clock()

        fields = {
            "owner_uid": caller.uid,
            "owner_email": caller.email,
            "departure_time": self._rules.departure(request.departure_time, now),
            "start_location": self._rules.location("start_location", request.start_location),
            "destination": self._rules.location("destination", request.destination),
            "notes": self._rules.notes(request.notes),
            "created_at": now,
            "updated_at": now,
        }

        if self._settings.ride_atomic_quota:
            ride = await self._repo.insert_within_quota(fields, now, self._quota)
            if ride is None:
                raise QuotaExceededError(caller.uid, self._quota)
        else:
            active = await self._repo.list_active(now, owner_uid=caller.uid)
            if len(active) >= self._quota:
                raise QuotaExceededError(caller.uid, self._quota)
            ride = await self._repo.insert(fields)

        logger.info("User %s posted ride %s", caller.uid, ride.id)
        return ride

    async def list_active(
        self,
        identity: Optional[Identity],
        owner_uid: Optional[str] = None,
    ) -> list[Ride]:
        await self._auth.require_active(identity)
        return await self._repo.list_active(self._clock(), owner_uid=owner_uid)

    async def update(
        self,
        identity: Optional[Identity],
        ride_id: str,
        request: UpdateRideRequest,
    ) -> Ride:
        caller = await self._auth.require_active(identity)
        ride = await self._load_owned(caller, ride_id)
        now = self._clock()

        changes: dict[str, Any] = {}
        provided = request.model_dump(exclude_unset=True)
        if "departure_time" in provided:
            changes["departure_time"] = self._rules.departure(request.departure_time, now)
        for field in ("start_location", "destination"):
            if field in provided:
                changes[field] = self._rules.location(field, provided[field])
        if "notes" in provided:
            changes["notes"] = self._rules.notes(request.notes)

        # updated_at must move forward even if the clock hasn't.
        if now > ride.updated_at:
            changes["updated_at"] = now
        else:
            changes["updated_at"] = ride.updated_at + timedelta(microseconds=1)

        if "departure_time" in changes and not ride.is_active(now):
            updated = await self._reactivate(caller, ride_id, changes, now)
        else:
            updated = await self._repo.merge_update(ride_id, changes)
        if updated is None:
            raise RideNotFoundError(ride_id)
        logger.info("User %s updated ride %s (%s)", caller.uid, ride_id, ", ".join(sorted(changes)))
        return updated

    async def _reactivate(
        self,
        caller: Identity,
        ride_id: str,
        changes: dict[str, Any],
        now: datetime,
    ) -> Optional[Ride]:
        """Move a departed ride into the future, counting it against the quota."""
        if self._settings.ride_atomic_quota:
            updated = await self._repo.merge_update_within_quota(
                ride_id, caller.uid, changes, now, self._quota
            )
            if updated is None and await self._repo.get(ride_id) is not None:
                raise QuotaExceededError(caller.uid, self._quota)
            return updated

        active = await self._repo.list_active(now, owner_uid=caller.uid)
        if len(active) >= self._quota:
            raise QuotaExceededError(caller.uid, self._quota)
        return await self._repo.merge_update(ride_id, changes)

    async def delete(self, identity: Optional[Identity], ride_id: str) -> None:
        caller = await self._auth.require_active(identity)
        await self._load_owned(caller, ride_id)
        await self._repo.delete(ride_id)
        logger.info("User %s deleted ride %s", caller.uid, ride_id)

    async def cleanup_expired(self) -> CleanupResult:
        expired = await self._repo.list_expired(self._clock())
        result = CleanupResult()

        for ride in expired:
            try:
                await self._repo.delete(ride.id)
            except GoRidesError as e:
                logger.warning("Failed to delete expired ride %s: %s", ride.id, e.message)
                result.failed_ids.append(ride.id)
            else:
                result.removed += 1

        if expired:
            logger.info(
                "Expired ride cleanup removed %d, failed %d",
                result.removed,
                len(result.failed_ids),
            )
        return result
