"""
Ride repository for document store access.

Encapsulates the queries and row mapping for the `rides` collection.

Note: This repository does NOT perform authorization checks.
The registry is responsible for verifying identity and ownership.
"""

from datetime import datetime
from typing import Any, Optional

from shared.clock import from_storage, to_storage
from shared.document_store import IDocumentStore, RangeFilter

from .models import Ride

RIDES_COLLECTION = "rides"


class RideRepository:
    """
    Repository for ride data access.

    All timestamps are written with shared.clock.to_storage so range filters
    on departure_time compare correctly in every store implementation.
    """

    def __init__(self, store: IDocumentStore):
        self._store = store

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def insert(self, fields: dict[str, Any]) -> Ride:
        """Insert a ride without any quota check."""
        row = self._to_row(fields)
        ride_id = await self._store.insert(RIDES_COLLECTION, row)
        return self._map_to_ride({**row, "id": ride_id})

    async def insert_within_quota(
        self,
        fields: dict[str, Any],
        now: datetime,
        quota: int,
    ) -> Optional[Ride]:
        """
        Insert a ride only if its owner has fewer than `quota` active rides.

        The count and the insert happen atomically in the store.

        Returns:
            The created ride, or None if the owner is at quota.
        """
        row = self._to_row(fields)
        ride_id = await self._store.insert_within_limit(
            RIDES_COLLECTION,
            row,
            equals={"owner_uid": row["owner_uid"]},
            range_filter=self._active_filter(now),
            limit=quota,
        )
        if ride_id is None:
            return None
        return self._map_to_ride({**row, "id": ride_id})

    async def merge_update(self, ride_id: str, fields: dict[str, Any]) -> Optional[Ride]:
        row = await self._store.merge_update(RIDES_COLLECTION, ride_id, self._to_row(fields))
        return self._map_to_ride(row) if row else None

    async def merge_update_within_quota(
        self,
        ride_id: str,
        owner_uid: str,
        fields: dict[str, Any],
        now: datetime,
        quota: int,
    ) -> Optional[Ride]:
        """
        Update a ride only if its owner has fewer than `quota` other active
        rides. Serializes with insert_within_quota for the same owner.

        Returns:
            The updated ride, or None if it is missing or the owner is at quota.
        """
        row = await self._store.merge_update_within_limit(
            RIDES_COLLECTION,
            ride_id,
            self._to_row(fields),
            equals={"owner_uid": owner_uid},
            range_filter=self._active_filter(now),
            limit=quota,
        )
        return self._map_to_ride(row) if row else None

    async def delete(self, ride_id: str) -> None:
        await self._store.delete(RIDES_COLLECTION, ride_id)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get(self, ride_id: str) -> Optional[Ride]:
        row = await self._store.get(RIDES_COLLECTION, ride_id)
        return self._map_to_ride(row) if row else None

    async def list_active(self, now: datetime, owner_uid: Optional[str] = None) -> list[Ride]:
        """Rides departing after `now`, soonest first."""
        rows = await self._store.query(
            RIDES_COLLECTION,
            equals={"owner_uid": owner_uid} if owner_uid else None,
            range_filter=self._active_filter(now),
            order_by="departure_time",
        )
        return [self._map_to_ride(row) for row in rows]

    async def list_expired(self, now: datetime) -> list[Ride]:
        """Rides whose departure time is at or before `now`."""
        rows = await self._store.query(
            RIDES_COLLECTION,
            range_filter=RangeFilter("departure_time", "lte", to_storage(now)),
            order_by="departure_time",
        )
        return [self._map_to_ride(row) for row in rows]

    # -------------------------------------------------------------------------
    # Private mapping methods
    # -------------------------------------------------------------------------

    @staticmethod
    def _active_filter(now: datetime) -> RangeFilter:
        return RangeFilter("departure_time", "gt", to_storage(now))

    @staticmethod
    def _to_row(fields: dict[str, Any]) -> dict[str, Any]:
        return {
            key: to_storage(value) if isinstance(value, datetime) else value
            for key, value in fields.items()
        }

    @staticmethod
    def _map_to_ride(data: dict[str, Any]) -> Ride:
        """Map a stored document to a Ride model."""
        return Ride(
            id=str(data["id"]),
            owner_uid=data["owner_uid"],
            owner_email=data["owner_email"],
            departure_time=from_storage(data["departure_time"]),
            start_location=data["start_location"],
            destination=data["destination"],
            notes=data.get("notes") or "",
            created_at=from_storage(data["created_at"]),
            updated_at=from_storage(data["updated_at"]),
        )
