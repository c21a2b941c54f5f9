"""
Document store capability.

The ride registry and profile repository only need a minimal query surface:
exact-match filters, a single range filter, ascending sort, insert, delete,
merge-update, and atomic conditional insert and merge-update used for quota
enforcement.

InMemoryDocumentStore implements the capability for tests and local
development. SupabaseDocumentStore (shared/repository.py) implements it for
production.
"""

import asyncio
import uuid
from dataclasses import dataclass
from typing import Any, Literal, Optional, Protocol, runtime_checkable

RangeOp = Literal["gt", "gte", "lt", "lte"]


@dataclass(frozen=True)
class RangeFilter:
    """A single comparison filter, e.g. departure_time > now."""

    field: str
    op: RangeOp
    value: Any

    def matches(self, document: dict[str, Any]) -> bool:
        candidate = document.get(self.field)
        if candidate is None:
            return False
        if self.op == "gt":
            return candidate > self.value
        if self.op == "gte":
            return candidate >= self.value
        if self.op == "lt":
            return candidate < self.value
        return candidate <= self.value


@runtime_checkable
class IDocumentStore(Protocol):
    """
    Interface for document persistence.

    Documents are plain dicts. Every document returned by the store carries
    its store-assigned "id".
    """

    async def insert(self, collection: str, fields: dict[str, Any]) -> str:
        """Insert a document and return its new ID."""
        ...

    async def insert_within_limit(
        self,
        collection: str,
        fields: dict[str, Any],
        equals: dict[str, Any],
        range_filter: Optional[RangeFilter],
        limit: int,
    ) -> Optional[str]:
        """
        Atomically insert a document only if fewer than `limit` documents
        match the given filters.

        Returns:
            The new document ID, or None if the limit was already reached.
        """
        ...

    async def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        """Fetch a single document by ID."""
        ...

    async def query(
        self,
        collection: str,
        equals: Optional[dict[str, Any]] = None,
        range_filter: Optional[RangeFilter] = None,
        order_by: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """Return documents matching all filters, ascending by order_by."""
        ...

    async def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document by ID."""
        ...

    async def merge_update(
        self,
        collection: str,
        doc_id: str,
        fields: dict[str, Any],
    ) -> Optional[dict[str, Any]]:
        """
        Merge fields into an existing document.

        Returns:
            The updated document, or None if it doesn't exist.
        """
        ...

    async def merge_update_within_limit(
        self,
        collection: str,
        doc_id: str,
        fields: dict[str, Any],
        equals: dict[str, Any],
        range_filter: Optional[RangeFilter],
        limit: int,
    ) -> Optional[dict[str, Any]]:
        """
        Atomically merge fields into a document only if fewer than `limit`
        other documents match the given filters.

        Shares its lock with insert_within_limit for the same filters.

        Returns:
            The updated document, or None if it doesn't exist or the limit
            was already reached.
        """
        ...


class InMemoryDocumentStore:
    """
    Document store kept in process memory.

    For testing and development. Every call yields to the event loop once
    before touching data, the way a network round trip would, so concurrent
    callers interleave realistically.
    """

    def __init__(self, latency: float = 0.0):
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._locks: dict[tuple, asyncio.Lock] = {}
        self._latency = latency

    async def _round_trip(self) -> None:
        await asyncio.sleep(self._latency)

    def _collection(self, name: str) -> dict[str, dict[str, Any]]:
        return self._collections.setdefault(name, {})

    def _matching(
        self,
        collection: str,
        equals: Optional[dict[str, Any]],
        range_filter: Optional[RangeFilter],
    ) -> list[dict[str, Any]]:
        results = []
        for document in self._collection(collection).values():
            if equals and any(document.get(k) != v for k, v in equals.items()):
                continue
            if range_filter and not range_filter.matches(document):
                continue
            results.append(dict(document))
        return results

    def _lock_for(self, collection: str, equals: dict[str, Any]) -> asyncio.Lock:
        key = (collection, tuple(sorted(equals.items())))
        return self._locks.setdefault(key, asyncio.Lock())

    def _put(self, collection: str, fields: dict[str, Any]) -> str:
        doc_id = str(uuid.uuid4())
        self._collection(collection)[doc_id] = {**fields, "id": doc_id}
        return doc_id

    async def insert(self, collection: str, fields: dict[str, Any]) -> str:
        await self._round_trip()
        return self._put(collection, fields)

    async def insert_within_limit(
        self,
        collection: str,
        fields: dict[str, Any],
        equals: dict[str, Any],
        range_filter: Optional[RangeFilter],
        limit: int,
    ) -> Optional[str]:
        async with self._lock_for(collection, equals):
            await self._round_trip()
            if len(self._matching(collection, equals, range_filter)) >= limit:
                return None
            return self._put(collection, fields)

    async def merge_update_within_limit(
        self,
        collection: str,
        doc_id: str,
        fields: dict[str, Any],
        equals: dict[str, Any],
        range_filter: Optional[RangeFilter],
        limit: int,
    ) -> Optional[dict[str, Any]]:
        async with self._lock_for(collection, equals):
            await self._round_trip()
            document = self._collection(collection).get(doc_id)
            if document is None:
                return None
            others = [d for d in self._matching(collection, equals, range_filter) if d["id"] != doc_id]
            if len(others) >= limit:
                return None
            document.update(fields)
            return dict(document)

    async def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        await self._round_trip()
        document = self._collection(collection).get(doc_id)
        return dict(document) if document is not None else None

    async def query(
        self,
        collection: str,
        equals: Optional[dict[str, Any]] = None,
        range_filter: Optional[RangeFilter] = None,
        order_by: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        await self._round_trip()
        results = self._matching(collection, equals, range_filter)
        if order_by:
            results.sort(key=lambda d: d.get(order_by))
        return results

    async def delete(self, collection: str, doc_id: str) -> None:
        await self._round_trip()
        self._collection(collection).pop(doc_id, None)

    async def merge_update(
        self,
        collection: str,
        doc_id: str,
        fields: dict[str, Any],
    ) -> Optional[dict[str, Any]]:
        await self._round_trip()
        document = self._collection(collection).get(doc_id)
        if document is None:
            return None
        document.update(fields)
        return dict(document)
