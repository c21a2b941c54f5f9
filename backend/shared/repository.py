"""
Base repository class for database access.

Provides a common abstraction layer for all repositories, encapsulating
Supabase client access, plus the Supabase implementation of the document
store capability.
"""

import logging
from typing import Any, Optional, TypeVar, Generic

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from .document_store import RangeFilter
from .exceptions import BackendUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base class for all repositories.

    Provides common functionality for database operations:
    - Supabase client access via self._db
    - Generic type parameter for model type hints

    Subclasses should implement domain-specific data access methods
    and handle dict-to-Pydantic model mapping internally.
    """

    def __init__(self, db: Client) -> None:
        """
        Initialize the repository with a Supabase client.

        Args:
            db: Supabase client instance for database operations.
        """
        self._db = db


class SupabaseDocumentStore(BaseRepository[dict]):
    """
    Document store backed by Supabase tables (one table per collection).

    Uses the service-role client, so Row Level Security is bypassed and the
    service layer is responsible for authorization.

    Atomic conditional writes go through the `insert_within_limit` and
    `merge_update_within_limit` Postgres functions (see migrations/), which
    take the same transaction-scoped advisory lock on the filter before
    counting and writing.
    """

    def _execute(self, operation: str, builder: Any) -> Any:
        """Run a query builder, translating transport failures."""
        try:
            return builder.execute()
        except (APIError, httpx.HTTPError) as e:
            logger.warning("Supabase %s failed: %s", operation, e)
            raise BackendUnavailableError("document store", str(e)) from e

    @staticmethod
    def _apply_range(builder: Any, range_filter: Optional[RangeFilter]) -> Any:
        if range_filter is None:
            return builder
        return getattr(builder, range_filter.op)(range_filter.field, range_filter.value)

    async def insert(self, collection: str, fields: dict[str, Any]) -> str:
        result = self._execute("insert", self._db.table(collection).insert(fields))
        return str(result.data[0]["id"])

    async def insert_within_limit(
        self,
        collection: str,
        fields: dict[str, Any],
        equals: dict[str, Any],
        range_filter: Optional[RangeFilter],
        limit: int,
    ) -> Optional[str]:
        params = {
            "p_collection": collection,
            "p_fields": fields,
            "p_equals": equals,
            "p_range_field": range_filter.field if range_filter else None,
            "p_range_op": range_filter.op if range_filter else None,
            "p_range_value": range_filter.value if range_filter else None,
            "p_limit": limit,
        }
        result = self._execute("insert_within_limit", self._db.rpc("insert_within_limit", params))
        if not result.data:
            return None
        return str(result.data)

    async def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        result = self._execute(
            "get",
            self._db.table(collection).select("*").eq("id", doc_id),
        )
        return result.data[0] if result.data else None

    async def query(
        self,
        collection: str,
        equals: Optional[dict[str, Any]] = None,
        range_filter: Optional[RangeFilter] = None,
        order_by: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        builder = self._db.table(collection).select("*")
        for field, value in (equals or {}).items():
            builder = builder.eq(field, value)
        builder = self._apply_range(builder, range_filter)
        if order_by:
            builder = builder.order(order_by, desc=False)
        return list(self._execute("query", builder).data)

    async def delete(self, collection: str, doc_id: str) -> None:
        self._execute("delete", self._db.table(collection).delete().eq("id", doc_id))

    async def merge_update(
        self,
        collection: str,
        doc_id: str,
        fields: dict[str, Any],
    ) -> Optional[dict[str, Any]]:
        result = self._execute(
            "merge_update",
            self._db.table(collection).update(fields).eq("id", doc_id),
        )
        return result.data[0] if result.data else None

    async def merge_update_within_limit(
        self,
        collection: str,
        doc_id: str,
        fields: dict[str, Any],
        equals: dict[str, Any],
        range_filter: Optional[RangeFilter],
        limit: int,
    ) -> Optional[dict[str, Any]]:
        params = {
            "p_collection": collection,
            "p_id": doc_id,
            "p_fields": fields,
            "p_equals": equals,
            "p_range_field": range_filter.field if range_filter else None,
            "p_range_op": range_filter.op if range_filter else None,
            "p_range_value": range_filter.value if range_filter else None,
            "p_limit": limit,
        }
        result = self._execute(
            "merge_update_within_limit",
            self._db.rpc("merge_update_within_limit", params),
        )
        return result.data or None
