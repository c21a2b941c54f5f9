"""Tests for shared/document_store.py."""

import asyncio

import pytest

from shared.document_store import IDocumentStore, InMemoryDocumentStore, RangeFilter


class TestRangeFilter:
    def test_operators(self):
        doc = {"n": 5}
        assert RangeFilter("n", "gt", 4).matches(doc)
        assert not RangeFilter("n", "gt", 5).matches(doc)
        assert RangeFilter("n", "gte", 5).matches(doc)
        assert RangeFilter("n", "lt", 6).matches(doc)
        assert RangeFilter("n", "lte", 5).matches(doc)
        assert not RangeFilter("n", "lte", 4).matches(doc)

    def test_missing_field_never_matches(self):
        assert not RangeFilter("n", "gt", 0).matches({})


class TestInMemoryDocumentStore:
    @pytest.fixture
    def store(self):
        return InMemoryDocumentStore()

    def test_implements_interface(self, store):
        assert isinstance(store, IDocumentStore)

    @pytest.mark.asyncio
    async def test_insert_and_get(self, store):
        doc_id = await store.insert("rides", {"owner_uid": "u1"})
        doc = await store.get("rides", doc_id)
        assert doc == {"owner_uid": "u1", "id": doc_id}

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, store):
        assert await store.get("rides", "nope") is None

    @pytest.mark.asyncio
    async def test_returned_documents_are_copies(self, store):
        doc_id = await store.insert("rides", {"notes": "a"})
        doc = await store.get("rides", doc_id)
        doc["notes"] = "changed"
        assert (await store.get("rides", doc_id))["notes"] == "a"

    @pytest.mark.asyncio
    async def test_query_filters_and_sorts(self, store):
        await store.insert("rides", {"owner_uid": "u1", "t": "3"})
        await store.insert("rides", {"owner_uid": "u1", "t": "1"})
        await store.insert("rides", {"owner_uid": "u2", "t": "2"})

        rows = await store.query(
            "rides",
            equals={"owner_uid": "u1"},
            range_filter=RangeFilter("t", "gt", "0"),
            order_by="t",
        )
        assert [r["t"] for r in rows] == ["1", "3"]

    @pytest.mark.asyncio
    async def test_collections_are_separate(self, store):
        await store.insert("rides", {"x": 1})
        assert await store.query("users") == []

    @pytest.mark.asyncio
    async def test_merge_update(self, store):
        doc_id = await store.insert("rides", {"a": 1, "b": 2})
        updated = await store.merge_update("rides", doc_id, {"b": 3})
        assert updated == {"a": 1, "b": 3, "id": doc_id}

    @pytest.mark.asyncio
    async def test_merge_update_missing_returns_none(self, store):
        assert await store.merge_update("rides", "nope", {"b": 3}) is None

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self, store):
        doc_id = await store.insert("rides", {"a": 1})
        await store.delete("rides", doc_id)
        await store.delete("rides", doc_id)
        assert await store.get("rides", doc_id) is None

    @pytest.mark.asyncio
    async def test_insert_within_limit_stops_at_limit(self, store):
        for _ in range(2):
            assert await store.insert_within_limit("rides", {"o": "u1"}, {"o": "u1"}, None, 2)
        assert await store.insert_within_limit("rides", {"o": "u1"}, {"o": "u1"}, None, 2) is None
        # Other owners have their own budget.
        assert await store.insert_within_limit("rides", {"o": "u2"}, {"o": "u2"}, None, 2)

    @pytest.mark.asyncio
    async def test_insert_within_limit_respects_range_filter(self, store):
        await store.insert("rides", {"o": "u1", "t": "1"})
        active = RangeFilter("t", "gt", "5")
        assert await store.insert_within_limit("rides", {"o": "u1", "t": "9"}, {"o": "u1"}, active, 1)

    @pytest.mark.asyncio
    async def test_insert_within_limit_is_atomic_under_concurrency(self, store):
        results = await asyncio.gather(*[
            store.insert_within_limit("rides", {"o": "u1"}, {"o": "u1"}, None, 3)
            for _ in range(10)
        ])
        assert sum(1 for r in results if r is not None) == 3
        assert len(await store.query("rides")) == 3

    @pytest.mark.asyncio
    async def test_merge_update_within_limit_excludes_the_document_itself(self, store):
        doc_id = await store.insert("rides", {"o": "u1", "t": "9"})
        await store.insert("rides", {"o": "u1", "t": "9"})

        updated = await store.merge_update_within_limit("rides", doc_id, {"t": "8"}, {"o": "u1"}, None, 2)

        assert updated["t"] == "8"

    @pytest.mark.asyncio
    async def test_merge_update_within_limit_stops_at_limit(self, store):
        active = RangeFilter("t", "gt", "5")
        old_id = await store.insert("rides", {"o": "u1", "t": "1"})
        await store.insert("rides", {"o": "u1", "t": "9"})

        assert await store.merge_update_within_limit("rides", old_id, {"t": "9"}, {"o": "u1"}, active, 1) is None
        assert (await store.get("rides", old_id))["t"] == "1"

    @pytest.mark.asyncio
    async def test_merge_update_within_limit_missing_returns_none(self, store):
        assert await store.merge_update_within_limit("rides", "nope", {"t": "9"}, {"o": "u1"}, None, 3) is None

    @pytest.mark.asyncio
    async def test_conditional_writes_share_a_lock(self, store):
        active = RangeFilter("t", "gt", "5")
        old_id = await store.insert("rides", {"o": "u1", "t": "1"})

        results = await asyncio.gather(
            store.merge_update_within_limit("rides", old_id, {"t": "9"}, {"o": "u1"}, active, 1),
            store.insert_within_limit("rides", {"o": "u1", "t": "9"}, {"o": "u1"}, active, 1),
        )

        assert sum(1 for r in results if r is not None) == 1
        assert len(await store.query("rides", range_filter=active)) == 1
