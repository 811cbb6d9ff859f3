"""Tests for the in-memory document store."""

import asyncio

import pytest

from emerald_details.errors import NotFoundError, StoreError
from emerald_details.store.document_store import FieldFilter, get_path, set_path


async def _next(subscription):
    return await asyncio.wait_for(subscription.__anext__(), timeout=1)


class TestPaths:
    def test_get_nested(self):
        assert get_path({"a": {"b": 1}}, "a.b") == 1

    def test_get_missing_returns_default(self):
        assert get_path({"a": {}}, "a.b", None) is None

    def test_set_creates_intermediate_maps(self):
        doc = {}
        set_path(doc, "unread_counts.user-1", 3)
        assert doc == {"unread_counts": {"user-1": 3}}


class TestFieldFilter:
    @pytest.mark.parametrize("op,value,expected", [
        ("==", 5, True),
        ("!=", 5, False),
        ("<", 6, True),
        ("<=", 5, True),
        (">", 5, False),
        (">=", 5, True),
        ("in", [1, 5], True),
    ])
    def test_operators(self, op, value, expected):
        assert FieldFilter("n", op, value).matches({"n": 5}) is expected

    def test_array_contains(self):
        doc = {"ids": ["a", "b"]}
        assert FieldFilter("ids", "array_contains", "a").matches(doc)
        assert not FieldFilter("ids", "array_contains", "c").matches(doc)

    def test_missing_field_never_matches(self):
        assert not FieldFilter("n", "!=", 1).matches({})

    def test_incomparable_types_do_not_match(self):
        assert not FieldFilter("n", "<", 3).matches({"n": None})

    def test_unknown_operator_rejected(self):
        with pytest.raises(ValueError, match="Unsupported filter operator"):
            FieldFilter("n", "like", 1)


class TestReadWrite:
    @pytest.mark.asyncio
    async def test_set_then_get(self, store):
        await store.set("things", "1", {"name": "a"})
        assert await store.get("things", "1") == {"name": "a"}

    @pytest.mark.asyncio
    async def test_get_returns_copy(self, store):
        await store.set("things", "1", {"tags": ["a"]})
        doc = await store.get("things", "1")
        doc["tags"].append("b")
        assert (await store.get("things", "1"))["tags"] == ["a"]

    @pytest.mark.asyncio
    async def test_get_missing(self, store):
        assert await store.get("things", "nope") is None

    @pytest.mark.asyncio
    async def test_set_requires_id(self, store):
        with pytest.raises(StoreError):
            await store.set("things", "", {"name": "a"})

    @pytest.mark.asyncio
    async def test_merge_keeps_other_fields(self, store):
        await store.set("things", "1", {"name": "a", "meta": {"x": 1}})
        await store.set("things", "1", {"meta": {"y": 2}}, merge=True)
        assert await store.get("things", "1") == {"name": "a", "meta": {"x": 1, "y": 2}}

    @pytest.mark.asyncio
    async def test_update_dotted_path(self, store):
        await store.set("things", "1", {"counts": {"a": 1, "b": 1}})
        await store.update("things", "1", {"counts.a": 0})
        assert (await store.get("things", "1"))["counts"] == {"a": 0, "b": 1}

    @pytest.mark.asyncio
    async def test_update_missing_raises(self, store):
        with pytest.raises(NotFoundError):
            await store.update("things", "nope", {"x": 1})

    @pytest.mark.asyncio
    async def test_delete(self, store):
        await store.set("things", "1", {"name": "a"})
        assert await store.delete("things", "1") is True
        assert await store.delete("things", "1") is False


class TestQuery:
    @pytest.mark.asyncio
    async def test_filter_order_limit(self, store):
        for i, kind in enumerate(["a", "b", "a", "a"]):
            await store.set("things", str(i), {"kind": kind, "rank": i})
        docs = await store.query(
            "things", [FieldFilter("kind", "==", "a")],
            order_by="rank", descending=True, limit=2,
        )
        assert [d["rank"] for d in docs] == [3, 2]

    @pytest.mark.asyncio
    async def test_order_by_nested_field(self, store):
        await store.set("things", "1", {"slot": {"start": 2}})
        await store.set("things", "2", {"slot": {"start": 1}})
        docs = await store.query("things", order_by="slot.start")
        assert [d["slot"]["start"] for d in docs] == [1, 2]

    @pytest.mark.asyncio
    async def test_subcollections_are_separate(self, store):
        await store.set("conversations/c1/messages", "m1", {"n": 1})
        assert await store.query("conversations/c2/messages") == []


class TestAtomicOps:
    @pytest.mark.asyncio
    async def test_increment_creates_counter(self, store):
        await store.set("things", "1", {})
        assert await store.increment("things", "1", "counts.a") == 1
        assert await store.increment("things", "1", "counts.a", 2) == 3

    @pytest.mark.asyncio
    async def test_concurrent_increments(self, store):
        await store.set("things", "1", {"n": 0})
        await asyncio.gather(*(store.increment("things", "1", "n") for _ in range(20)))
        assert (await store.get("things", "1"))["n"] == 20

    @pytest.mark.asyncio
    async def test_compare_and_set(self, store):
        await store.set("slots", "s", {"is_available": True})
        assert await store.compare_and_set("slots", "s", "is_available", True, False)
        assert not await store.compare_and_set("slots", "s", "is_available", True, False)
        assert (await store.get("slots", "s"))["is_available"] is False

    @pytest.mark.asyncio
    async def test_compare_and_set_missing_doc(self, store):
        with pytest.raises(NotFoundError):
            await store.compare_and_set("slots", "nope", "is_available", True, False)


class TestSubscriptions:
    @pytest.mark.asyncio
    async def test_existing_docs_then_live(self, store):
        await store.set("feed", "b", {"ts": 2})
        await store.set("feed", "a", {"ts": 1})
        sub = store.subscribe("feed", order_by="ts")
        assert (await _next(sub))["ts"] == 1
        assert (await _next(sub))["ts"] == 2
        await store.set("feed", "c", {"ts": 3})
        assert (await _next(sub))["ts"] == 3

    @pytest.mark.asyncio
    async def test_cancel_ends_iteration(self, store):
        sub = store.subscribe("feed")
        sub.cancel()
        received = [doc async for doc in sub]
        assert received == []
        assert not sub.active
        assert store.subscriber_count("feed") == 0

    @pytest.mark.asyncio
    async def test_cancelled_feed_gets_no_writes(self, store):
        sub = store.subscribe("feed")
        sub.cancel()
        await store.set("feed", "a", {"ts": 1})
        assert sub.pending() == 1  # only the close marker

    @pytest.mark.asyncio
    async def test_reset_clears_everything(self, store):
        await store.set("feed", "a", {"ts": 1})
        sub = store.subscribe("feed")
        store.reset()
        assert await store.get("feed", "a") is None
        assert not sub.active
