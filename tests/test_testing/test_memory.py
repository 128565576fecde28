"""Tests for the InMemoryDatabase reference engine."""

from __future__ import annotations

import pytest

from docdb_rls import Id, NotUniqueError
from docdb_rls.testing import InMemoryDatabase


@pytest.fixture()
def db() -> InMemoryDatabase:
    database = InMemoryDatabase()
    database.define_index("users", "by_age", ["age"])
    database.define_search_index("users", "search_bio", "bio")
    return database


class TestWrites:
    @pytest.mark.asyncio
    async def test_insert_assigns_system_fields(self, db):
        user_id = await db.insert("users", {"name": "alice"})
        stored = await db.get(user_id)
        assert stored["_id"] == user_id
        assert stored["_creation_time"] > 0
        assert db.stats.writes == [("insert", user_id)]

    @pytest.mark.asyncio
    async def test_get_returns_copy(self, db):
        user_id = await db.insert("users", {"name": "alice"})
        (await db.get(user_id))["name"] = "mallory"
        assert (await db.get(user_id))["name"] == "alice"

    @pytest.mark.asyncio
    async def test_patch_merges_and_keeps_system_fields(self, db):
        user_id = await db.insert("users", {"name": "alice", "age": 30})
        await db.patch(user_id, {"age": 31, "_id": Id("users", 99)})
        stored = await db.get(user_id)
        assert stored["age"] == 31 and stored["name"] == "alice"
        assert stored["_id"] == user_id

    @pytest.mark.asyncio
    async def test_replace_drops_missing_fields(self, db):
        user_id = await db.insert("users", {"name": "alice", "age": 30})
        await db.replace(user_id, {"name": "alicia"})
        stored = await db.get(user_id)
        assert "age" not in stored
        assert stored["_id"] == user_id

    @pytest.mark.asyncio
    async def test_delete(self, db):
        user_id = await db.insert("users", {"name": "alice"})
        await db.delete(user_id)
        assert await db.get(user_id) is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation", ["patch", "replace", "delete"])
    async def test_writes_to_missing_documents_raise(self, db, operation):
        missing = Id("users", 12345)
        with pytest.raises(KeyError):
            if operation == "delete":
                await db.delete(missing)
            else:
                await getattr(db, operation)(missing, {})


class TestQueries:
    @pytest.mark.asyncio
    async def test_full_scan_in_creation_order(self, db):
        await db.seed("users", [{"n": 3}, {"n": 1}, {"n": 2}])
        assert [d["n"] for d in await db.query("users").collect()] == [3, 1, 2]

    @pytest.mark.asyncio
    async def test_index_range(self, db):
        await db.seed("users", [{"age": 40}, {"age": 20}, {"age": 30}, {"age": None}])
        query = db.query("users").with_index("by_age", lambda q: q.gte("age", 25).lt("age", 40))
        assert [d["age"] for d in await query.collect()] == [30]

    @pytest.mark.asyncio
    async def test_index_order_puts_missing_values_first(self, db):
        await db.seed("users", [{"age": 40}, {"age": None}, {"age": 20}])
        ages = [d["age"] for d in await db.query("users").with_index("by_age").collect()]
        assert ages == [None, 20, 40]

    @pytest.mark.asyncio
    async def test_by_creation_time_is_always_available(self, db):
        await db.seed("posts", [{"n": 1}, {"n": 2}])
        query = db.query("posts").with_index("by_creation_time").order("desc")
        assert [d["n"] for d in await query.collect()] == [2, 1]

    @pytest.mark.asyncio
    async def test_search_requires_every_term(self, db):
        await db.seed("users", [{"bio": "Loves Python"}, {"bio": "python and rust"}])
        query = db.query("users").with_search_index(
            "search_bio", lambda q: q.search("bio", "python RUST")
        )
        assert [d["bio"] for d in await query.collect()] == ["python and rust"]

    @pytest.mark.asyncio
    async def test_search_on_wrong_field(self, db):
        with pytest.raises(ValueError, match="searches 'bio'"):
            db.query("users").with_search_index("search_bio", lambda q: q.search("name", "x"))

    def test_unknown_search_index(self, db):
        with pytest.raises(ValueError, match="Unknown search index"):
            db.query("users").with_search_index("nope", lambda q: q)

    def test_invalid_order(self, db):
        with pytest.raises(ValueError):
            db.query("users").order("sideways")  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_raw_unique(self, db):
        await db.seed("users", [{"n": 1}, {"n": 1}])
        with pytest.raises(NotUniqueError):
            await db.query("users").unique()
        assert await db.query("empty").unique() is None

    @pytest.mark.asyncio
    async def test_paginate(self, db):
        await db.seed("users", [{"n": i} for i in range(5)])
        first = await db.query("users").paginate({"num_items": 3, "cursor": None})
        assert [d["n"] for d in first.page] == [0, 1, 2]
        assert not first.is_done
        second = await db.query("users").paginate({"num_items": 3, "cursor": first.continue_cursor})
        assert [d["n"] for d in second.page] == [3, 4]
        assert second.is_done


class TestStreamingStats:
    @pytest.mark.asyncio
    async def test_pulls_and_close_are_counted(self, db):
        await db.seed("users", [{"n": i} for i in range(5)])
        iterator = db.query("users").__aiter__()
        await iterator.__anext__()
        await iterator.__anext__()
        await iterator.aclose()
        assert db.stats.pulls == 2
        assert db.stats.iterators_opened == 1
        assert db.stats.iterators_closed == 1

    @pytest.mark.asyncio
    async def test_reset(self, db):
        await db.insert("users", {})
        db.stats.reset()
        assert db.stats.writes == []

    def test_documents_helper_is_unfiltered(self, db):
        assert db.documents("users") == []
