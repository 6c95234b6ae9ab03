"""
Tests for the pass store backends.

These tests verify:
  - Stored archives come back byte for byte
  - Unknown serial numbers raise PassNotFound
  - A serial number can only be registered once
  - The in-memory store evicts the least recently used pass when full
  - The database store persists archives across sessions
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gera.exceptions import PassNotFoundError
from gera.services.pass_store import DatabasePassStore, InMemoryPassStore


class TestInMemoryPassStore:

    async def test_put_then_get(self):
        store = InMemoryPassStore(capacity=10)
        await store.put("a", b"archive-a")

        assert await store.get("a") == b"archive-a"
        assert len(store) == 1

    async def test_unknown_serial(self):
        store = InMemoryPassStore(capacity=10)
        with pytest.raises(PassNotFoundError) as exc_info:
            await store.get("missing")
        assert exc_info.value.error_code == "PassNotFound"

    async def test_serial_is_never_reused(self):
        store = InMemoryPassStore(capacity=10)
        await store.put("a", b"first")

        with pytest.raises(ValueError):
            await store.put("a", b"second")
        assert await store.get("a") == b"first"

    async def test_evicts_oldest_when_full(self):
        store = InMemoryPassStore(capacity=2)
        await store.put("a", b"1")
        await store.put("b", b"2")
        await store.put("c", b"3")

        assert len(store) == 2
        with pytest.raises(PassNotFoundError):
            await store.get("a")
        assert await store.get("c") == b"3"

    async def test_retrieval_refreshes_entry(self):
        store = InMemoryPassStore(capacity=2)
        await store.put("a", b"1")
        await store.put("b", b"2")
        await store.get("a")
        await store.put("c", b"3")

        assert await store.get("a") == b"1"
        with pytest.raises(PassNotFoundError):
            await store.get("b")

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            InMemoryPassStore(capacity=0)


class TestDatabasePassStore:

    async def test_put_then_get(self, db_session):
        store = DatabasePassStore(db_session)
        await store.put("a", b"archive-a")

        assert await store.get("a") == b"archive-a"

    async def test_persists_across_sessions(self, db_engine):
        sessions = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)

        async with sessions() as session:
            await DatabasePassStore(session).put("a", b"archive-a")

        async with sessions() as session:
            assert await DatabasePassStore(session).get("a") == b"archive-a"

    async def test_unknown_serial(self, db_session):
        with pytest.raises(PassNotFoundError):
            await DatabasePassStore(db_session).get("missing")

    async def test_serial_is_never_reused(self, db_session):
        store = DatabasePassStore(db_session)
        await store.put("a", b"first")

        with pytest.raises(ValueError):
            await store.put("a", b"second")
        assert await store.get("a") == b"first"
