"""Tests for seen-link stores."""

import asyncio
from pathlib import Path

import pytest

from daily_digest.config import StoreConfig
from daily_digest.core.store import MemorySeenStore, SqliteSeenStore, open_store


def test_memory_store_keeps_insertion_order():
    async def _go():
        store = MemorySeenStore()
        await store.add("https://a/2")
        await store.add("https://a/1")
        await store.add("https://a/2")
        return await store.contains("https://a/1"), await store.links(), await store.count()

    contains, links, count = asyncio.run(_go())

    assert contains is True
    assert links == ["https://a/2", "https://a/1"]
    assert count == 2


def test_sqlite_store_survives_reopen(tmp_path: Path):
    db_path = str(tmp_path / "nested" / "seen.db")

    async def _write():
        store = SqliteSeenStore(db_path)
        await store.add("https://a/1")
        await store.add("https://a/2")
        await store.add("https://a/1")
        await store.close()

    async def _read():
        store = SqliteSeenStore(db_path)
        try:
            return (
                await store.contains("https://a/1"),
                await store.contains("https://a/missing"),
                await store.links(),
                await store.count(),
            )
        finally:
            await store.close()

    asyncio.run(_write())
    seen, missing, links, count = asyncio.run(_read())

    assert seen is True
    assert missing is False
    assert links == ["https://a/1", "https://a/2"]
    assert count == 2


def test_open_store_selects_backend(tmp_path: Path):
    assert isinstance(open_store(StoreConfig(backend="memory")), MemorySeenStore)
    assert isinstance(open_store(StoreConfig(backend="sqlite", path=str(tmp_path / "s.db"))), SqliteSeenStore)
    with pytest.raises(ValueError, match="Unsupported store backend"):
        open_store(StoreConfig(backend="redis"))
