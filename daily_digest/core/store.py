"""Seen-link stores for novelty tracking.

A link is recorded once its summary attempt finished. The memory store
lasts for the process lifetime; the SQLite store survives restarts so a
redeploy does not publish the same posts again.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import logging
import os

import aiosqlite

from ..config import StoreConfig

logger = logging.getLogger(__name__)

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS seen_links (
    link     TEXT PRIMARY KEY,
    seen_at  TEXT NOT NULL
)
"""


class SeenStore(ABC):
    """Set membership keyed by article link."""

    @abstractmethod
    async def contains(self, link: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def add(self, link: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def links(self) -> list[str]:
        """Return every stored link in insertion order."""
        raise NotImplementedError

    async def count(self) -> int:
        return len(await self.links())

    async def close(self) -> None:
        return None


class MemorySeenStore(SeenStore):
    def __init__(self, links: list[str] | None = None) -> None:
        self._links: dict[str, None] = dict.fromkeys(links or [])

    async def contains(self, link: str) -> bool:
        return link in self._links

    async def add(self, link: str) -> None:
        self._links[link] = None

    async def links(self) -> list[str]:
        return list(self._links)

    async def count(self) -> int:
        return len(self._links)


class SqliteSeenStore(SeenStore):
    """Async SQLite store of seen links."""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._db: aiosqlite.Connection | None = None

    async def _ensure_db(self) -> aiosqlite.Connection:
        if self._db is not None:
            return self._db

        os.makedirs(os.path.dirname(self.db_path) or ".", exist_ok=True)
        self._db = await aiosqlite.connect(self.db_path)
        await self._db.execute("PRAGMA journal_mode=WAL")
        await self._db.execute(_CREATE_TABLE)
        await self._db.commit()
        return self._db

    async def contains(self, link: str) -> bool:
        db = await self._ensure_db()
        async with db.execute("SELECT 1 FROM seen_links WHERE link = ?", (link,)) as cursor:
            return await cursor.fetchone() is not None

    async def add(self, link: str) -> None:
        db = await self._ensure_db()
        await db.execute(
            "INSERT OR IGNORE INTO seen_links (link, seen_at) VALUES (?, datetime('now'))",
            (link,),
        )
        await db.commit()

    async def links(self) -> list[str]:
        db = await self._ensure_db()
        async with db.execute("SELECT link FROM seen_links ORDER BY rowid") as cursor:
            rows = await cursor.fetchall()
            return [row[0] for row in rows]

    async def count(self) -> int:
        db = await self._ensure_db()
        async with db.execute("SELECT COUNT(*) FROM seen_links") as cursor:
            row = await cursor.fetchone()
            return int(row[0]) if row else 0

    async def close(self) -> None:
        if self._db is not None:
            await self._db.close()
            self._db = None


def open_store(cfg: StoreConfig) -> SeenStore:
    """Build the store selected by ``cfg.backend``."""
    backend = cfg.backend.lower().strip()
    if backend == "memory":
        return MemorySeenStore()
    if backend == "sqlite":
        logger.debug("Using SQLite seen store at %s", cfg.path)
        return SqliteSeenStore(cfg.path)
    raise ValueError(f"Unsupported store backend: {cfg.backend}. Supported: memory, sqlite")
