"""SQLite-backed storage — one row per key, values stored as JSON."""

from __future__ import annotations

from typing import Any

import aiosqlite
import orjson

from keyshift.exceptions import StorageError
from keyshift.storage.base import AbstractStorageService


class SqliteStorageService(AbstractStorageService):
    """Persistent key-value store in a single SQLite table.

    Each call opens its own connection, so the service is safe to
    share and needs no explicit close.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    async def initialize(self) -> None:
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute(
                "CREATE TABLE IF NOT EXISTS state "
                "(key TEXT PRIMARY KEY, value TEXT NOT NULL)"
            )
            await db.commit()

    async def get(self, key: str) -> Any:
        async with aiosqlite.connect(self._db_path) as db:
            cursor = await db.execute("SELECT value FROM state WHERE key = ?", (key,))
            row = await cursor.fetchone()
        if row is None:
            return None
        try:
            return orjson.loads(row[0])
        except orjson.JSONDecodeError as e:
            raise StorageError(f"Stored value for '{key}' is not valid JSON") from e

    async def has(self, key: str) -> bool:
        async with aiosqlite.connect(self._db_path) as db:
            cursor = await db.execute("SELECT 1 FROM state WHERE key = ?", (key,))
            return await cursor.fetchone() is not None

    async def save(self, key: str, value: Any) -> None:
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute(
                "INSERT INTO state (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, orjson.dumps(value).decode()),
            )
            await db.commit()

    async def remove(self, key: str) -> None:
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute("DELETE FROM state WHERE key = ?", (key,))
            await db.commit()

    async def keys(self) -> list[str]:
        async with aiosqlite.connect(self._db_path) as db:
            cursor = await db.execute("SELECT key FROM state ORDER BY key")
            rows = await cursor.fetchall()
        return [r[0] for r in rows]
