"""Whole-file JSON storage, the layout desktop clients keep in data.json."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import orjson

from keyshift.exceptions import StorageError
from keyshift.storage.base import AbstractStorageService


class JsonFileStorageService(AbstractStorageService):
    """Every key is a top-level property of one JSON object on disk.

    The file is read on every call and rewritten on every mutation.
    A missing file is an empty store.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._lock = asyncio.Lock()

    def _load(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        raw = self._path.read_bytes()
        if not raw.strip():
            return {}
        try:
            data = orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            raise StorageError(f"{self._path} is not valid JSON") from e
        if not isinstance(data, dict):
            raise StorageError(f"{self._path} must contain a JSON object")
        return data

    def _dump(self, data: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_bytes(orjson.dumps(data, option=orjson.OPT_INDENT_2))

    async def get(self, key: str) -> Any:
        return self._load().get(key)

    async def has(self, key: str) -> bool:
        return key in self._load()

    async def save(self, key: str, value: Any) -> None:
        async with self._lock:
            data = self._load()
            data[key] = value
            self._dump(data)

    async def remove(self, key: str) -> None:
        async with self._lock:
            data = self._load()
            if key in data:
                del data[key]
                self._dump(data)

    async def keys(self) -> list[str]:
        return list(self._load())
