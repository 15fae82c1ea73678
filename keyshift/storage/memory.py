"""In-memory storage — used for session partitions and tests."""

from __future__ import annotations

import copy
from typing import Any

from keyshift.storage.base import AbstractStorageService


class MemoryStorageService(AbstractStorageService):
    """Dict-backed store.

    Values are deep-copied on the way in and out so that callers
    mutating a returned object never change what is stored, matching
    the behaviour of the serializing backends.
    """

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self.internal_store: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    async def get(self, key: str) -> Any:
        return copy.deepcopy(self.internal_store.get(key))

    async def has(self, key: str) -> bool:
        return key in self.internal_store

    async def save(self, key: str, value: Any) -> None:
        self.internal_store[key] = copy.deepcopy(value)

    async def remove(self, key: str) -> None:
        self.internal_store.pop(key, None)

    async def keys(self) -> list[str]:
        return list(self.internal_store)
