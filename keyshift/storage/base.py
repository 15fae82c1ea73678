"""Base interface for the key-value stores that hold client state.

The migration engine never assumes more than this: values are
JSON-compatible, keys are opaque strings, and there is no partial
update. Changing one field of a stored object means writing the
whole object back.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class AbstractStorageService(ABC):
    """Async key-value store over an opaque namespace."""

    @abstractmethod
    async def get(self, key: str) -> Any:
        """Return the value at key, or None if nothing is stored."""
        ...

    @abstractmethod
    async def has(self, key: str) -> bool:
        ...

    @abstractmethod
    async def save(self, key: str, value: Any) -> None:
        """Store value at key, replacing what was there."""
        ...

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Delete key. Removing a missing key is not an error."""
        ...

    async def keys(self) -> list[str]:
        """All stored keys. Optional; used by diagnostics only."""
        raise NotImplementedError(f"{type(self).__name__} cannot list keys")
