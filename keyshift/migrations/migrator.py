"""Migrator — one versioned, ideally reversible transform of stored state."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING

from keyshift.exceptions import InvalidMigratorError, IrreversibleMigrationError

if TYPE_CHECKING:
    from keyshift.migrations.helper import MigrationHelper

STATE_VERSION_KEY = "stateVersion"

# Raised (as this exact instance) by rollback() when no safe inverse exists.
IRREVERSIBLE = IrreversibleMigrationError("Irreversible migration")


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"


class Migrator(ABC):
    """Transforms the store from `from_version` to `to_version` and back.

    Subclasses implement `migrate` and `rollback`. Both must be
    idempotent: when the data they expect is absent they write nothing.
    A migration that cannot be undone raises `IRREVERSIBLE` from
    `rollback` before touching storage.

    Usage:
        class DropFlag(Migrator):
            async def migrate(self, helper): ...
            async def rollback(self, helper):
                raise IRREVERSIBLE

        DropFlag(3, 4)
    """

    def __init__(self, from_version: int, to_version: int) -> None:
        if from_version is None or to_version is None:
            raise InvalidMigratorError("Invalid migration: both versions are required")
        if from_version >= to_version:
            raise InvalidMigratorError(
                f"Invalid migration: from version {from_version} "
                f"must be lower than to version {to_version}"
            )
        self._from_version = from_version
        self._to_version = to_version

    @property
    def from_version(self) -> int:
        return self._from_version

    @property
    def to_version(self) -> int:
        return self._to_version

    @property
    def name(self) -> str:
        return type(self).__name__

    def start_version(self, direction: Direction) -> int:
        return self._from_version if direction == Direction.UP else self._to_version

    def end_version(self, direction: Direction) -> int:
        return self._to_version if direction == Direction.UP else self._from_version

    async def should_migrate(self, helper: MigrationHelper, direction: Direction) -> bool:
        """Extra guard evaluated before the body runs."""
        return True

    @abstractmethod
    async def migrate(self, helper: MigrationHelper) -> None:
        ...

    @abstractmethod
    async def rollback(self, helper: MigrationHelper) -> None:
        ...

    async def update_version(self, helper: MigrationHelper, direction: Direction) -> None:
        """Record the version the store is now at.

        Assumes the marker lives at the flat `stateVersion` key. Only the
        migrators that move the marker itself override this.
        """
        end = self.end_version(direction)
        helper.current_version = end
        await helper.set(STATE_VERSION_KEY, end)
        helper.info(f"Updated state version to {end} from {self.start_version(direction)}")

    def __repr__(self) -> str:
        return f"{self.name}({self._from_version}, {self._to_version})"
