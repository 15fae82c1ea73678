"""Shared test fixtures — recording storage and migrator harness."""

from __future__ import annotations

import copy
import uuid
from typing import Any

import pytest

from keyshift.migrations.helper import MigrationHelper
from keyshift.migrations.migrator import Migrator
from keyshift.storage.memory import MemoryStorageService
from keyshift.types import ClientType


class RecordingStorage(MemoryStorageService):
    """Memory storage that records every write. No persistence."""

    def __init__(self, initial: dict[str, Any] | None = None):
        super().__init__(initial)
        self.saves: list[tuple[str, Any]] = []
        self.removes: list[str] = []

    async def save(self, key, value):
        self.saves.append((key, copy.deepcopy(value)))
        await super().save(key, value)

    async def remove(self, key):
        self.removes.append(key)
        await super().remove(key)

    def saved(self, key: str) -> list[Any]:
        """Every value written to key, oldest first."""
        return [v for k, v in self.saves if k == key]

    @property
    def saved_keys(self) -> list[str]:
        return [k for k, _ in self.saves]


class RecordingLog:
    def __init__(self):
        self.messages: list[str] = []

    def info(self, message: str) -> None:
        self.messages.append(message)


# ── Injected data ────────────────────────────────────────────────
# Every object in the initial state gets an extra property. After the
# migration each one must still exist somewhere, which catches
# migrators that rebuild objects and drop fields they don't know about.


def _inject(data: dict, path: list[str]) -> list[tuple[str, str, list[str]]]:
    injected = []
    for key, value in list(data.items()):
        if isinstance(value, dict):
            injected.extend(_inject(value, [*path, key]))
    name = f"__injectedProperty__{uuid.uuid4().hex}"
    value = f"__injectedValue__{uuid.uuid4().hex}"
    data[name] = value
    injected.append((name, value, path))
    return injected


def _strip(data: dict, injected: list[tuple[str, str, list[str]]]) -> list:
    for key in list(data):
        value = data[key]
        match = next(
            (i for i in injected if i[0] == key and value == i[1]),
            None,
        )
        if match is not None:
            injected.remove(match)
            del data[key]
        elif isinstance(value, dict):
            injected = _strip(value, injected)
    return injected


async def _run_migrator(
    migrator: Migrator,
    initial: dict[str, Any] | None = None,
    direction: str = "migrate",
    client_type: ClientType = ClientType.WEB,
    type: str = "general",
    version: int | None = None,
) -> dict[str, Any]:
    data = copy.deepcopy(initial or {})
    injected = _inject(data, [])
    storage = MemoryStorageService()
    storage.internal_store = data
    if version is None:
        # A rollback starts from the state the forward step left behind
        version = migrator.to_version if direction == "rollback" else migrator.from_version
    helper = MigrationHelper(
        version,
        storage,
        RecordingLog(),
        type,
        client_type,
    )
    if direction == "rollback":
        await migrator.rollback(helper)
    else:
        await migrator.migrate(helper)

    leftover = _strip(storage.internal_store, injected)
    assert leftover == [], f"Injected data lost at {[i[2] for i in leftover]}"
    return storage.internal_store


@pytest.fixture
def run_migrator():
    return _run_migrator


@pytest.fixture
def make_helper():
    def _factory(
        data: dict[str, Any] | None = None,
        version: int = 0,
        type: str = "general",
        client_type: ClientType = ClientType.WEB,
    ) -> tuple[MigrationHelper, RecordingStorage]:
        storage = RecordingStorage(data)
        helper = MigrationHelper(version, storage, RecordingLog(), type, client_type)
        return helper, storage
    return _factory
