"""Migration runner — brings a store to CURRENT_VERSION on startup.

The runner is the only thing an application calls. It reads the
stored version marker, hands a helper to the registered chain and
lets any failure propagate: an application must not start against a
partially migrated store.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from keyshift.migrations.builder import MigrationBuilder
from keyshift.migrations.helper import LogService, MigrationHelper
from keyshift.migrations.m_013_theme import WEB_DISK_LOCAL
from keyshift.migrations.migrator import STATE_VERSION_KEY
from keyshift.migrations.registry import (
    CURRENT_VERSION,
    create_migration_builder,
    create_rollback_builder,
)
from keyshift.storage.base import AbstractStorageService
from keyshift.types import ClientType

logger = logging.getLogger(__name__)

# Longest single back-off while waiting on another process's migration.
MAX_WAIT_MS = 8192

BuilderFactory = Callable[[], MigrationBuilder]


async def current_version(
    storage: AbstractStorageService, log: LogService | None = None
) -> int:
    """Get the stored schema version, or -1 for an empty store.

    From version 8 the marker is the flat `stateVersion` key; older
    stores keep it at `global.stateVersion`.
    """
    log = log or logger
    version = await storage.get(STATE_VERSION_KEY)
    if version is None:
        global_state = await storage.get("global")
        if isinstance(global_state, dict):
            version = global_state.get("stateVersion")
    if version is None:
        log.info("No state version found, assuming empty state.")
        return -1
    log.info(f"State version: {version}")
    return version


async def wait_for_migrations(
    storage: AbstractStorageService, log: LogService | None = None
) -> bool:
    """Poll until the stored version reaches CURRENT_VERSION.

    The first wait is 2 ms and each later one is twice as long. Polling
    stops once the next wait would exceed MAX_WAIT_MS. Returns whether
    the store is ready. A stored version above CURRENT_VERSION counts
    as ready.
    """
    delay_ms = 2
    while await current_version(storage, log) < CURRENT_VERSION:
        if delay_ms > MAX_WAIT_MS:
            return False
        await asyncio.sleep(delay_ms / 1000)
        delay_ms *= 2
    return True


class MigrationRunner:
    """Runs the registered chain against one storage partition."""

    def __init__(
        self,
        storage: AbstractStorageService,
        client_type: ClientType,
        log: LogService | None = None,
        builder_factory: BuilderFactory = create_migration_builder,
    ) -> None:
        self.storage = storage
        self.client_type = client_type
        self.log = log or logger
        self._builder_factory = builder_factory

    async def run(self) -> int:
        """Apply all pending migrations. Returns the resulting version."""
        return await self._run_pass(self.storage, "general")

    async def _run_pass(self, storage: AbstractStorageService, type: str) -> int:
        version = await current_version(storage, self.log)
        if version < 0:
            # Nothing stored yet; stamp it so no migration ever runs on it.
            await storage.save(STATE_VERSION_KEY, CURRENT_VERSION)
            return CURRENT_VERSION

        helper = MigrationHelper(version, storage, self.log, type, self.client_type)
        await self._builder_factory().migrate(helper)
        return helper.current_version

    async def wait_for_completion(self) -> bool:
        return await wait_for_migrations(self.storage, self.log)


class WebMigrationRunner(MigrationRunner):
    """Web clients keep a second, local partition that is migrated separately."""

    def __init__(
        self,
        session_storage: AbstractStorageService,
        disk_local_storage: AbstractStorageService,
        log: LogService | None = None,
        builder_factory: BuilderFactory = create_migration_builder,
    ) -> None:
        super().__init__(session_storage, ClientType.WEB, log, builder_factory)
        self.disk_local_storage = disk_local_storage

    async def run(self) -> int:
        version = await super().run()
        await self._run_pass(self.disk_local_storage, WEB_DISK_LOCAL)
        return version


async def downgrade(
    storage: AbstractStorageService,
    target: int,
    client_type: ClientType,
    log: LogService | None = None,
    type: str = "general",
) -> int:
    """Roll a store back to `target`. Irreversible steps abort with IRREVERSIBLE."""
    version = await current_version(storage, log)
    helper = MigrationHelper(version, storage, log, type, client_type)
    await create_rollback_builder(version, target).migrate(helper)
    return helper.current_version
