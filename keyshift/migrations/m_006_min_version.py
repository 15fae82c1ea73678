"""Migration 006: refuse to migrate stores older than the minimum version.

Every store at version 6 or later has already passed this step. Older
data cannot be migrated by this release at all.
"""

from __future__ import annotations

from keyshift.exceptions import MinVersionError
from keyshift.migrations.helper import MigrationHelper
from keyshift.migrations.migrator import IRREVERSIBLE, Migrator

MIN_VERSION = 6


class MinVersionMigrator(Migrator):
    def __init__(self) -> None:
        super().__init__(0, MIN_VERSION)

    async def migrate(self, helper: MigrationHelper) -> None:
        if 0 <= helper.current_version < MIN_VERSION:
            raise MinVersionError(helper.current_version, MIN_VERSION)

    async def rollback(self, helper: MigrationHelper) -> None:
        raise IRREVERSIBLE
