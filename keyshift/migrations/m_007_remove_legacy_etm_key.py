"""Migration 007: drop the deprecated `keys.legacyEtmKey` from every account."""

from __future__ import annotations

import asyncio

from keyshift.migrations.helper import MigrationHelper, as_dict
from keyshift.migrations.migrator import IRREVERSIBLE, Direction, Migrator
from keyshift.types import AccountEntry


class RemoveLegacyEtmKeyMigrator(Migrator):
    async def migrate(self, helper: MigrationHelper) -> None:
        async def migrate_account(entry: AccountEntry) -> None:
            keys = as_dict(entry.account).get("keys")
            if isinstance(keys, dict) and "legacyEtmKey" in keys:
                del keys["legacyEtmKey"]
                await helper.set(entry.user_id, entry.account)

        await asyncio.gather(*(migrate_account(e) for e in await helper.get_accounts()))

    async def rollback(self, helper: MigrationHelper) -> None:
        raise IRREVERSIBLE

    # Stores below version 8 keep the marker nested in the global blob.
    async def update_version(self, helper: MigrationHelper, direction: Direction) -> None:
        end = self.end_version(direction)
        helper.current_version = end
        global_state = as_dict(await helper.get("global"))
        await helper.set("global", {**global_state, "stateVersion": end})
        helper.info(f"Updated state version to {end} from {self.start_version(direction)}")
