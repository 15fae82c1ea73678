"""Migration 011: move `settings.serverConfig` to a user-scoped key."""

from __future__ import annotations

import asyncio

from keyshift.migrations.helper import MigrationHelper, as_dict
from keyshift.migrations.migrator import Migrator
from keyshift.types import AccountEntry, key_definition

SERVER_CONFIG = key_definition("config", "serverConfig")


class ServerConfigMigrator(Migrator):
    async def migrate(self, helper: MigrationHelper) -> None:
        async def migrate_account(entry: AccountEntry) -> None:
            settings = as_dict(entry.account).get("settings")
            if not isinstance(settings, dict) or settings.get("serverConfig") is None:
                return
            await helper.set_to_user(entry.user_id, SERVER_CONFIG, settings.pop("serverConfig"))
            await helper.set(entry.user_id, entry.account)

        await asyncio.gather(*(migrate_account(e) for e in await helper.get_accounts()))

    async def rollback(self, helper: MigrationHelper) -> None:
        async def rollback_account(entry: AccountEntry) -> None:
            value = await helper.get_from_user(entry.user_id, SERVER_CONFIG)
            if value is None:
                return
            if isinstance(entry.account, dict):
                settings = entry.account.get("settings")
                if not isinstance(settings, dict):
                    settings = entry.account["settings"] = {}
                settings["serverConfig"] = value
                await helper.set(entry.user_id, entry.account)
            await helper.set_to_user(entry.user_id, SERVER_CONFIG, None)

        await asyncio.gather(*(rollback_account(e) for e in await helper.get_accounts()))
