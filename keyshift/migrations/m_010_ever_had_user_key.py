"""Migration 010: move `profile.everHadUserKey` to a user-scoped key."""

from __future__ import annotations

import asyncio

from keyshift.migrations.helper import MigrationHelper, as_dict
from keyshift.migrations.migrator import Migrator
from keyshift.types import AccountEntry, key_definition

EVER_HAD_USER_KEY = key_definition("crypto", "everHadUserKey")


class EverHadUserKeyMigrator(Migrator):
    """Every known user ends up with the flag; it defaults to False."""

    async def migrate(self, helper: MigrationHelper) -> None:
        async def migrate_account(entry: AccountEntry) -> None:
            profile = as_dict(entry.account).get("profile")
            if isinstance(profile, dict) and "everHadUserKey" in profile:
                value = bool(profile.pop("everHadUserKey"))
                await helper.set_to_user(entry.user_id, EVER_HAD_USER_KEY, value)
                await helper.set(entry.user_id, entry.account)
            elif await helper.get_from_user(entry.user_id, EVER_HAD_USER_KEY) is None:
                await helper.set_to_user(entry.user_id, EVER_HAD_USER_KEY, False)

        await asyncio.gather(*(migrate_account(e) for e in await helper.get_accounts()))

    async def rollback(self, helper: MigrationHelper) -> None:
        async def rollback_account(entry: AccountEntry) -> None:
            value = await helper.get_from_user(entry.user_id, EVER_HAD_USER_KEY)
            if value is None:
                return
            if isinstance(entry.account, dict):
                profile = entry.account.get("profile")
                if not isinstance(profile, dict):
                    profile = entry.account["profile"] = {}
                profile["everHadUserKey"] = value
                await helper.set(entry.user_id, entry.account)
            # Only cleared once the blob holds the value again
            await helper.set_to_user(entry.user_id, EVER_HAD_USER_KEY, None)

        await asyncio.gather(*(rollback_account(e) for e in await helper.get_accounts()))
