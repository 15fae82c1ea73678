"""Migration 012: move vault timeout settings to user-scoped keys.

Negative timeouts were sentinels for the non-numeric options and a
null timeout meant "never". The new keys store the option names.
The CLI has no vault timeout of its own, so a CLI account without one
gets "never" instead of nothing.

Global copies of the settings (including the dotted raw keys written
by desktop) are dropped and not restored on rollback.
"""

from __future__ import annotations

import asyncio
from typing import Any

from keyshift.migrations.helper import MigrationHelper, as_dict
from keyshift.migrations.migrator import Migrator
from keyshift.types import AccountEntry, ClientType, key_definition

VAULT_TIMEOUT = key_definition("vaultTimeoutSettings", "vaultTimeout")
VAULT_TIMEOUT_ACTION = key_definition("vaultTimeoutSettings", "vaultTimeoutAction")

DESKTOP_GLOBAL_KEYS = ("global\\.vaultTimeout", "global\\.vaultTimeoutAction")

_NAMED_TIMEOUTS = {
    -1: "onRestart",
    -2: "onLocked",
    -3: "onSleep",
    -4: "onIdle",
}
_LEGACY_TIMEOUTS = {name: value for value, name in _NAMED_TIMEOUTS.items()}


def to_timeout_option(legacy: int | None) -> int | str:
    if legacy is None:
        return "never"
    return _NAMED_TIMEOUTS.get(legacy, legacy)


def to_legacy_timeout(option: int | str) -> int | None:
    if option == "never":
        return None
    return _LEGACY_TIMEOUTS.get(option, option)


class VaultTimeoutSettingsMigrator(Migrator):
    async def migrate(self, helper: MigrationHelper) -> None:
        is_cli = helper.client_type == ClientType.CLI

        async def migrate_account(entry: AccountEntry) -> None:
            if not isinstance(entry.account, dict):
                return
            settings = as_dict(entry.account.get("settings"))
            updated = False

            if "vaultTimeout" in settings:
                timeout = settings.pop("vaultTimeout")
                await helper.set_to_user(entry.user_id, VAULT_TIMEOUT, to_timeout_option(timeout))
                updated = True
            elif is_cli and await helper.get_from_user(entry.user_id, VAULT_TIMEOUT) is None:
                await helper.set_to_user(entry.user_id, VAULT_TIMEOUT, "never")
                updated = True

            if "vaultTimeoutAction" in settings:
                action = settings.pop("vaultTimeoutAction")
                if action is not None:
                    await helper.set_to_user(entry.user_id, VAULT_TIMEOUT_ACTION, action)
                updated = True

            if updated:
                await helper.set(entry.user_id, entry.account)

        await asyncio.gather(*(migrate_account(e) for e in await helper.get_accounts()))

        global_state = await helper.get("global")
        if isinstance(global_state, dict) and (
            "vaultTimeout" in global_state or "vaultTimeoutAction" in global_state
        ):
            global_state.pop("vaultTimeout", None)
            global_state.pop("vaultTimeoutAction", None)
            await helper.set("global", global_state)

        for key in DESKTOP_GLOBAL_KEYS:
            if await helper.get(key) is not None:
                await helper.remove(key)

    async def rollback(self, helper: MigrationHelper) -> None:
        async def rollback_account(entry: AccountEntry) -> None:
            timeout = await helper.get_from_user(entry.user_id, VAULT_TIMEOUT)
            action = await helper.get_from_user(entry.user_id, VAULT_TIMEOUT_ACTION)

            if isinstance(entry.account, dict) and (timeout is not None or action is not None):
                settings: Any = entry.account.get("settings")
                if not isinstance(settings, dict):
                    settings = entry.account["settings"] = {}
                if timeout is not None:
                    settings["vaultTimeout"] = to_legacy_timeout(timeout)
                if action is not None:
                    settings["vaultTimeoutAction"] = action
                await helper.set(entry.user_id, entry.account)

            # Cleared only after the blob has been written back
            await helper.set_to_user(entry.user_id, VAULT_TIMEOUT, None)
            await helper.set_to_user(entry.user_id, VAULT_TIMEOUT_ACTION, None)

        await asyncio.gather(*(rollback_account(e) for e in await helper.get_accounts()))
