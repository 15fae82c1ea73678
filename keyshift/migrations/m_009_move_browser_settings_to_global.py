"""Migration 009: hoist browser notification settings from accounts to global.

These settings used to be per account although the browser only ever
honoured one value. When accounts disagree a disabled notification
(`False`) wins, and an account without the setting counts as `False`
once any account has it. Never-domains from all accounts are merged.
Only accounts listed as authenticated are considered.
"""

from __future__ import annotations

from typing import Any

from keyshift.migrations.helper import MigrationHelper, as_dict
from keyshift.migrations.migrator import IRREVERSIBLE, Migrator

FLAG_SETTINGS = (
    "disableAddLoginNotification",
    "disableChangedPasswordNotification",
    "disableContextMenuItem",
)
NEVER_DOMAINS = "neverDomains"


class MoveBrowserSettingsToGlobalMigrator(Migrator):
    async def migrate(self, helper: MigrationHelper) -> None:
        accounts = [
            e for e in await helper.get_accounts()
            if isinstance(e.account, dict)
        ]
        settings_by_user = {
            e.user_id: as_dict(e.account.get("settings")) for e in accounts
        }

        hoisted: dict[str, Any] = {}
        for flag in FLAG_SETTINGS:
            if any(flag in s for s in settings_by_user.values()):
                hoisted[flag] = all(s.get(flag) is True for s in settings_by_user.values())

        if any(NEVER_DOMAINS in s for s in settings_by_user.values()):
            merged: dict[str, Any] = {}
            for s in settings_by_user.values():
                merged.update(as_dict(s.get(NEVER_DOMAINS)))
            hoisted[NEVER_DOMAINS] = merged

        if not hoisted:
            return

        global_state = as_dict(await helper.get("global"))
        await helper.set("global", {**global_state, **hoisted})

        for entry in accounts:
            settings = entry.account.get("settings")
            if not isinstance(settings, dict):
                continue
            moved = [k for k in (*FLAG_SETTINGS, NEVER_DOMAINS) if k in settings]
            if moved:
                for key in moved:
                    del settings[key]
                await helper.set(entry.user_id, entry.account)

    async def rollback(self, helper: MigrationHelper) -> None:
        raise IRREVERSIBLE
