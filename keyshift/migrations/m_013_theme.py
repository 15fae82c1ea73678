"""Migration 013: move the theme selection to a global key.

The general pass finds the theme inside the global blob. The web
client's local partition ("web-disk-local") stored it under a raw
`theme` key instead.
"""

from __future__ import annotations

from keyshift.migrations.helper import MigrationHelper, as_dict
from keyshift.migrations.migrator import Migrator
from keyshift.types import key_definition

THEME_SELECTION = key_definition("theming", "selection")
WEB_DISK_LOCAL = "web-disk-local"


class ThemeMigrator(Migrator):
    async def migrate(self, helper: MigrationHelper) -> None:
        if helper.type == WEB_DISK_LOCAL:
            theme = await helper.get("theme")
            if theme is not None:
                await helper.set_to_global(THEME_SELECTION, theme)
                await helper.remove("theme")
            return

        global_state = await helper.get("global")
        if not isinstance(global_state, dict) or global_state.get("theme") is None:
            return
        await helper.set_to_global(THEME_SELECTION, global_state.pop("theme"))
        await helper.set("global", global_state)

    async def rollback(self, helper: MigrationHelper) -> None:
        theme = await helper.get_from_global(THEME_SELECTION)
        if theme is None:
            return
        if helper.type == WEB_DISK_LOCAL:
            await helper.set("theme", theme)
        else:
            global_state = as_dict(await helper.get("global"))
            await helper.set("global", {**global_state, "theme": theme})
        await helper.set_to_global(THEME_SELECTION, None)
