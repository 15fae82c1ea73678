"""Migration 008: move the version marker out of the global blob.

Up to version 7 the marker is `global.stateVersion`. From version 8 it
is the flat `stateVersion` key every later migrator writes to.
"""

from __future__ import annotations

from keyshift.exceptions import MissingStateVersionError
from keyshift.migrations.helper import MigrationHelper, as_dict
from keyshift.migrations.migrator import STATE_VERSION_KEY, Direction, Migrator


class MoveStateVersionMigrator(Migrator):
    async def migrate(self, helper: MigrationHelper) -> None:
        global_state = as_dict(await helper.get("global"))
        version = global_state.get("stateVersion")
        if version is None:
            if await helper.get(STATE_VERSION_KEY) is not None:
                return  # already moved
            raise MissingStateVersionError("Migration failed, state version not found")

        await helper.set(STATE_VERSION_KEY, version)
        del global_state["stateVersion"]
        await helper.set("global", global_state)

    async def rollback(self, helper: MigrationHelper) -> None:
        version = await helper.get(STATE_VERSION_KEY)
        if version is None:
            raise MissingStateVersionError("Rollback failed, state version not found")

        global_state = as_dict(await helper.get("global"))
        await helper.set("global", {**global_state, "stateVersion": version})
        await helper.remove(STATE_VERSION_KEY)

    # The marker ends up flat when going up and nested when going down.
    async def update_version(self, helper: MigrationHelper, direction: Direction) -> None:
        end = self.end_version(direction)
        helper.current_version = end
        if direction == Direction.UP:
            await helper.set(STATE_VERSION_KEY, end)
        else:
            global_state = as_dict(await helper.get("global"))
            await helper.set("global", {**global_state, "stateVersion": end})
        helper.info(f"Updated state version to {end} from {self.start_version(direction)}")
