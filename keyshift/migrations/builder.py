"""Migration builder — an ordered, chain-checked plan of migrator steps.

Each call to `with_` or `rollback` returns a new builder whose tracked
version is where the store will be once every buffered step has run.
A step that does not continue from that version is rejected on the
spot, so a mis-ordered chain fails at startup rather than halfway
through a user's data.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from keyshift.exceptions import ChainValidationError
from keyshift.migrations.migrator import Direction, Migrator

if TYPE_CHECKING:
    from keyshift.migrations.helper import MigrationHelper

MigratorSpec = type[Migrator] | Migrator


@dataclass(frozen=True)
class MigrationStep:
    migrator: Migrator
    direction: Direction

    def already_applied(self, version: int) -> bool:
        """Whether a store at `version` is already past this step."""
        if self.direction == Direction.UP:
            return version >= self.migrator.to_version
        return version <= self.migrator.from_version


def _instantiate(
    migrator: MigratorSpec, from_version: int | None, to_version: int | None
) -> Migrator:
    if isinstance(migrator, Migrator):
        return migrator
    if from_version is None and to_version is None:
        return migrator()
    return migrator(from_version, to_version)


class MigrationBuilder:
    """Immutable sequence of migration steps plus the sequential runner.

    Usage:
        builder = (
            MigrationBuilder.create()
            .with_(MinVersionMigrator)
            .with_(RemoveLegacyEtmKeyMigrator, 6, 7)
        )
        await builder.migrate(helper)
    """

    def __init__(self, steps: tuple[MigrationStep, ...], current_version: int) -> None:
        self._steps = steps
        self._current_version = current_version

    @classmethod
    def create(cls, baseline: int = 0) -> MigrationBuilder:
        return cls((), baseline)

    @property
    def current_version(self) -> int:
        return self._current_version

    @property
    def steps(self) -> tuple[MigrationStep, ...]:
        return self._steps

    def with_(
        self,
        migrator: MigratorSpec,
        from_version: int | None = None,
        to_version: int | None = None,
    ) -> MigrationBuilder:
        """Append a forward step starting at the tracked version."""
        instance = _instantiate(migrator, from_version, to_version)
        if instance.from_version != self._current_version:
            raise ChainValidationError(
                f"{instance.name} migrates from version {instance.from_version}, "
                f"but the chain is at version {self._current_version}"
            )
        step = MigrationStep(instance, Direction.UP)
        return MigrationBuilder(self._steps + (step,), instance.to_version)

    def rollback(
        self,
        migrator: MigratorSpec,
        to_version: int | None = None,
        from_version: int | None = None,
    ) -> MigrationBuilder:
        """Append a reverse step taking the store from `to_version` back to `from_version`."""
        instance = _instantiate(migrator, from_version, to_version)
        if instance.to_version != self._current_version:
            raise ChainValidationError(
                f"{instance.name} rolls back from version {instance.to_version}, "
                f"but the chain is at version {self._current_version}"
            )
        step = MigrationStep(instance, Direction.DOWN)
        return MigrationBuilder(self._steps + (step,), instance.from_version)

    async def migrate(self, helper: MigrationHelper) -> None:
        """Run every step in order, each one finished before the next starts.

        Errors are not caught: the store is left at whatever version the
        last completed step recorded.
        """
        for step in self._steps:
            await self._run_step(step, helper)

    async def _run_step(self, step: MigrationStep, helper: MigrationHelper) -> None:
        migrator, direction = step.migrator, step.direction
        label = f"Migrator {migrator.name} (to version {migrator.to_version})"

        if step.already_applied(helper.current_version):
            helper.info(
                f"{label} already applied at version {helper.current_version} - {direction.value}"
            )
            return

        should_migrate = await migrator.should_migrate(helper, direction)
        helper.info(f"{label} should migrate: {should_migrate} - {direction.value}")
        if not should_migrate:
            return

        if direction == Direction.UP:
            await migrator.migrate(helper)
        else:
            await migrator.rollback(helper)
        helper.info(f"{label} migrated - {direction.value}")

        await migrator.update_version(helper, direction)
        helper.info(f"{label} updated version - {direction.value}")
