"""The registered migration chain, oldest first.

Adding a migration means writing an `m_NNN_description.py` module and
appending one `.with_()` line here; CURRENT_VERSION must follow the
last step's target version.
"""

from __future__ import annotations

from keyshift.exceptions import ChainValidationError
from keyshift.migrations.builder import MigrationBuilder
from keyshift.migrations.m_006_min_version import MIN_VERSION, MinVersionMigrator
from keyshift.migrations.m_007_remove_legacy_etm_key import RemoveLegacyEtmKeyMigrator
from keyshift.migrations.m_008_move_state_version import MoveStateVersionMigrator
from keyshift.migrations.m_009_move_browser_settings_to_global import (
    MoveBrowserSettingsToGlobalMigrator,
)
from keyshift.migrations.m_010_ever_had_user_key import EverHadUserKeyMigrator
from keyshift.migrations.m_011_server_config import ServerConfigMigrator
from keyshift.migrations.m_012_vault_timeout_settings import VaultTimeoutSettingsMigrator
from keyshift.migrations.m_013_theme import ThemeMigrator

CURRENT_VERSION = 13

__all__ = [
    "CURRENT_VERSION",
    "MIN_VERSION",
    "create_migration_builder",
    "create_rollback_builder",
]


def create_migration_builder() -> MigrationBuilder:
    return (
        MigrationBuilder.create()
        .with_(MinVersionMigrator)
        .with_(RemoveLegacyEtmKeyMigrator, 6, 7)
        .with_(MoveStateVersionMigrator, 7, 8)
        .with_(MoveBrowserSettingsToGlobalMigrator, 8, 9)
        .with_(EverHadUserKeyMigrator, 9, 10)
        .with_(ServerConfigMigrator, 10, 11)
        .with_(VaultTimeoutSettingsMigrator, 11, 12)
        .with_(ThemeMigrator, 12, 13)
    )


def create_rollback_builder(start: int, target: int) -> MigrationBuilder:
    """Reverse chain taking a store at `start` down to `target`."""
    if not MIN_VERSION <= target <= start <= CURRENT_VERSION:
        raise ChainValidationError(
            f"Cannot roll back from version {start} to {target}; "
            f"supported versions are {MIN_VERSION} to {CURRENT_VERSION}"
        )
    builder = MigrationBuilder.create(start)
    for step in reversed(create_migration_builder().steps):
        migrator = step.migrator
        if migrator.from_version >= target and migrator.to_version <= start:
            builder = builder.rollback(migrator)
    return builder
