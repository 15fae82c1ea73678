"""State migration engine.

Migrations are Python modules in this package, named
`m_NNN_description.py` where NNN is the version they migrate to. Each
defines one `Migrator` subclass; `registry.py` chains them in order.
"""

from keyshift.migrations.builder import MigrationBuilder, MigrationStep
from keyshift.migrations.helper import MigrationHelper
from keyshift.migrations.migrator import IRREVERSIBLE, Direction, Migrator
from keyshift.migrations.registry import (
    CURRENT_VERSION,
    MIN_VERSION,
    create_migration_builder,
)

__all__ = [
    "CURRENT_VERSION",
    "Direction",
    "IRREVERSIBLE",
    "MIN_VERSION",
    "MigrationBuilder",
    "MigrationHelper",
    "MigrationStep",
    "Migrator",
    "create_migration_builder",
]
