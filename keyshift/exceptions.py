"""Custom exception hierarchy for keyshift."""


class KeyshiftError(Exception):
    """Base for all keyshift errors."""


class StorageError(KeyshiftError):
    """A storage backend holds a payload it cannot decode."""


class MigrationError(KeyshiftError):
    """Base for migration engine errors."""


class InvalidMigratorError(MigrationError):
    """A migrator was declared with an invalid version pair."""


class ChainValidationError(MigrationError):
    """A step does not continue from the builder's tracked version."""


class IrreversibleMigrationError(MigrationError):
    """The migration has no safe inverse and cannot be rolled back."""


class KeyBuilderUnavailableError(MigrationError):
    """Versioned key accessors were used before state version 9."""


class MissingStateVersionError(MigrationError):
    """The stored version marker was expected but not found."""


class MinVersionError(MigrationError):
    """Stored data predates the oldest version that can be migrated."""

    def __init__(self, current: int, minimum: int) -> None:
        self.current = current
        self.minimum = minimum
        super().__init__(
            "Your local data is too old to be migrated. "
            f"Your current state version is {current}, but minimum version is {minimum}."
        )
