"""Storage collaborators the migration engine reads from and writes to."""

from keyshift.storage.base import AbstractStorageService
from keyshift.storage.json_file import JsonFileStorageService
from keyshift.storage.memory import MemoryStorageService
from keyshift.storage.sqlite import SqliteStorageService

__all__ = [
    "AbstractStorageService",
    "JsonFileStorageService",
    "MemoryStorageService",
    "SqliteStorageService",
]
