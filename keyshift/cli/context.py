"""CLI runtime context — picks a storage backend and bridges sync CLI to async."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Coroutine

from keyshift.config import settings
from keyshift.storage import (
    AbstractStorageService,
    JsonFileStorageService,
    MemoryStorageService,
    SqliteStorageService,
)

BACKENDS = ("sqlite", "json", "memory")


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def open_storage(
    backend: str | None = None, path: Path | None = None
) -> AbstractStorageService:
    """Build the configured storage backend, creating it if needed."""
    backend = backend or settings.storage_backend
    if backend == "sqlite":
        db_path = path or settings.db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)
        storage = SqliteStorageService(str(db_path))
        await storage.initialize()
        return storage
    if backend == "json":
        return JsonFileStorageService(path or settings.data_file)
    if backend == "memory":
        return MemoryStorageService()
    raise ValueError(f"Unknown storage backend '{backend}', expected one of {', '.join(BACKENDS)}")


def run_async(coro: Coroutine) -> Any:
    """Run an async coroutine from sync CLI code."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop and loop.is_running():
        import concurrent.futures
        with concurrent.futures.ThreadPoolExecutor() as pool:
            return pool.submit(asyncio.run, coro).result()
    else:
        return asyncio.run(coro)
