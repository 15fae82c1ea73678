"""Migration helper — the only thing migrators use to touch storage.

Storage keys were built two different ways over the life of the
schema. Before version 9 everything lived in a few large JSON blobs
(`global`, one per user id) and migrators address those blobs with the
raw `get`/`set`/`remove` calls. From version 9 on, each piece of state
has its own flat key derived from a key definition:

    global_{stateDefinitionName}_{key}
    user_{userId}_{stateDefinitionName}_{key}

The helper picks a key builder for its current version so migrator
bodies never compare version numbers themselves.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Protocol

from keyshift.exceptions import KeyBuilderUnavailableError
from keyshift.storage.base import AbstractStorageService
from keyshift.types import (
    AccountEntry,
    ClientType,
    KeyDefinitionLike,
    MigrationHelperType,
    UserId,
    key_definition,
)

logger = logging.getLogger(__name__)

# First version whose state lives under flat, key-definition derived keys.
STATE_PROVIDER_VERSION = 9
# First version whose known accounts are read from the global accounts map.
GLOBAL_ACCOUNTS_VERSION = 60

AUTHENTICATED_ACCOUNTS_KEY = "authenticatedAccounts"
ACCOUNTS = key_definition("account", "accounts")


class LogService(Protocol):
    def info(self, message: str) -> None: ...


def as_dict(value: Any) -> dict[str, Any]:
    """`value` if it is a JSON object, otherwise a new empty dict.

    Legacy blobs and their sections can be null or hold a scalar. Reading
    through this turns those into "nothing to migrate".
    """
    return value if isinstance(value, dict) else {}


# ── Key builders ─────────────────────────────────────────────────


class KeyBuilder(ABC):
    """Turns key definitions into storage keys for one schema era."""

    @abstractmethod
    def global_key(self, key_definition: KeyDefinitionLike) -> str:
        ...

    @abstractmethod
    def user_key(self, user_id: UserId, key_definition: KeyDefinitionLike) -> str:
        ...


class LegacyKeyBuilder(KeyBuilder):
    """Pre-9 state is nested in blobs; there are no derived keys to build."""

    def global_key(self, key_definition: KeyDefinitionLike) -> str:
        raise KeyBuilderUnavailableError(
            "No key builder should be used for versions prior to 9."
        )

    def user_key(self, user_id: UserId, key_definition: KeyDefinitionLike) -> str:
        raise KeyBuilderUnavailableError(
            "No key builder should be used for versions prior to 9."
        )


class StateProviderKeyBuilder(KeyBuilder):
    def global_key(self, key_definition: KeyDefinitionLike) -> str:
        return f"global_{key_definition.state_definition.name}_{key_definition.key}"

    def user_key(self, user_id: UserId, key_definition: KeyDefinitionLike) -> str:
        return f"user_{user_id}_{key_definition.state_definition.name}_{key_definition.key}"


def key_builder_for(version: int) -> KeyBuilder:
    if version < STATE_PROVIDER_VERSION:
        return LegacyKeyBuilder()
    return StateProviderKeyBuilder()


# ── Helper ───────────────────────────────────────────────────────


class MigrationHelper:
    """Storage adapter handed to every migrator.

    `type` distinguishes physically separate passes over the same
    schema version (e.g. "web-disk-local" for the web client's local
    partition). It is deliberately an open string.

    The versioned accessors resolve their key before returning an
    awaitable, so using them before version 9 raises immediately.
    """

    def __init__(
        self,
        current_version: int,
        storage: AbstractStorageService,
        log: LogService | None = None,
        type: MigrationHelperType = "general",
        client_type: ClientType = ClientType.WEB,
    ) -> None:
        self._storage = storage
        self.log: LogService = log or logger
        self.type = type
        self.client_type = client_type
        self.current_version = current_version

    @property
    def current_version(self) -> int:
        return self._current_version

    @current_version.setter
    def current_version(self, version: int) -> None:
        self._current_version = version
        self._key_builder = key_builder_for(version)

    def info(self, message: str) -> None:
        self.log.info(message)

    # ── Raw access ──

    async def get(self, key: str) -> Any:
        self.info(f"Getting {key}")
        return await self._storage.get(key)

    async def set(self, key: str, value: Any) -> None:
        self.info(f"Setting {key}")
        await self._storage.save(key, value)

    async def remove(self, key: str) -> None:
        self.info(f"Removing {key}")
        await self._storage.remove(key)

    # ── Versioned access ──

    def get_from_global(self, key_definition: KeyDefinitionLike) -> Awaitable[Any]:
        return self.get(self._key_builder.global_key(key_definition))

    def set_to_global(self, key_definition: KeyDefinitionLike, value: Any) -> Awaitable[None]:
        return self.set(self._key_builder.global_key(key_definition), value)

    def remove_from_global(self, key_definition: KeyDefinitionLike) -> Awaitable[None]:
        return self.remove(self._key_builder.global_key(key_definition))

    def get_from_user(self, user_id: UserId, key_definition: KeyDefinitionLike) -> Awaitable[Any]:
        return self.get(self._key_builder.user_key(user_id, key_definition))

    def set_to_user(
        self, user_id: UserId, key_definition: KeyDefinitionLike, value: Any
    ) -> Awaitable[None]:
        return self.set(self._key_builder.user_key(user_id, key_definition), value)

    def remove_from_user(self, user_id: UserId, key_definition: KeyDefinitionLike) -> Awaitable[None]:
        return self.remove(self._key_builder.user_key(user_id, key_definition))

    # ── Accounts ──

    async def get_known_user_ids(self) -> list[UserId]:
        """Ids of every account the store knows about.

        Before version 60 the list lives at `authenticatedAccounts`;
        afterwards it is the key set of the global accounts map.
        """
        if self.current_version < GLOBAL_ACCOUNTS_VERSION:
            return list(await self.get(AUTHENTICATED_ACCOUNTS_KEY) or [])
        accounts = await self.get(self._key_builder.global_key(ACCOUNTS))
        return list(accounts or {})

    async def get_accounts(self) -> list[AccountEntry]:
        """Every known user with their legacy account blob.

        Blobs are read concurrently; the result keeps discovery order.
        A user id with nothing stored comes back with `account=None`.
        """
        user_ids = await self.get_known_user_ids()
        blobs = await asyncio.gather(*(self.get(user_id) for user_id in user_ids))
        return [
            AccountEntry(user_id=user_id, account=blob)
            for user_id, blob in zip(user_ids, blobs)
        ]
