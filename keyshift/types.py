"""Core types shared across keyshift."""

from __future__ import annotations

from enum import Enum
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict

# ── ID Types ──────────────────────────────────────────────────────────────────

UserId: TypeAlias = str

# Open-ended: "general" and "web-disk-local" are the partitions known today.
MigrationHelperType: TypeAlias = str


# ── Clients ───────────────────────────────────────────────────────────────────


class ClientType(str, Enum):
    WEB = "web"
    BROWSER = "browser"
    DESKTOP = "desktop"
    CLI = "cli"
    MOBILE = "mobile"


# ── State naming ─────────────────────────────────────────────────────────────


class StateDefinitionLike(BaseModel):
    """Names a group of related state slots."""

    model_config = ConfigDict(frozen=True)

    name: str


class KeyDefinitionLike(BaseModel):
    """Identifies one logical state slot within a state definition."""

    model_config = ConfigDict(frozen=True)

    state_definition: StateDefinitionLike
    key: str


def key_definition(state_name: str, key: str) -> KeyDefinitionLike:
    return KeyDefinitionLike(state_definition=StateDefinitionLike(name=state_name), key=key)


# ── Accounts ─────────────────────────────────────────────────────────────────


class AccountEntry(BaseModel):
    """A known user and their legacy account blob (None if nothing is stored)."""

    user_id: UserId
    account: Any = None
