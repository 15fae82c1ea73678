"""Tests for moving vault timeout settings to user-scoped keys."""

import pytest

from keyshift.migrations.m_012_vault_timeout_settings import (
    VAULT_TIMEOUT,
    VAULT_TIMEOUT_ACTION,
    VaultTimeoutSettingsMigrator,
    to_legacy_timeout,
    to_timeout_option,
)
from keyshift.migrations.helper import StateProviderKeyBuilder
from keyshift.types import ClientType

USERS = [f"user{i}" for i in range(1, 8)]
LEGACY = {
    "user1": (30, "lock"),
    "user2": (None, "logOut"),
    "user3": (-1, "lock"),
    "user4": (-2, "logOut"),
    "user5": (-3, "lock"),
    "user6": (-4, "logOut"),
}
MIGRATED = {
    "user1": (30, "lock"),
    "user2": ("never", "logOut"),
    "user3": ("onRestart", "lock"),
    "user4": ("onLocked", "logOut"),
    "user5": ("onSleep", "lock"),
    "user6": ("onIdle", "logOut"),
}
OTHER = {"settings": {"otherStuff": "otherStuff"}, "otherStuff": "otherStuff"}

keys = StateProviderKeyBuilder()


def timeout_key(user_id):
    return keys.user_key(user_id, VAULT_TIMEOUT)


def action_key(user_id):
    return keys.user_key(user_id, VAULT_TIMEOUT_ACTION)


def legacy_account(timeout, action):
    return {
        "settings": {"vaultTimeout": timeout, "vaultTimeoutAction": action, "otherStuff": "otherStuff"},
        "otherStuff": "otherStuff",
    }


def pre_migration_state():
    state = {
        "authenticatedAccounts": [*USERS, "user8"],
        "global\\.vaultTimeout": -1,
        "global\\.vaultTimeoutAction": "lock",
        "global": {"vaultTimeout": 30, "vaultTimeoutAction": "lock", "otherStuff": "otherStuff"},
        "user7": {"settings": {"otherStuff": "otherStuff"}, "otherStuff": "otherStuff"},
    }
    for user_id, (timeout, action) in LEGACY.items():
        state[user_id] = legacy_account(timeout, action)
    return state


def rollback_state(cli=False):
    state = {
        "authenticatedAccounts": [*USERS, "user8"],
        "global": {"otherStuff": "otherStuff"},
    }
    for user_id in USERS:
        state[user_id] = {"settings": {"otherStuff": "otherStuff"}, "otherStuff": "otherStuff"}
    for user_id, (timeout, action) in MIGRATED.items():
        state[timeout_key(user_id)] = timeout
        state[action_key(user_id)] = action
    if cli:
        state[timeout_key("user7")] = "never"
    return state


migrator = VaultTimeoutSettingsMigrator(11, 12)


def test_timeout_option_mapping():
    """Legacy sentinels map to option names and back."""
    assert to_timeout_option(None) == "never"
    assert to_timeout_option(-1) == "onRestart"
    assert to_timeout_option(-4) == "onIdle"
    assert to_timeout_option(15) == 15
    assert to_legacy_timeout("never") is None
    assert to_legacy_timeout("onSleep") == -3
    assert to_legacy_timeout(15) == 15


# ── migrate ─────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_migrate_removes_state_service_data(make_helper):
    """Global copies and desktop raw keys are removed."""
    helper, storage = make_helper(pre_migration_state(), version=11)
    await migrator.migrate(helper)

    assert storage.saved("global") == [{"otherStuff": "otherStuff"}]
    assert "global\\.vaultTimeout" in storage.removes
    assert "global\\.vaultTimeoutAction" in storage.removes
    for user_id in LEGACY:
        assert storage.saved(user_id) == [OTHER]
    assert "user7" not in storage.saved_keys
    assert "user8" not in storage.saved_keys


@pytest.mark.asyncio
async def test_migrate_writes_user_keys(make_helper):
    """Each account's settings land in user keys."""
    helper, storage = make_helper(pre_migration_state(), version=11)
    await migrator.migrate(helper)

    for user_id, (timeout, action) in MIGRATED.items():
        assert await storage.get(timeout_key(user_id)) == timeout
        assert await storage.get(action_key(user_id)) == action
    for user_id in ("user7", "user8"):
        assert timeout_key(user_id) not in storage.saved_keys
        assert action_key(user_id) not in storage.saved_keys


@pytest.mark.asyncio
async def test_migrate_cli_defaults_missing_timeout_to_never(make_helper):
    """CLI accounts without a timeout get "never"."""
    helper, storage = make_helper(pre_migration_state(), version=11, client_type=ClientType.CLI)
    await migrator.migrate(helper)

    assert await storage.get(timeout_key("user7")) == "never"
    assert action_key("user7") not in storage.saved_keys
    assert storage.saved("user7") == [OTHER]
    assert "user8" not in storage.saved_keys
    assert timeout_key("user8") not in storage.saved_keys


@pytest.mark.asyncio
async def test_migrate_preserves_unrelated_data(run_migrator):
    """Fields the migration does not own are kept."""
    output = await run_migrator(migrator, pre_migration_state())
    assert output["global"] == {"otherStuff": "otherStuff"}
    assert output["user3"] == OTHER
    assert "global\\.vaultTimeout" not in output


@pytest.mark.asyncio
async def test_migrate_twice_equals_once(make_helper):
    """A second run writes and removes nothing."""
    helper, storage = make_helper(pre_migration_state(), version=11, client_type=ClientType.CLI)
    await migrator.migrate(helper)
    once = dict(storage.internal_store)
    storage.saves.clear()
    storage.removes.clear()

    await migrator.migrate(helper)

    assert storage.internal_store == once
    assert storage.saves == []
    assert storage.removes == []


# ── rollback ────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_rollback_nulls_user_keys(make_helper):
    """Rollback clears every user key."""
    helper, storage = make_helper(rollback_state(), version=12)
    await migrator.rollback(helper)
    for user_id in USERS:
        assert (timeout_key(user_id), None) in storage.saves
        assert (action_key(user_id), None) in storage.saves


@pytest.mark.asyncio
async def test_rollback_restores_account_settings(make_helper):
    """Rollback writes the settings back into account blobs."""
    helper, storage = make_helper(rollback_state(), version=12)
    await migrator.rollback(helper)
    for user_id, (timeout, action) in LEGACY.items():
        assert storage.saved(user_id) == [legacy_account(timeout, action)]
    assert "global" not in storage.saved_keys
    assert "user7" not in storage.saved_keys
    assert "user8" not in storage.saved_keys


@pytest.mark.asyncio
async def test_rollback_cli_restores_never_as_null(make_helper):
    """A "never" timeout goes back as null."""
    helper, storage = make_helper(rollback_state(cli=True), version=12, client_type=ClientType.CLI)
    await migrator.rollback(helper)
    assert storage.saved("user7") == [{
        "settings": {"vaultTimeout": None, "otherStuff": "otherStuff"},
        "otherStuff": "otherStuff",
    }]
    assert "user8" not in storage.saved_keys
