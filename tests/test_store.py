"""Tests for the JSON key-value store and persisted values."""

from __future__ import annotations

from policy_portal.models.policy import PolicyRecord
from policy_portal.repositories.db_pool import ThreadLocalConnection
from policy_portal.repositories.policy_repository import PolicyRepository
from policy_portal.repositories.schema import initialize_schema
from policy_portal.repositories.settings_repository import SettingsRepository
from policy_portal.repositories.store import KeyValueStore, PersistedValue


def build_store(tmp_path) -> tuple[ThreadLocalConnection, KeyValueStore]:
    pool = ThreadLocalConnection(str(tmp_path / "test.db"))
    initialize_schema(pool)
    return pool, KeyValueStore(pool)


def test_missing_key_returns_default(tmp_path) -> None:
    _, store = build_store(tmp_path)
    assert store.read("absent", []) == []
    assert PersistedValue(store, "absent", "light").get() == "light"


def test_corrupt_json_returns_default(tmp_path) -> None:
    pool, store = build_store(tmp_path)
    pool.execute("INSERT INTO kv_store (key, value) VALUES (?, ?)", ("broken", "{not json"))

    assert store.read("broken", {"fallback": True}) == {"fallback": True}


def test_persisted_value_writes_through(tmp_path) -> None:
    _, store = build_store(tmp_path)
    value = PersistedValue(store, "counter", 0)

    value.set(3)
    assert value.get() == 3
    assert store.read("counter", None) == 3

    assert value.update(lambda current: current + 1) == 4
    assert PersistedValue(store, "counter", 0).get() == 4


def test_write_overwrites_existing_key(tmp_path) -> None:
    _, store = build_store(tmp_path)
    store.write("key", ["a"])
    store.write("key", ["b", "c"])

    assert store.read("key", None) == ["b", "c"]


def test_policy_repository_survives_reload(tmp_path) -> None:
    _, store = build_store(tmp_path)
    repo = PolicyRepository(store)
    repo.save_policies([PolicyRecord(id="p1", customer_name="Rina", premium=490)])

    reloaded = PolicyRepository(store).list_policies()

    assert reloaded == [PolicyRecord(id="p1", customer_name="Rina", premium=490)]


def test_policy_repository_ignores_non_list_payload(tmp_path) -> None:
    _, store = build_store(tmp_path)
    store.write("mswasth-policies", {"not": "a list"})

    assert PolicyRepository(store).list_policies() == []


def test_theme_defaults_and_persists(tmp_path) -> None:
    _, store = build_store(tmp_path)
    settings = SettingsRepository(store)
    assert settings.get_theme() == "light"

    settings.set_theme("dracula")

    assert SettingsRepository(store).get_theme() == "dracula"
    assert store.read("mswasth-theme", None) == "dracula"
