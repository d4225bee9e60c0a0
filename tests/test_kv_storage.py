"""Tests for the SQLModel-backed key-value storage."""

from factionboard.database.kv_storage import KeyValueStorage


def test_missing_key_returns_none(kv_storage):
    assert kv_storage.get_item("missing") is None


def test_set_and_replace(kv_storage):
    kv_storage.set_item("accounts", "[]")
    kv_storage.set_item("accounts", "[{\"id\": \"a\"}]")

    assert kv_storage.get_item("accounts") == "[{\"id\": \"a\"}]"
    assert kv_storage.keys() == ["accounts"]


def test_remove_item(kv_storage):
    kv_storage.set_item("accounts", "[]")

    kv_storage.remove_item("accounts")
    kv_storage.remove_item("accounts")

    assert kv_storage.get_item("accounts") is None
    assert kv_storage.keys() == []


def test_values_shared_through_engine(engine, kv_storage):
    kv_storage.set_item("sessions", "[]")
    assert KeyValueStorage(engine).get_item("sessions") == "[]"


def test_unicode_values(kv_storage):
    kv_storage.set_item("accounts", "Полиция ЛС")
    assert kv_storage.get_item("accounts") == "Полиция ЛС"
