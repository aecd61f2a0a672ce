"""Tests for opscentral/repositories/keyed_store.py

Run with:  pytest tests/test_keyed_store.py -v
"""

import pytest

from opscentral.repositories.keyed_store import (
    DatabaseKeyedStore,
    JsonFileKeyedStore,
    MemoryKeyedStore,
    build_keyed_store,
)


@pytest.fixture(params=["memory", "file", "database"])
def store(request, tmp_path, client):
    if request.param == "memory":
        return MemoryKeyedStore()
    if request.param == "file":
        return JsonFileKeyedStore(tmp_path, "snapshot")
    return DatabaseKeyedStore(client, "snapshot")


class TestKeyedStoreContract:
    def test_missing_key_is_none(self, store):
        assert store.get("OPS-101") is None

    def test_put_then_get(self, store):
        store.put("OPS-101", [{"id": "A1", "status": "ACTIVE"}])
        assert store.get("OPS-101") == [{"id": "A1", "status": "ACTIVE"}]

    def test_put_overwrites(self, store):
        store.put("OPS-101", [1])
        store.put("OPS-101", [2, 3])
        assert store.get("OPS-101") == [2, 3]

    def test_keys_isolated(self, store):
        store.put("OPS-101", ["a"])
        assert store.get("OPS-102") is None

    def test_empty_list_is_not_missing(self, store):
        store.put("OPS-101", [])
        assert store.get("OPS-101") == []


def test_memory_store_returns_copies():
    store = MemoryKeyedStore()
    value = [{"id": "A1"}]
    store.put("u", value)
    value[0]["id"] = "changed"
    assert store.get("u") == [{"id": "A1"}]


def test_file_store_corrupt_file_reads_as_missing(tmp_path):
    store = JsonFileKeyedStore(tmp_path, "notifications")
    store.put("OPS-101", ["x"])
    (tmp_path / "notifications_OPS-101.json").write_text("{not json", encoding="utf-8")
    assert store.get("OPS-101") is None


def test_file_store_sanitizes_user_id(tmp_path):
    store = JsonFileKeyedStore(tmp_path, "snapshot")
    store.put("../etc/passwd", [1])
    assert [p.name for p in tmp_path.iterdir()] == ["snapshot_.._etc_passwd.json"]


def test_database_namespaces_do_not_clash(client):
    snapshots = DatabaseKeyedStore(client, "snapshot")
    notifications = DatabaseKeyedStore(client, "notifications")
    snapshots.put("OPS-101", ["jobs"])
    notifications.put("OPS-101", ["notes"])
    assert snapshots.get("OPS-101") == ["jobs"]
    assert notifications.get("OPS-101") == ["notes"]


@pytest.mark.parametrize("backend,expected", [
    ("memory", MemoryKeyedStore),
    ("file", JsonFileKeyedStore),
    ("database", DatabaseKeyedStore),
    ("DATABASE ", DatabaseKeyedStore),
    ("redis", DatabaseKeyedStore),
])
def test_build_keyed_store(backend, expected, client):
    assert isinstance(build_keyed_store("snapshot", client, backend=backend), expected)
