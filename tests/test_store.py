"""
Tests for the Key-Value Store

These tests verify the KVStore operations:
- set(): Insert or overwrite key-value pairs
- get(): Retrieve values by key
- delete(): Remove key-value pairs
- exists(), size(), clear(), get_stats()

Run with: python -m pytest tests/test_store.py -v
"""

from kvloop.store.kvstore import KVStore


class TestKVStoreSet:
    """Test set() method."""

    def test_set_new_key(self, store: KVStore):
        store.set(b"key1", b"value1")
        assert store.size() == 1
        assert store.get(b"key1") == b"value1"

    def test_set_overwrites(self, store: KVStore):
        store.set(b"key1", b"value1")
        store.set(b"key1", b"value2")

        assert store.get(b"key1") == b"value2"
        assert store.size() == 1  # Size should not increase

    def test_set_empty_value(self, store: KVStore):
        """An empty value is stored, not treated as absent."""
        store.set(b"key", b"")
        assert store.get(b"key") == b""
        assert store.exists(b"key")

    def test_set_binary_data(self, store: KVStore):
        store.set(b"\x00\xff", b"\r\n \x00")
        assert store.get(b"\x00\xff") == b"\r\n \x00"

    def test_no_capacity_bound(self, store: KVStore):
        for i in range(5000):
            store.set(f"key{i}".encode(), b"v")
        assert store.size() == 5000
        assert store.get(b"key0") == b"v"


class TestKVStoreGet:
    """Test get() method."""

    def test_get_missing(self, store: KVStore):
        assert store.get(b"nonexistent") is None

    def test_get_is_case_sensitive(self, store: KVStore):
        store.set(b"Key", b"value")
        assert store.get(b"key") is None


class TestKVStoreDelete:
    """Test delete() method."""

    def test_delete_existing(self, store: KVStore):
        store.set(b"key", b"value")
        assert store.delete(b"key") is True
        assert store.get(b"key") is None
        assert store.size() == 0

    def test_delete_missing(self, store: KVStore):
        assert store.delete(b"nonexistent") is False

    def test_delete_key_with_empty_value(self, store: KVStore):
        store.set(b"key", b"")
        assert store.delete(b"key") is True
        assert not store.exists(b"key")


class TestKVStoreMisc:
    """Test exists(), clear() and get_stats()."""

    def test_exists(self, store: KVStore):
        assert not store.exists(b"key")
        store.set(b"key", b"value")
        assert store.exists(b"key")

    def test_clear(self, store: KVStore):
        store.set(b"a", b"1")
        store.set(b"b", b"2")
        store.clear()
        assert store.size() == 0

    def test_stats(self, store: KVStore):
        store.set(b"ab", b"123")
        store.set(b"c", b"")

        stats = store.get_stats()
        assert stats["total_keys"] == 2
        assert stats["total_bytes"] == 6

    def test_instances_are_independent(self):
        first, second = KVStore(), KVStore()
        first.set(b"key", b"value")
        assert second.get(b"key") is None
