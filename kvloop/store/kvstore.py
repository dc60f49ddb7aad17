"""
Key-Value Store Module

This module implements the in-memory mapping behind the GET/SET/DEL
commands. It is owned by a server instance and handed to the dispatcher,
so several stores can live side by side in one process (tests do this).
"""

from typing import Any, Dict, Optional


class KVStore:
    """
    In-memory key-value store.

    Keys and values are byte strings. There is no capacity bound, no
    ordering guarantee and no expiry: a key lives until it is deleted or
    the process exits.

    The store does no locking. It is only ever touched from the event loop
    thread, which serializes every access.
    """

    def __init__(self):
        self._store: Dict[bytes, bytes] = {}

    def get(self, key: bytes) -> Optional[bytes]:
        """
        Retrieve the value for a given key.

        Args:
            key: The key to look up

        Returns:
            The stored value, or None if the key is absent
        """
        return self._store.get(key)

    def set(self, key: bytes, value: bytes) -> None:
        """Insert or overwrite a key-value pair."""
        self._store[key] = value

    def delete(self, key: bytes) -> bool:
        """
        Delete a key-value pair.

        Returns:
            True if the key was removed, False if it did not exist
        """
        return self._store.pop(key, None) is not None

    def exists(self, key: bytes) -> bool:
        return key in self._store

    def size(self) -> int:
        """Get the current number of keys in the store."""
        return len(self._store)

    def clear(self) -> None:
        """Remove all keys from the store."""
        self._store.clear()

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the store.

        Returns:
            Dictionary containing:
            - total_keys: Number of keys stored
            - total_bytes: Sum of key and value lengths
        """
        total_bytes = sum(len(k) + len(v) for k, v in self._store.items())
        return {
            "total_keys": len(self._store),
            "total_bytes": total_bytes,
        }
