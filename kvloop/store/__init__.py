"""Store module for KV-Loop."""

from .kvstore import KVStore

__all__ = ["KVStore"]
