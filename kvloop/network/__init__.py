"""Network module for KV-Loop."""

from .buffer import BufferOverflowError, ByteBuffer
from .connection import Connection, ConnectionState
from .tcp_server import KVServer, create_listening_socket

__all__ = [
    "BufferOverflowError",
    "ByteBuffer",
    "Connection",
    "ConnectionState",
    "KVServer",
    "create_listening_socket",
]
