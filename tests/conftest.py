"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import asyncio
import socket
import struct
import threading
from typing import Generator, Sequence, Tuple

import pytest

from kvloop.network.connection import Connection
from kvloop.network.tcp_server import KVServer, create_listening_socket
from kvloop.protocol.codec import encode_request
from kvloop.protocol.dispatcher import CommandDispatcher
from kvloop.store.kvstore import KVStore


# ============================================================================
# Store / Dispatcher Fixtures
# ============================================================================

@pytest.fixture
def store() -> KVStore:
    """Create a fresh KVStore instance."""
    return KVStore()


@pytest.fixture
def dispatcher(store: KVStore) -> CommandDispatcher:
    """Create a CommandDispatcher bound to the ``store`` fixture."""
    return CommandDispatcher(store)


# ============================================================================
# Connection Fixtures
# ============================================================================

@pytest.fixture
def socket_pair() -> Generator[Tuple[socket.socket, socket.socket], None, None]:
    """
    A connected (server side, client side) socket pair.

    The server side is non-blocking, as the event loop would leave it.
    """
    server_side, client_side = socket.socketpair()
    server_side.setblocking(False)
    client_side.settimeout(2.0)

    yield server_side, client_side

    server_side.close()
    client_side.close()


@pytest.fixture
def connection(socket_pair, dispatcher) -> Connection:
    """A Connection wrapping the server side of ``socket_pair``."""
    server_side, _ = socket_pair
    return Connection(server_side, dispatcher, max_msg_size=4096, address="test-peer")


# ============================================================================
# Server Fixtures
# ============================================================================

@pytest.fixture
def server() -> Generator[KVServer, None, None]:
    """
    Create and start a server instance for testing.

    This fixture:
    1. Binds a listening socket on an ephemeral port
    2. Runs the event loop in a background thread
    3. Yields the server for testing
    4. Stops the loop and joins the thread after the test
    """
    listener = create_listening_socket('127.0.0.1', 0)
    srv = KVServer(host='127.0.0.1', port=listener.getsockname()[1], poll_timeout=0.05)

    thread = threading.Thread(target=srv.run, args=(listener,), daemon=True)
    thread.start()

    yield srv

    srv.stop()
    thread.join(timeout=5)


@pytest.fixture
def server_port(server: KVServer) -> int:
    """Port the ``server`` fixture is listening on."""
    return server.port


# ============================================================================
# Client Fixtures
# ============================================================================

def read_status_payload(body: bytes) -> Tuple[int, bytes]:
    (status,) = struct.unpack_from("<I", body, 0)
    return status, body[4:]


class AsyncClient:
    """
    Helper class for testing server interactions.

    Provides a simple async context manager interface for
    sending command vectors and receiving decoded responses.

    Usage:
        async with AsyncClient('127.0.0.1', port) as client:
            status, payload = await client.send_command("set", "k", "v")
            assert status == 0
    """

    def __init__(self, host: str, port: int):
        self.host = host
        self.port = port
        self.reader = None
        self.writer = None

    async def connect(self) -> None:
        """Establish connection to server."""
        self.reader, self.writer = await asyncio.open_connection(
            self.host, self.port
        )

    async def disconnect(self) -> None:
        """Close connection to server."""
        if self.writer:
            self.writer.close()
            try:
                await self.writer.wait_closed()
            except ConnectionError:
                pass

    async def send_raw(self, data: bytes) -> None:
        self.writer.write(data)
        await self.writer.drain()

    async def read_response(self) -> Tuple[int, bytes]:
        """Read one response frame and return (status, payload)."""
        header = await asyncio.wait_for(self.reader.readexactly(4), timeout=5)
        (length,) = struct.unpack("<I", header)
        body = await asyncio.wait_for(self.reader.readexactly(length), timeout=5)
        return read_status_payload(body)

    async def send_command(self, *args) -> Tuple[int, bytes]:
        """
        Send a command vector and receive the response.

        Args:
            args: Command name and arguments (str or bytes)

        Returns:
            (status, payload) tuple
        """
        await self.send_raw(encode_request(to_argv(args)))
        return await self.read_response()

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()


def to_argv(args: Sequence) -> list:
    return [a if isinstance(a, bytes) else a.encode() for a in args]


@pytest.fixture
def client_factory(server_port: int):
    """
    Factory fixture to create test clients.

    Usage:
        async def test_something(client_factory):
            async with client_factory() as client:
                status, payload = await client.send_command("get", "key")
    """
    def factory() -> AsyncClient:
        return AsyncClient('127.0.0.1', server_port)
    return factory


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
