"""
Event Loop TCP Server Module

This module implements the single-threaded, readiness-based TCP server
for KV-Loop.

One selector watches the listening socket plus every client socket. Each
client is interested in exactly one kind of readiness at a time: readable
while it awaits a request, writable while it has a response to flush. The
only blocking call is the selector wait, bounded by a timeout so the loop
can notice a stop request even when idle.
"""

import logging
import selectors
import socket
from typing import Dict, Optional

from .connection import Connection, ConnectionState
from ..config.settings import settings
from ..protocol.dispatcher import CommandDispatcher
from ..store.kvstore import KVStore

logger = logging.getLogger(__name__)


def create_listening_socket(
        host: str = None,
        port: int = None,
        backlog: int = None,
) -> socket.socket:
    """
    Create a TCP socket bound to (host, port) and listening.

    SO_REUSEADDR is set so the server can be restarted on the same port
    right away. Port 0 binds an ephemeral port.

    Raises:
        OSError: If the socket cannot be created, bound or put in
                 listening mode.
    """
    host = host if host is not None else settings.HOST
    port = port if port is not None else settings.PORT
    backlog = backlog if backlog is not None else settings.BACKLOG

    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.listen(backlog)
    except OSError:
        sock.close()
        raise
    return sock


class KVServer:
    """
    Readiness-driven TCP server for the KV-Loop service.

    All clients are served from one thread. Connections never block the
    loop: reads and writes are non-blocking and resume on the next
    readiness notification.

    Usage:
        server = KVServer(host='0.0.0.0', port=8080)
        server.start()  # Runs until stop() is called

    Attributes:
        host: Server bind address (e.g., '0.0.0.0')
        port: Server port number (e.g., 8080)
        store: The KVStore instance shared by all connections
        dispatcher: Executes decoded commands against the store
        max_msg_size: Largest accepted request body
        poll_timeout: Upper bound, in seconds, on one selector wait
    """

    def __init__(
            self,
            host: str = None,
            port: int = None,
            store: KVStore = None,
            max_msg_size: int = None,
            poll_timeout: float = None,
    ):
        self.host = host if host is not None else settings.HOST
        self.port = port if port is not None else settings.PORT
        self.store = store if store is not None else KVStore()
        self.dispatcher = CommandDispatcher(self.store)
        self.max_msg_size = max_msg_size if max_msg_size is not None else settings.MAX_MSG_SIZE
        self.poll_timeout = poll_timeout if poll_timeout is not None else settings.POLL_TIMEOUT

        # fd -> Connection
        self.connections: Dict[int, Connection] = {}

        # Server state
        self._selector: Optional[selectors.BaseSelector] = None
        self._listener: Optional[socket.socket] = None
        self._running = False
        self._stop_requested = False
        self._connection_count = 0
        self._total_requests = 0

    def start(self) -> None:
        """
        Create the listening socket and run the event loop.

        Example:
            server = KVServer(port=8080)
            server.start()
        """
        listener = create_listening_socket(self.host, self.port)
        self.run(listener)

    def run(self, listener: socket.socket) -> None:
        """
        Run the event loop on an already bound, listening socket.

        Blocks until stop() is called. On exit every client connection and
        the listener are closed.

        Raises:
            OSError: If the selector itself fails.
        """
        if self._running:
            return

        listener.setblocking(False)
        self._listener = listener
        self.host, self.port = listener.getsockname()[:2]
        self._selector = selectors.DefaultSelector()
        self._selector.register(listener, selectors.EVENT_READ, data=None)
        self._running = True

        logger.info(f"Serving on {self.host}:{self.port}")

        try:
            while not self._stop_requested:
                self._poll_once()
        finally:
            self._shutdown()

    def stop(self) -> None:
        """
        Ask the event loop to exit.

        The loop notices the request after the current selector wait, which
        is bounded by poll_timeout.
        """
        self._stop_requested = True

    def is_running(self) -> bool:
        """Check if the server is currently running."""
        return self._running

    def _poll_once(self) -> None:
        events = self._selector.select(timeout=self.poll_timeout)

        for key, _mask in events:
            if key.data is None:
                continue
            conn: Connection = key.data
            conn.handle_io()
            self._after_io(conn)

        # Accept after servicing existing clients so new sockets join the
        # next round.
        if any(key.data is None for key, _mask in events):
            self._accept_new_connections()

    def _after_io(self, conn: Connection) -> None:
        """Update interest for ``conn`` or destroy it if it terminated."""
        if conn.state is ConnectionState.TERMINATED:
            self._close_connection(conn)
            return

        events = (
            selectors.EVENT_READ
            if conn.state is ConnectionState.AWAITING_REQUEST
            else selectors.EVENT_WRITE
        )
        if self._selector.get_key(conn.sock).events != events:
            self._selector.modify(conn.sock, events, data=conn)

    def _accept_new_connections(self) -> None:
        """Accept every connection that is pending on the listener."""
        while True:
            try:
                client_sock, address = self._listener.accept()
            except BlockingIOError:
                return
            except OSError as exc:
                logger.error(f"accept() error: {exc}")
                return

            client_sock.setblocking(False)
            conn = Connection(
                client_sock,
                self.dispatcher,
                max_msg_size=self.max_msg_size,
                address=address,
            )
            self.connections[client_sock.fileno()] = conn
            self._selector.register(client_sock, selectors.EVENT_READ, data=conn)
            self._connection_count += 1
            logger.debug(f"Client connected: {address}")

    def _close_connection(self, conn: Connection) -> None:
        fd = conn.fileno()
        if fd < 0 or self.connections.get(fd) is not conn:
            return

        self._selector.unregister(conn.sock)
        del self.connections[fd]
        self._total_requests += conn.requests_served
        conn.close()
        logger.debug(f"Client disconnected: {conn.address}")

    def _shutdown(self) -> None:
        for conn in list(self.connections.values()):
            self._close_connection(conn)
        self.connections.clear()

        if self._selector is not None:
            self._selector.close()
            self._selector = None
        if self._listener is not None:
            self._listener.close()
            self._listener = None

        self._running = False
        self._stop_requested = False
        logger.info("Server stopped")

    def get_stats(self) -> dict:
        """
        Get server statistics.

        Returns:
            Dictionary with server stats including connection counts,
            request counts, and store statistics.
        """
        return {
            "running": self._running,
            "host": self.host,
            "port": self.port,
            "active_connections": len(self.connections),
            "total_connections": self._connection_count,
            "total_requests": self._total_requests + sum(
                conn.requests_served for conn in self.connections.values()
            ),
            "store_stats": self.store.get_stats(),
        }
