"""
Client Connection State Machine

Each accepted socket is wrapped in a Connection that moves between:

    AWAITING_REQUEST -> SENDING_RESPONSE -> AWAITING_REQUEST -> ...
    (either state) -> TERMINATED

The event loop calls handle_io() whenever the socket is ready for the
operation the current state needs. All socket calls are non-blocking; a
BlockingIOError simply ends the current round until the next readiness
notification.
"""

import logging
import socket
from enum import Enum, auto
from typing import Optional, Tuple

from .buffer import ByteBuffer
from ..config.settings import settings
from ..protocol.codec import HEADER_SIZE, ProtocolError, decode_request, encode_response
from ..protocol.dispatcher import CommandDispatcher

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Lifecycle states of a client connection."""
    AWAITING_REQUEST = auto()
    SENDING_RESPONSE = auto()
    TERMINATED = auto()


class Connection:
    """
    Buffered, non-blocking protocol handler for one client socket.

    The Connection owns its socket and is the only thing that closes it.

    Attributes:
        sock: The non-blocking client socket
        address: Peer address, for logging
        dispatcher: Executes decoded commands
        state: Current ConnectionState
        read_buffer: Received bytes not yet parsed into a full frame
        write_buffer: Encoded response currently being sent
        write_offset: How many bytes of write_buffer have been sent
        requests_served: Number of requests dispatched on this connection
    """

    def __init__(
            self,
            sock: socket.socket,
            dispatcher: CommandDispatcher,
            max_msg_size: int = None,
            address: Optional[Tuple] = None,
    ):
        self.sock = sock
        self.address = address
        self.dispatcher = dispatcher
        self.max_msg_size = max_msg_size if max_msg_size is not None else settings.MAX_MSG_SIZE

        self.state = ConnectionState.AWAITING_REQUEST
        self.read_buffer = ByteBuffer(HEADER_SIZE + self.max_msg_size)
        self.write_buffer = b""
        self.write_offset = 0
        self.requests_served = 0
        self._closed = False

    def fileno(self) -> int:
        return self.sock.fileno()

    @property
    def terminated(self) -> bool:
        return self.state is ConnectionState.TERMINATED

    def handle_io(self) -> None:
        """
        Run one round of I/O for the current state.

        Called by the event loop when the socket is readable (while
        awaiting a request) or writable (while sending a response).
        """
        if self.state is ConnectionState.AWAITING_REQUEST:
            self._state_request()
        elif self.state is ConnectionState.SENDING_RESPONSE:
            self._state_response()
            if self.state is ConnectionState.AWAITING_REQUEST:
                # Pipelined frames may have arrived while the response was
                # stuck behind backpressure.
                self._process_requests()

    def close(self) -> None:
        """Close the socket. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self.state = ConnectionState.TERMINATED
        try:
            self.sock.close()
        except OSError as exc:
            logger.debug(f"Error closing socket for {self.address}: {exc}")

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def _state_request(self) -> None:
        while self._try_fill_buffer():
            pass

    def _try_fill_buffer(self) -> bool:
        """
        Perform one non-blocking read and process any complete frames.

        Returns:
            True if the caller should read again, False once the socket
            would block or the state changed.
        """
        try:
            data = self.sock.recv(self.read_buffer.remaining)
        except BlockingIOError:
            return False
        except OSError as exc:
            logger.warning(f"read() error from {self.address}: {exc}")
            self.state = ConnectionState.TERMINATED
            return False

        if not data:
            if self.read_buffer:
                logger.warning(
                    f"unexpected EOF from {self.address} "
                    f"with {len(self.read_buffer)} bytes buffered"
                )
            else:
                logger.debug(f"EOF from {self.address}")
            self.state = ConnectionState.TERMINATED
            return False

        self.read_buffer.append(data)
        self._process_requests()
        return self.state is ConnectionState.AWAITING_REQUEST

    def _process_requests(self) -> None:
        while self._try_one_request():
            pass

    def _try_one_request(self) -> bool:
        """
        Parse, dispatch and start sending one request from the read buffer.

        Returns:
            True if a request was fully handled and its response fully
            flushed, so the next buffered frame may be processed.
        """
        try:
            decoded = decode_request(self.read_buffer.peek(), self.max_msg_size)
        except ProtocolError as exc:
            logger.warning(f"Protocol error from {self.address}: {exc}")
            self.state = ConnectionState.TERMINATED
            return False

        if decoded is None:
            return False

        argv, consumed = decoded
        response = self.dispatcher.dispatch(argv)
        self.requests_served += 1

        self.write_buffer = encode_response(response.status, response.payload)
        self.write_offset = 0
        self.read_buffer.consume(consumed)

        self.state = ConnectionState.SENDING_RESPONSE
        self._state_response()
        return self.state is ConnectionState.AWAITING_REQUEST

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def _state_response(self) -> None:
        while self._try_flush_buffer():
            pass

    def _try_flush_buffer(self) -> bool:
        """
        Perform one non-blocking write of the unsent response tail.

        Returns:
            True if data is still pending and the write may be retried now.
        """
        try:
            sent = self.sock.send(self.write_buffer[self.write_offset:])
        except BlockingIOError:
            return False
        except OSError as exc:
            logger.warning(f"write() error to {self.address}: {exc}")
            self.state = ConnectionState.TERMINATED
            return False

        self.write_offset += sent

        if self.write_offset == len(self.write_buffer):
            self.write_buffer = b""
            self.write_offset = 0
            self.state = ConnectionState.AWAITING_REQUEST
            return False

        return True
