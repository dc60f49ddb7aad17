#!/usr/bin/env python3
"""
KV-Loop Client

A small blocking client for the KV-Loop binary protocol, usable as a
library or from the command line.

Usage:
    python -m kvloop.client set greeting hello     # Run one command
    python -m kvloop.client get greeting
    python -m kvloop.client                        # Interactive prompt
    python -m kvloop.client --port 9000 del greeting

Commands:
    get <key>            - Retrieve a value
    set <key> <value>    - Store a key-value pair
    del <key>            - Delete a key
    help                 - Show this help (interactive mode)
    exit                 - Exit client (interactive mode)
"""

import argparse
import shlex
import socket
import sys
from typing import Iterable, List, Sequence

from .config.settings import settings
from .protocol.codec import ProtocolError, decode_response, encode_request
from .protocol.commands import Response

# Enable command history with arrow keys (works on Unix systems)
try:
    import readline  # noqa: F401
except ImportError:
    pass  # readline not available on Windows by default


def _to_bytes(arg) -> bytes:
    return arg if isinstance(arg, bytes) else str(arg).encode("utf-8")


class KVClient:
    """
    Simple blocking TCP client for KV-Loop.

    Usage:
        with KVClient("127.0.0.1", 8080) as client:
            client.execute("set", "k", "v")
            response = client.execute("get", "k")
    """

    def __init__(
            self,
            host: str = "localhost",
            port: int = None,
            timeout: float = 5.0,
            max_msg_size: int = None,
    ):
        self.host = host
        self.port = port if port is not None else settings.PORT
        self.timeout = timeout
        self.max_msg_size = max_msg_size if max_msg_size is not None else settings.MAX_MSG_SIZE
        self.socket = None
        self._rbuf = bytearray()

    def connect(self) -> None:
        """Connect to the server."""
        self.socket = socket.create_connection((self.host, self.port), timeout=self.timeout)

    def close(self) -> None:
        """Disconnect from the server."""
        if self.socket:
            self.socket.close()
            self.socket = None
        self._rbuf.clear()

    def send_request(self, argv: Sequence) -> None:
        """Encode and send one command vector without waiting for a reply."""
        if not self.socket:
            raise ConnectionError("not connected")
        frame = encode_request([_to_bytes(a) for a in argv], self.max_msg_size)
        self.socket.sendall(frame)

    def read_response(self) -> Response:
        """
        Block until one complete response frame has been received.

        Raises:
            ConnectionError: If the server closes the connection first.
            ProtocolError: If the response frame is malformed.
        """
        while True:
            decoded = decode_response(self._rbuf, self.max_msg_size)
            if decoded is not None:
                response, consumed = decoded
                del self._rbuf[:consumed]
                return response

            chunk = self.socket.recv(65536)
            if not chunk:
                raise ConnectionError("EOF" if not self._rbuf else "unexpected EOF")
            self._rbuf += chunk

    def execute(self, *args) -> Response:
        """Send one command and return its response."""
        self.send_request(args)
        return self.read_response()

    def pipeline(self, commands: Iterable[Sequence]) -> List[Response]:
        """
        Send every command first, then read all responses in order.
        """
        commands = list(commands)
        for argv in commands:
            self.send_request(argv)
        return [self.read_response() for _ in commands]

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def format_response(response: Response) -> str:
    """Render a response the way the CLI prints it."""
    return f"[{response.status.name}] {response.payload.decode('utf-8', errors='replace')}"


def print_help():
    """Print help message."""
    print("""
KV-Loop Commands:
-----------------
  get <key>                 Retrieve the value for a key
  set <key> <value>         Store a key-value pair
  del <key>                 Delete a key-value pair

Client Commands:
----------------
  help                      Show this help message
  exit                      Exit the client

Arguments are split shell-style, so quote values containing spaces:
  set greeting "hello world"
""")


def interactive(client: KVClient) -> None:
    """Read commands from stdin until EOF or 'exit'."""
    print("Connected! Type 'help' for commands.\n")
    while True:
        try:
            line = input(">>> ").strip()
        except EOFError:
            print("\nGoodbye!")
            return

        if not line:
            continue
        if line.lower() == "help":
            print_help()
            continue
        if line.lower() in ("exit", "quit"):
            print("Goodbye!")
            return

        try:
            argv = shlex.split(line)
        except ValueError as e:
            print(f"Parse error: {e}")
            continue

        try:
            print(format_response(client.execute(*argv)))
        except ProtocolError as e:
            print(f"Protocol error: {e}")
        except (ConnectionError, socket.timeout) as e:
            print(f"Connection error: {e}")
            return


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Command-line client for KV-Loop"
    )
    parser.add_argument(
        "--host",
        type=str,
        default="localhost",
        help="Server host (default: localhost)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help=f"Server port (default: {settings.PORT})"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=5.0,
        help="Socket timeout in seconds (default: 5.0)"
    )
    parser.add_argument(
        "command",
        nargs="*",
        help="Command and arguments to send, e.g. 'set key value'"
    )

    args = parser.parse_args(argv)

    client = KVClient(args.host, args.port, args.timeout)
    try:
        client.connect()
    except OSError as e:
        print(f"Connection error: {e}", file=sys.stderr)
        print(f"  Try: python -m kvloop.server --port {args.port}", file=sys.stderr)
        sys.exit(1)

    try:
        if args.command:
            try:
                response = client.execute(*args.command)
            except ProtocolError as e:
                print(f"Protocol error: {e}", file=sys.stderr)
                sys.exit(1)
            print(format_response(response))
        else:
            interactive(client)
    except KeyboardInterrupt:
        print("\n\nInterrupted. Goodbye!")
    finally:
        client.close()


if __name__ == "__main__":
    main()
