"""
Command Dispatcher Module

Routes a decoded argument vector to the key-value store and produces the
Response to send back.

Commands (name is case-insensitive):
    get <key>          -> OK <value> | NOT_FOUND
    set <key> <value>  -> OK
    del <key>          -> OK

Any other shape is answered with ERR "Unknown command".
"""

import logging
from typing import Sequence

from .commands import Response
from ..store.kvstore import KVStore

logger = logging.getLogger(__name__)


class CommandDispatcher:
    """
    Executes commands against a KVStore.

    Usage:
        dispatcher = CommandDispatcher(KVStore())
        response = dispatcher.dispatch([b"set", b"k", b"v"])
    """

    def __init__(self, store: KVStore):
        self.store = store

    def dispatch(self, argv: Sequence[bytes]) -> Response:
        """
        Execute one command.

        Args:
            argv: Decoded argument vector, command name first

        Returns:
            Response for the command. Never raises for an unrecognized
            shape; that is reported as an ERR response instead.
        """
        if not argv:
            return Response.unknown_command()

        name = bytes(argv[0]).lower()

        if name == b"get" and len(argv) == 2:
            return self._do_get(argv[1])
        if name == b"set" and len(argv) == 3:
            return self._do_set(argv[1], argv[2])
        if name == b"del" and len(argv) == 2:
            return self._do_del(argv[1])

        logger.debug(f"Unknown command: {name!r} with {len(argv)} args")
        return Response.unknown_command()

    def _do_get(self, key: bytes) -> Response:
        value = self.store.get(key)
        if value is None:
            return Response.not_found()
        return Response.ok(value)

    def _do_set(self, key: bytes, value: bytes) -> Response:
        self.store.set(key, value)
        return Response.ok()

    def _do_del(self, key: bytes) -> Response:
        self.store.delete(key)
        return Response.ok()
