"""
Protocol Status and Response Definitions

This module defines the status codes carried in response frames and the
Response value produced by the dispatcher.
"""

from dataclasses import dataclass
from enum import IntEnum


class Status(IntEnum):
    """Status codes sent as the first 4 bytes of every response body."""
    OK = 0
    ERR = 1
    NOT_FOUND = 2


@dataclass
class Response:
    """
    Represents a protocol response.

    Attributes:
        status: OK, ERR or NOT_FOUND
        payload: Status-dependent bytes (the value for a GET hit,
                 an error message for ERR, empty otherwise)
    """
    status: Status
    payload: bytes = b""

    @classmethod
    def ok(cls, payload: bytes = b"") -> "Response":
        """Create a successful response."""
        return cls(status=Status.OK, payload=payload)

    @classmethod
    def error(cls, message: str) -> "Response":
        """Create an error response."""
        return cls(status=Status.ERR, payload=message.encode())

    @classmethod
    def not_found(cls) -> "Response":
        """Create a 'not found' response for GET misses."""
        return cls(status=Status.NOT_FOUND)

    @classmethod
    def unknown_command(cls) -> "Response":
        return cls.error("Unknown command")
