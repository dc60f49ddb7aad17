"""Protocol module for KV-Loop."""

from .codec import (
    HEADER_SIZE,
    ProtocolError,
    decode_request,
    decode_response,
    encode_request,
    encode_response,
)
from .commands import Response, Status
from .dispatcher import CommandDispatcher

__all__ = [
    "HEADER_SIZE",
    "ProtocolError",
    "decode_request",
    "decode_response",
    "encode_request",
    "encode_response",
    "Response",
    "Status",
    "CommandDispatcher",
]
