"""
Frame Codec Module

This module encodes and decodes the length-prefixed binary protocol.

Every frame on the wire is a 4-byte little-endian length followed by that
many bytes of body:

    Request frame:  u32 len | u32 argc | ( u32 arglen | arg bytes ){argc}
    Response frame: u32 len | u32 status | payload bytes

The outer length only delimits frames in the TCP stream. The argument count
and per-argument lengths inside a request body describe the command itself,
so arguments may contain any bytes, including whitespace and NULs.

Byte order is little-endian on every host.
"""

import struct
from typing import List, Optional, Sequence, Tuple

from .commands import Response, Status
from ..config.settings import settings

U32 = struct.Struct("<I")
HEADER_SIZE = U32.size


class ProtocolError(ValueError):
    """Raised when bytes on the wire violate the framing rules."""


def _read_frame_length(buffer, max_msg_size: int) -> Optional[int]:
    """
    Return the body length declared by the frame at the head of ``buffer``.

    Returns None when the header itself is incomplete. A declared length
    above ``max_msg_size`` is rejected before waiting for the body.
    """
    if len(buffer) < HEADER_SIZE:
        return None

    (length,) = U32.unpack_from(buffer, 0)
    if length > max_msg_size:
        raise ProtocolError("too long")
    return length


def decode_request(
        buffer,
        max_msg_size: int = settings.MAX_MSG_SIZE,
) -> Optional[Tuple[List[bytes], int]]:
    """
    Decode one request frame from the start of ``buffer``.

    Args:
        buffer: Bytes-like object holding received, unparsed data
        max_msg_size: Largest accepted request body

    Returns:
        (argv, consumed) once a complete frame is available, where
        ``consumed`` is the number of bytes the frame occupies, or None
        if more data is needed.

    Raises:
        ProtocolError: If the frame is too long or its argument list is
                       inconsistent with the frame length.

    Examples:
        >>> decode_request(encode_request([b"get", b"k"]))
        ([b'get', b'k'], 20)
        >>> decode_request(b"\\x10\\x00") is None
        True
    """
    length = _read_frame_length(buffer, max_msg_size)
    if length is None:
        return None

    end = HEADER_SIZE + length
    if len(buffer) < end:
        return None

    pos = HEADER_SIZE
    if pos + U32.size > end:
        raise ProtocolError("missing argument count")
    (argc,) = U32.unpack_from(buffer, pos)
    pos += U32.size

    argv = []
    for _ in range(argc):
        if pos + U32.size > end:
            raise ProtocolError("truncated argument length")
        (arglen,) = U32.unpack_from(buffer, pos)
        pos += U32.size

        if pos + arglen > end:
            raise ProtocolError("argument runs past frame boundary")
        argv.append(bytes(buffer[pos:pos + arglen]))
        pos += arglen

    if pos != end:
        raise ProtocolError("trailing bytes after last argument")

    return argv, end


def encode_request(
        argv: Sequence[bytes],
        max_msg_size: int = settings.MAX_MSG_SIZE,
) -> bytes:
    """
    Encode a command vector as a request frame.

    Raises:
        ProtocolError: If the encoded body would exceed ``max_msg_size``.
    """
    length = U32.size + sum(U32.size + len(arg) for arg in argv)
    if length > max_msg_size:
        raise ProtocolError("too long")

    parts = [U32.pack(length), U32.pack(len(argv))]
    for arg in argv:
        parts.append(U32.pack(len(arg)))
        parts.append(bytes(arg))
    return b"".join(parts)


def encode_response(status: int, payload: bytes = b"") -> bytes:
    """
    Encode a response frame.

    The outer length covers the 4-byte status plus the payload.

    Examples:
        >>> encode_response(Status.NOT_FOUND)
        b'\\x04\\x00\\x00\\x00\\x02\\x00\\x00\\x00'
    """
    return U32.pack(U32.size + len(payload)) + U32.pack(int(status)) + payload


def decode_response(
        buffer,
        max_msg_size: int = settings.MAX_MSG_SIZE,
) -> Optional[Tuple[Response, int]]:
    """
    Decode one response frame from the start of ``buffer``.

    Returns:
        (Response, consumed), or None if more data is needed.

    Raises:
        ProtocolError: If the frame is too long, shorter than a status
                       code, or carries an unknown status.
    """
    length = _read_frame_length(buffer, max_msg_size)
    if length is None:
        return None

    end = HEADER_SIZE + length
    if len(buffer) < end:
        return None
    if length < U32.size:
        raise ProtocolError("bad response")

    (code,) = U32.unpack_from(buffer, HEADER_SIZE)
    try:
        status = Status(code)
    except ValueError:
        raise ProtocolError(f"unknown status code {code}") from None

    payload = bytes(buffer[HEADER_SIZE + U32.size:end])
    return Response(status=status, payload=payload), end
