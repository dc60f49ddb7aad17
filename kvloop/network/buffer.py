"""
Bounded Byte Buffer

A fixed-capacity byte sequence used as a connection's read buffer. Data is
appended at the tail as it arrives from the socket and removed from the
head once a complete frame has been parsed.
"""


class BufferOverflowError(ValueError):
    """Raised when an append would exceed the buffer's capacity."""


class ByteBuffer:
    """
    Byte sequence with a hard capacity.

    Invariant: 0 <= len(buffer) <= capacity.

    Attributes:
        capacity: Maximum number of bytes the buffer may hold
    """

    __slots__ = ("capacity", "_data")

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._data = bytearray()

    def __len__(self) -> int:
        return len(self._data)

    def __bool__(self) -> bool:
        return bool(self._data)

    def __bytes__(self) -> bytes:
        return bytes(self._data)

    @property
    def remaining(self) -> int:
        """Number of bytes that can still be appended."""
        return self.capacity - len(self._data)

    def append(self, data: bytes) -> None:
        """
        Append ``data`` at the tail.

        Raises:
            BufferOverflowError: If ``data`` does not fit in the remaining
                                 capacity. The buffer is left unchanged.
        """
        if len(data) > self.remaining:
            raise BufferOverflowError(
                f"cannot append {len(data)} bytes, {self.remaining} remaining"
            )
        self._data += data

    def consume(self, n: int) -> None:
        """Remove the first ``n`` bytes."""
        if n < 0 or n > len(self._data):
            raise ValueError(f"cannot consume {n} of {len(self._data)} bytes")
        del self._data[:n]

    def peek(self) -> bytes:
        """Return a copy of the buffered bytes."""
        return bytes(self._data)

    def clear(self) -> None:
        self._data.clear()
