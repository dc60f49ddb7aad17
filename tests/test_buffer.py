"""
Tests for the bounded ByteBuffer used as a connection read buffer.

Run with: python -m pytest tests/test_buffer.py -v
"""

import pytest

from kvloop.network.buffer import BufferOverflowError, ByteBuffer


class TestByteBuffer:

    def test_starts_empty(self):
        buf = ByteBuffer(16)
        assert len(buf) == 0
        assert not buf
        assert buf.remaining == 16

    def test_append_and_peek(self):
        buf = ByteBuffer(16)
        buf.append(b"hello")
        buf.append(b" world")

        assert buf.peek() == b"hello world"
        assert bytes(buf) == b"hello world"
        assert buf.remaining == 5

    def test_append_to_exact_capacity(self):
        buf = ByteBuffer(4)
        buf.append(b"abcd")
        assert buf.remaining == 0

    def test_overflow_rejected_and_buffer_unchanged(self):
        buf = ByteBuffer(4)
        buf.append(b"abc")

        with pytest.raises(BufferOverflowError):
            buf.append(b"de")
        assert buf.peek() == b"abc"

    def test_overflow_is_value_error(self):
        assert issubclass(BufferOverflowError, ValueError)

    def test_consume_prefix(self):
        buf = ByteBuffer(16)
        buf.append(b"frame1frame2")
        buf.consume(6)

        assert buf.peek() == b"frame2"
        assert buf.remaining == 10

    def test_consume_everything(self):
        buf = ByteBuffer(8)
        buf.append(b"abc")
        buf.consume(3)
        assert len(buf) == 0

    @pytest.mark.parametrize("n", [-1, 4])
    def test_consume_out_of_range(self, n):
        buf = ByteBuffer(8)
        buf.append(b"abc")
        with pytest.raises(ValueError):
            buf.consume(n)

    def test_peek_is_a_copy(self):
        buf = ByteBuffer(8)
        buf.append(b"abc")
        snapshot = buf.peek()
        buf.consume(1)
        assert snapshot == b"abc"

    def test_clear(self):
        buf = ByteBuffer(8)
        buf.append(b"abc")
        buf.clear()
        assert buf.remaining == 8

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            ByteBuffer(0)
