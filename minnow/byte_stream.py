"""A bounded in-memory byte stream with separate writer and reader views."""

from __future__ import annotations


class ByteStream:
    """A FIFO of bytes holding at most ``capacity`` unread bytes at a time."""

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        self._capacity = capacity
        self._buffer = bytearray()
        self._bytes_pushed = 0
        self._bytes_popped = 0
        self._closed = False
        self._error = False
        self._reader = Reader(self)
        self._writer = Writer(self)

    def reader(self) -> Reader:
        """The reading side of the stream."""
        return self._reader

    def writer(self) -> Writer:
        """The writing side of the stream."""
        return self._writer

    def set_error(self) -> None:
        """Signal that the stream suffered an error."""
        self._error = True

    def has_error(self) -> bool:
        """Whether the stream has had an error."""
        return self._error

    def __repr__(self) -> str:
        return (
            f"ByteStream(capacity={self._capacity}, buffered={len(self._buffer)}, "
            f"pushed={self._bytes_pushed}, popped={self._bytes_popped}, "
            f"closed={self._closed}, error={self._error})"
        )


class Writer:
    """The writing side of a :class:`ByteStream`."""

    def __init__(self, stream: ByteStream) -> None:
        self._stream = stream

    def push(self, data: bytes) -> None:
        """Append as much of ``data`` as the available capacity allows."""
        to_push = min(self.available_capacity(), len(data))
        if to_push > 0:
            stream = self._stream
            stream._buffer += data[:to_push]
            stream._bytes_pushed += to_push

    def close(self) -> None:
        """Signal that nothing more will be written."""
        self._stream._closed = True

    def is_closed(self) -> bool:
        """Whether the stream has been closed."""
        return self._stream._closed

    def available_capacity(self) -> int:
        """How many bytes can be pushed right now."""
        return self._stream._capacity - len(self._stream._buffer)

    def bytes_pushed(self) -> int:
        """Total number of bytes ever pushed."""
        return self._stream._bytes_pushed


class Reader:
    """The reading side of a :class:`ByteStream`."""

    def __init__(self, stream: ByteStream) -> None:
        self._stream = stream

    def peek(self) -> bytes:
        """The bytes currently buffered, without removing them."""
        return bytes(self._stream._buffer)

    def pop(self, length: int) -> None:
        """Remove up to ``length`` bytes from the front of the buffer."""
        stream = self._stream
        count = min(max(length, 0), self.bytes_buffered())
        del stream._buffer[:count]
        stream._bytes_popped += count

    def is_finished(self) -> bool:
        """Whether the stream is closed and fully popped."""
        return self.bytes_buffered() == 0 and self._stream._closed

    def bytes_buffered(self) -> int:
        """Number of bytes pushed but not yet popped."""
        return self._stream._bytes_pushed - self._stream._bytes_popped

    def bytes_popped(self) -> int:
        """Total number of bytes ever popped."""
        return self._stream._bytes_popped


def read(reader: Reader, max_len: int) -> bytes:
    """Peek and pop up to ``max_len`` bytes from ``reader``."""
    out = bytearray()
    while reader.bytes_buffered() and len(out) < max_len:
        view = reader.peek()
        if not view:
            raise RuntimeError("Reader.peek() returned empty bytes")
        view = view[: max_len - len(out)]
        out += view
        reader.pop(len(view))
    return bytes(out)