"""A reference-counted handle on a kernel file descriptor."""

from __future__ import annotations

import errno
import os
import sys
from collections.abc import Callable, Iterable
from typing import TypeVar

from minnow.errors import UnixError

T = TypeVar("T")

READ_BUFFER_SIZE = 16384
_WOULD_BLOCK = (errno.EAGAIN, errno.EWOULDBLOCK, errno.EINPROGRESS)


class _FDWrapper:
    """Kernel descriptor state shared by every duplicate of a FileDescriptor."""

    def __init__(self, fd: int) -> None:
        if fd < 0:
            raise RuntimeError(f"invalid fd number:{fd}")
        self.fd = fd
        self.eof = False
        self.closed = False
        self.read_count = 0
        self.write_count = 0
        self.non_blocking = False
        blocking = self.call("fcntl", os.get_blocking, fd)
        self.non_blocking = not blocking

    def call(self, attempt: str, func: Callable[..., T], *args: object) -> T | None:
        """Run ``func``; None means it would block on a non-blocking descriptor."""
        try:
            return func(*args)
        except OSError as exc:
            if self.non_blocking and exc.errno in _WOULD_BLOCK:
                return None
            raise UnixError(attempt, exc.errno or 0) from exc

    def close(self) -> None:
        self.call("close", os.close, self.fd)
        self.eof = self.closed = True

    def __del__(self) -> None:
        try:
            if not getattr(self, "closed", True):
                self.close()
        except Exception as exc:  # never raise from a finaliser
            sys.stderr.write(f"Exception destructing FDWrapper: {exc}\n")


class FileDescriptor:
    """A handle on a file descriptor; duplicates share state and the last one closes it."""

    def __init__(self, fd: int) -> None:
        self._wrapper = _FDWrapper(fd)

    @classmethod
    def _sharing(cls, wrapper: _FDWrapper) -> FileDescriptor:
        obj = cls.__new__(cls)
        obj._wrapper = wrapper
        return obj

    def _set_eof(self) -> None:
        self._wrapper.eof = True

    def _register_read(self) -> None:
        self._wrapper.read_count += 1

    def _register_write(self) -> None:
        self._wrapper.write_count += 1

    def _call(self, attempt: str, func: Callable[..., T], *args: object) -> T | None:
        return self._wrapper.call(attempt, func, *args)

    def read(self, size: int | None = None) -> bytes:
        """Read up to ``size`` bytes; returns b"" if a non-blocking read would block."""
        if not size:
            size = READ_BUFFER_SIZE
        try:
            data = os.read(self.fd_num(), size)
        except OSError as exc:
            if self._wrapper.non_blocking and exc.errno in _WOULD_BLOCK:
                return b""
            raise UnixError("read", exc.errno or 0) from exc
        self._register_read()
        if not data:
            self._wrapper.eof = True
        if len(data) > size:
            raise RuntimeError("read() read more than requested")
        return data

    def read_vectored(self, sizes: Iterable[int]) -> list[bytes]:
        """Scatter-read into buffers of the given sizes; the last one is always full-sized."""
        sizes = list(sizes)
        if not sizes:
            return []
        sizes[-1] = READ_BUFFER_SIZE
        buffers = [bytearray(n) for n in sizes]
        try:
            bytes_read = os.readv(self.fd_num(), buffers)
        except OSError as exc:
            if self._wrapper.non_blocking and exc.errno in _WOULD_BLOCK:
                return []
            raise UnixError("read", exc.errno or 0) from exc
        self._register_read()
        if bytes_read > sum(sizes):
            raise RuntimeError("read() read more than requested")

        result = []
        remaining = bytes_read
        for buf in buffers:
            if remaining >= len(buf):
                remaining -= len(buf)
                result.append(bytes(buf))
            else:
                result.append(bytes(buf[:remaining]))
                remaining = 0
        return result

    def write(self, data: bytes | Iterable[bytes]) -> int:
        """Write a buffer or a sequence of buffers; returns the number of bytes written."""
        if isinstance(data, (bytes, bytearray, memoryview)):
            buffers = [data]
        else:
            buffers = list(data)
        total = sum(len(b) for b in buffers)
        written = self._call("writev", os.writev, self.fd_num(), buffers) or 0
        self._register_write()
        if written == 0 and total != 0:
            raise RuntimeError("write returned 0 given non-empty input buffer")
        if written > total:
            raise RuntimeError("write wrote more than length of input buffer")
        return written

    def close(self) -> None:
        """Close the underlying descriptor."""
        self._wrapper.close()

    def duplicate(self) -> FileDescriptor:
        """Another handle sharing this descriptor and its state."""
        return FileDescriptor._sharing(self._wrapper)

    def set_blocking(self, blocking: bool) -> None:
        """Switch the descriptor between blocking and non-blocking mode."""
        self._call("fcntl", os.set_blocking, self.fd_num(), blocking)
        self._wrapper.non_blocking = not blocking

    def fd_num(self) -> int:
        """The underlying descriptor number."""
        return self._wrapper.fd

    def eof(self) -> bool:
        """Whether end of file has been reached."""
        return self._wrapper.eof

    def closed(self) -> bool:
        """Whether the descriptor has been closed."""
        return self._wrapper.closed

    def read_count(self) -> int:
        """How many reads have been made."""
        return self._wrapper.read_count

    def write_count(self) -> int:
        """How many writes have been made."""
        return self._wrapper.write_count

    def __enter__(self) -> FileDescriptor:
        return self

    def __exit__(self, *args: object) -> None:
        if not self.closed():
            self.close()