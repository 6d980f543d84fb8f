"""Reassembly of indexed, possibly overlapping substrings into a byte stream."""

from __future__ import annotations

from bisect import bisect_left, bisect_right

from minnow.byte_stream import ByteStream, Reader, Writer


class Reassembler:
    """Writes substrings into a :class:`ByteStream` in order, buffering early arrivals.

    Bytes beyond the stream's available capacity are discarded; the stream is
    closed once the byte before the end of the last substring has been written.
    """

    def __init__(self, output: ByteStream) -> None:
        self._output = output
        self._starts: list[int] = []
        self._segments: list[bytes] = []
        self._pending = 0
        self._eof_index: int | None = None

    def insert(self, first_index: int, data: bytes, is_last_substring: bool = False) -> None:
        """Insert ``data`` whose first byte sits at stream index ``first_index``."""
        writer = self._output.writer()
        if is_last_substring:
            self._eof_index = first_index + len(data)

        first_unassembled = writer.bytes_pushed()
        first_unacceptable = first_unassembled + writer.available_capacity()
        start = max(first_index, first_unassembled)
        end = min(first_index + len(data), first_unacceptable)

        if start < end:
            self._store(start, bytes(data[start - first_index : end - first_index]))
            self._flush(writer)

        if self._eof_index is not None and writer.bytes_pushed() == self._eof_index:
            writer.close()

    def _store(self, start: int, chunk: bytes) -> None:
        end = start + len(chunk)
        lo = bisect_left(self._starts, start)
        if lo > 0 and self._starts[lo - 1] + len(self._segments[lo - 1]) >= start:
            lo -= 1
        hi = bisect_right(self._starts, end)

        merged_start = start
        if lo < hi:
            first_start, first_data = self._starts[lo], self._segments[lo]
            last_start, last_data = self._starts[hi - 1], self._segments[hi - 1]
            prefix = first_data[: start - first_start] if first_start < start else b""
            suffix = last_data[end - last_start :] if last_start + len(last_data) > end else b""
            merged_start = min(start, first_start)
            chunk = prefix + chunk + suffix
            self._pending -= sum(len(seg) for seg in self._segments[lo:hi])

        self._starts[lo:hi] = [merged_start]
        self._segments[lo:hi] = [chunk]
        self._pending += len(chunk)

    def _flush(self, writer: Writer) -> None:
        while self._starts and self._starts[0] == writer.bytes_pushed():
            chunk = self._segments.pop(0)
            self._starts.pop(0)
            self._pending -= len(chunk)
            writer.push(chunk)

    def count_bytes_pending(self) -> int:
        """Number of bytes held by the reassembler and not yet written."""
        return self._pending

    def reader(self) -> Reader:
        """The reading side of the output stream."""
        return self._output.reader()

    def writer(self) -> Writer:
        """The writing side of the output stream."""
        return self._output.writer()