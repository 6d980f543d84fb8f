"""Copy between a socket and standard input/output until both directions finish."""

from __future__ import annotations

import socket
import sys

from minnow.byte_stream import ByteStream
from minnow.eventloop import Direction, EventLoop, Result
from minnow.file_descriptor import FileDescriptor
from minnow.sockets import Socket

BUFFER_SIZE = 1048576
_STDIN_FILENO = 0
_STDOUT_FILENO = 1


def _log(message: str) -> None:
    sys.stderr.write(message)


def bidirectional_stream_copy(
    sock: Socket,
    peer_name: str,
    stdin_fd: FileDescriptor | None = None,
    stdout_fd: FileDescriptor | None = None,
) -> None:
    """Copy ``stdin_fd`` to ``sock`` and ``sock`` to ``stdout_fd`` until finished.

    The descriptors default to standard input and standard output.
    """
    loop = EventLoop()
    input_fd = stdin_fd if stdin_fd is not None else FileDescriptor(_STDIN_FILENO)
    output_fd = stdout_fd if stdout_fd is not None else FileDescriptor(_STDOUT_FILENO)
    outbound = ByteStream(BUFFER_SIZE)
    inbound = ByteStream(BUFFER_SIZE)
    outbound_shutdown = False
    inbound_shutdown = False

    sock.set_blocking(False)
    input_fd.set_blocking(False)
    output_fd.set_blocking(False)

    def fail_both(message: str) -> None:
        _log(message)
        outbound.set_error()
        inbound.set_error()

    def read_stdin() -> None:
        outbound.writer().push(input_fd.read(outbound.writer().available_capacity()))
        if input_fd.eof():
            outbound.writer().close()

    def want_stdin() -> bool:
        return (
            not outbound.has_error()
            and not inbound.has_error()
            and outbound.writer().available_capacity() > 0
            and not outbound.writer().is_closed()
        )

    loop.add_rule(
        "read from stdin into outbound byte stream",
        input_fd,
        Direction.IN,
        read_stdin,
        want_stdin,
        outbound.writer().close,
        lambda: fail_both("DEBUG: Outbound stream had error from source.\n"),
    )

    def write_socket() -> None:
        nonlocal outbound_shutdown
        reader = outbound.reader()
        if reader.bytes_buffered():
            reader.pop(sock.write(reader.peek()))
        if reader.is_finished():
            sock.shutdown(socket.SHUT_WR)
            outbound_shutdown = True
            _log(f"DEBUG: Outbound stream to {peer_name} finished.\n")

    def want_socket_write() -> bool:
        reader = outbound.reader()
        return bool(reader.bytes_buffered()) or (reader.is_finished() and not outbound_shutdown)

    loop.add_rule(
        "read from outbound byte stream into socket",
        sock,
        Direction.OUT,
        write_socket,
        want_socket_write,
        outbound.writer().close,
        lambda: fail_both("DEBUG: Outbound stream had error from destination.\n"),
    )

    def read_socket() -> None:
        inbound.writer().push(sock.read(inbound.writer().available_capacity()))
        if sock.eof():
            inbound.writer().close()

    def want_socket_read() -> bool:
        return (
            not inbound.has_error()
            and not outbound.has_error()
            and inbound.writer().available_capacity() > 0
            and not inbound.writer().is_closed()
        )

    loop.add_rule(
        "read from socket into inbound byte stream",
        sock,
        Direction.IN,
        read_socket,
        want_socket_read,
        inbound.writer().close,
        lambda: fail_both("DEBUG: Inbound stream had error from source.\n"),
    )

    def write_stdout() -> None:
        nonlocal inbound_shutdown
        reader = inbound.reader()
        if reader.bytes_buffered():
            reader.pop(output_fd.write(reader.peek()))
        if reader.is_finished():
            output_fd.close()
            inbound_shutdown = True
            ending = " uncleanly.\n" if inbound.has_error() else ".\n"
            _log(f"DEBUG: Inbound stream from {peer_name} finished{ending}")

    def want_stdout() -> bool:
        reader = inbound.reader()
        return bool(reader.bytes_buffered()) or (reader.is_finished() and not inbound_shutdown)

    loop.add_rule(
        "read from inbound byte stream into stdout",
        output_fd,
        Direction.OUT,
        write_stdout,
        want_stdout,
        inbound.writer().close,
        lambda: fail_both("DEBUG: Inbound stream had error from destination.\n"),
    )

    while loop.wait_next_event(-1) is not Result.EXIT:
        pass