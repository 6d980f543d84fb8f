"""A netcat-like tool that copies standard input/output over one TCP connection."""

from __future__ import annotations

import sys

from minnow.address import Address
from minnow.sockets import TCPSocket
from minnow.stream_copy import bidirectional_stream_copy

_PROG = "tcp_native"


def show_usage(argv0: str) -> None:
    """Print the usage message to standard error."""
    sys.stderr.write(
        f"Usage: {argv0} [-l] <host> <port>\n\n"
        "  -l specifies listen mode; <host>:<port> is the listening address.\n"
    )


def _accept_one(host: str, port: str) -> TCPSocket:
    listening = TCPSocket()
    listening.set_reuseaddr()
    listening.bind(Address(host, port))
    listening.listen()
    sys.stderr.write("DEBUG: Listening for incoming connection...\n")
    connected = listening.accept()
    sys.stderr.write(f"DEBUG: New connection from {connected.peer_address()}.\n")
    return connected


def _connect(host: str, port: str) -> TCPSocket:
    connecting = TCPSocket()
    peer = Address(host, port)
    sys.stderr.write(f"DEBUG: Connecting to {peer}... ")
    connecting.connect(peer)
    sys.stderr.write(f"DEBUG: Successfully connected to {connecting.peer_address()}.\n")
    return connecting


def main(argv: list[str] | None = None) -> int:
    """Connect (or with ``-l``, accept one connection) and copy data until done."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        server_mode = bool(args) and args[0] == "-l"
        if len(args) < 2 or (server_mode and len(args) < 3):
            show_usage(_PROG)
            return 1
        sock = _accept_one(args[1], args[2]) if server_mode else _connect(args[0], args[1])
        bidirectional_stream_copy(sock, sock.peer_address().to_string())
    except Exception as exc:
        sys.stderr.write(f"Exception: {exc}\n")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())