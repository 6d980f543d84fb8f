"""Fetch a page over plain HTTP and print the raw response."""

from __future__ import annotations

import sys

from minnow.address import Address
from minnow.sockets import TCPSocket

_PROG = "webget"


def build_request(host: str, path: str) -> bytes:
    """The HTTP/1.1 GET request for ``path`` on ``host``."""
    return f"GET {path} HTTP/1.1\r\nHost: {host}\r\nConnection: close\r\n\r\n".encode()


def get_url(host: str, path: str) -> None:
    """Request ``path`` from ``host`` on port 80 and copy the reply to standard output."""
    with TCPSocket() as sock:
        try:
            sock.connect(Address(host, "http"))
            sock.write(build_request(host, path))
            sys.stdout.flush()
            out = sys.stdout.buffer
            while not sock.eof():
                out.write(sock.read())
            out.flush()
        except Exception as exc:
            sys.stderr.write(f"Error: {exc}\n")


def main(argv: list[str] | None = None) -> int:
    """Run with a host and a path as arguments."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        if len(args) != 2:
            sys.stderr.write(f"Usage: {_PROG} HOST PATH\n")
            sys.stderr.write(f"\tExample: {_PROG} stanford.edu /class/cs144\n")
            return 1
        host, path = args
        get_url(host, path)
    except Exception as exc:
        sys.stderr.write(f"{exc}\n")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())