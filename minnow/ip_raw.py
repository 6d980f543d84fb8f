"""Send a UDP datagram through a raw IP socket."""

from __future__ import annotations

import socket
import sys

from minnow.address import Address
from minnow.sockets import DatagramSocket


class RawSocket(DatagramSocket):
    """A raw IPv4 socket for the UDP protocol."""

    def __init__(self) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_RAW, socket.IPPROTO_UDP)

    def send_udp_packet(self, address: Address, message: bytes | str) -> None:
        """Send ``message`` to ``address``."""
        payload = message.encode() if isinstance(message, str) else message
        self.sendto(address, payload)


def main(argv: list[str] | None = None) -> int:
    """Send a greeting to the local host."""
    sock = RawSocket()
    sock.send_udp_packet(Address("127.0.0.1", 12345), b"Hello UDP!")
    return 0


if __name__ == "__main__":
    sys.exit(main())