"""Socket addresses, with name and service resolution."""

from __future__ import annotations

import ipaddress
import socket
from typing import Any

from minnow.errors import TaggedError

_AI_ALL = getattr(socket, "AI_ALL", 0)
_MAX_PORT = 0xFFFF


def _resolve(node: str, service: str, flags: int) -> tuple[int, Any]:
    try:
        results = socket.getaddrinfo(node, service, socket.AF_INET, 0, 0, flags)
    except socket.gaierror as exc:
        raise TaggedError(f"getaddrinfo({node}, {service})", exc.errno, exc.strerror) from exc
    if not results:
        raise RuntimeError("getaddrinfo returned successfully but with no results")
    family, _type, _proto, _canonname, sockaddr = results[0]
    return family, sockaddr


class Address:
    """A socket address: an address family together with its address value.

    ``family`` and ``sockaddr`` hold the address in the form the ``socket``
    module uses, e.g. ``(AF_INET, ("127.0.0.1", 80))``.
    """

    def __init__(self, host: str, service: int | str = 0) -> None:
        """Resolve ``host`` and ``service``.

        An integer ``service`` is a port number, and ``host`` must then be a
        dotted-quad address; a string ``service`` is resolved by name.
        """
        if isinstance(service, int):
            if not 0 <= service <= _MAX_PORT:
                raise ValueError(f"port must be between 0 and {_MAX_PORT}")
            flags = socket.AI_NUMERICHOST | socket.AI_NUMERICSERV
            service_name = str(service)
        else:
            flags = _AI_ALL
            service_name = service
        self.family, self.sockaddr = _resolve(host, service_name, flags)

    @staticmethod
    def from_sockaddr(family: int, sockaddr: Any) -> Address:
        """Wrap an address already in ``socket`` module form."""
        obj = Address.__new__(Address)
        obj.family = family
        obj.sockaddr = tuple(sockaddr) if isinstance(sockaddr, list) else sockaddr
        return obj

    @staticmethod
    def from_ipv4_numeric(ip_address: int) -> Address:
        """An IPv4 address (port 0) from its 32-bit numeric value."""
        return Address.from_sockaddr(socket.AF_INET, (str(ipaddress.IPv4Address(ip_address)), 0))

    def ip_port(self) -> tuple[str, int]:
        """The numeric IP address string and the port."""
        if self.family not in (socket.AF_INET, socket.AF_INET6):
            raise RuntimeError("Address::ip_port() called on non-Internet address")
        try:
            host, port = socket.getnameinfo(
                self.sockaddr, socket.NI_NUMERICHOST | socket.NI_NUMERICSERV
            )
        except socket.gaierror as exc:
            raise TaggedError("getnameinfo", exc.errno, exc.strerror) from exc
        return host, int(port)

    def ip(self) -> str:
        """The numeric IP address string."""
        return self.ip_port()[0]

    def port(self) -> int:
        """The port number."""
        return self.ip_port()[1]

    def ipv4_numeric(self) -> int:
        """The IPv4 address as a 32-bit integer in host order."""
        if self.family != socket.AF_INET:
            raise RuntimeError("ipv4_numeric called on non-IPV4 address")
        return int(ipaddress.IPv4Address(self.sockaddr[0]))

    def to_string(self) -> str:
        """A human-readable form such as ``8.8.8.8:53``."""
        if self.family in (socket.AF_INET, socket.AF_INET6):
            ip, port = self.ip_port()
            return f"{ip}:{port}"
        return "(non-Internet address)"

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Address.from_sockaddr({self.family!r}, {self.sockaddr!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self.family == other.family and self.sockaddr == other.sockaddr

    def __hash__(self) -> int:
        return hash((int(self.family), self.sockaddr))