"""Network sockets built on :class:`FileDescriptor`."""

from __future__ import annotations

import socket
import struct
from collections.abc import Iterator
from contextlib import contextmanager

from minnow.address import Address
from minnow.errors import UnixError
from minnow.file_descriptor import READ_BUFFER_SIZE, FileDescriptor

_SOL_PACKET = 263
_PACKET_ADD_MEMBERSHIP = 1
_PACKET_MR_PROMISC = 1
_AF_PACKET = getattr(socket, "AF_PACKET", 17)


class Socket(FileDescriptor):
    """Base class for network sockets."""

    def __init__(
        self,
        domain: int,
        sock_type: int,
        protocol: int = 0,
        fd: FileDescriptor | None = None,
    ) -> None:
        if fd is None:
            try:
                raw = socket.socket(domain, sock_type, protocol)
            except OSError as exc:
                raise UnixError("socket", exc.errno or 0) from exc
            super().__init__(raw.detach())
            return

        self._wrapper = fd._wrapper
        checks = (
            (socket.SO_DOMAIN, domain, "domain"),
            (socket.SO_TYPE, sock_type, "type"),
            (socket.SO_PROTOCOL, protocol, "protocol"),
        )
        for option, expected, what in checks:
            if self._getsockopt(socket.SOL_SOCKET, option) != expected:
                raise RuntimeError(f"socket {what} mismatch")

    @classmethod
    def _wrap(cls, fd: FileDescriptor, domain: int, sock_type: int, protocol: int = 0) -> Socket:
        obj = cls.__new__(cls)
        Socket.__init__(obj, domain, sock_type, protocol, fd)
        return obj

    @contextmanager
    def _borrowed(self) -> Iterator[socket.socket]:
        """A ``socket.socket`` over this descriptor that never closes it."""
        try:
            sock = socket.socket(fileno=self.fd_num())
        except OSError as exc:
            raise UnixError("socket", exc.errno or 0) from exc
        try:
            sock.setblocking(not self._wrapper.non_blocking)
            yield sock
        finally:
            sock.detach()

    def _getsockopt(self, level: int, option: int) -> int:
        with self._borrowed() as sock:
            return self._call("getsockopt", sock.getsockopt, level, option)

    def _setsockopt(self, level: int, option: int, value: int | bytes) -> None:
        with self._borrowed() as sock:
            self._call("setsockopt", sock.setsockopt, level, option, value)

    def _address(self, attempt: str, method: str) -> Address:
        with self._borrowed() as sock:
            name = self._call(attempt, getattr(sock, method))
            return Address.from_sockaddr(sock.family, name)

    def bind(self, address: Address) -> None:
        """Bind to a local address."""
        with self._borrowed() as sock:
            self._call("bind", sock.bind, address.sockaddr)

    def bind_to_device(self, device_name: str) -> None:
        """Bind to a network device by name."""
        self._setsockopt(socket.SOL_SOCKET, socket.SO_BINDTODEVICE, device_name.encode())

    def connect(self, address: Address) -> None:
        """Connect to a peer address."""
        with self._borrowed() as sock:
            self._call("connect", sock.connect, address.sockaddr)

    def shutdown(self, how: int) -> None:
        """Shut down reading, writing or both (``SHUT_RD``, ``SHUT_WR``, ``SHUT_RDWR``)."""
        with self._borrowed() as sock:
            self._call("shutdown", sock.shutdown, how)
        if how == socket.SHUT_RD:
            self._register_read()
        elif how == socket.SHUT_WR:
            self._register_write()
        elif how == socket.SHUT_RDWR:
            self._register_read()
            self._register_write()
        else:
            raise RuntimeError("Socket::shutdown() called with invalid `how`")

    def local_address(self) -> Address:
        """The socket's local address."""
        return self._address("getsockname", "getsockname")

    def peer_address(self) -> Address:
        """The address of the connected peer."""
        return self._address("getpeername", "getpeername")

    def set_reuseaddr(self) -> None:
        """Allow the local address to be reused sooner."""
        self._setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

    def throw_if_error(self) -> None:
        """Raise any pending error on the socket."""
        socket_error = self._getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
        if socket_error:
            raise UnixError("socket error", socket_error)


class DatagramSocket(Socket):
    """A socket that sends and receives whole datagrams."""

    def recv(self) -> tuple[Address | None, bytes]:
        """Receive one datagram and its sender.

        On a non-blocking socket with nothing waiting, returns ``(None, b"")``.
        """
        buffer = bytearray(READ_BUFFER_SIZE)
        with self._borrowed() as sock:
            result = self._call("recvfrom", sock.recvfrom_into, buffer, 0, socket.MSG_TRUNC)
            family = sock.family
        if result is None:
            return None, b""
        nbytes, source = result
        if nbytes > len(buffer):
            raise RuntimeError("recvfrom (oversized datagram)")
        self._register_read()
        return Address.from_sockaddr(family, source), bytes(buffer[:nbytes])

    def sendto(self, destination: Address, payload: bytes) -> None:
        """Send a datagram to ``destination``."""
        with self._borrowed() as sock:
            self._call("sendto", sock.sendto, payload, destination.sockaddr)
        self._register_write()

    def send(self, payload: bytes) -> None:
        """Send a datagram to the connected address."""
        with self._borrowed() as sock:
            self._call("send", sock.send, payload)
        self._register_write()


class UDPSocket(DatagramSocket):
    """An unbound, unconnected UDP socket."""

    def __init__(self) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_DGRAM)


class TCPSocket(Socket):
    """An unbound, unconnected TCP socket."""

    def __init__(self) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_STREAM)

    def listen(self, backlog: int = 16) -> None:
        """Mark the socket as listening for connections."""
        with self._borrowed() as sock:
            self._call("listen", sock.listen, backlog)

    def accept(self) -> TCPSocket:
        """Accept one incoming connection, blocking until one arrives."""
        self._register_read()
        with self._borrowed() as sock:
            try:
                conn, _peer = sock.accept()
            except OSError as exc:
                raise UnixError("accept", exc.errno or 0) from exc
        fd = FileDescriptor(conn.detach())
        return TCPSocket._wrap(fd, socket.AF_INET, socket.SOCK_STREAM, socket.IPPROTO_TCP)


class PacketSocket(DatagramSocket):
    """A link-layer packet socket."""

    def __init__(self, socket_type: int, protocol: int) -> None:
        super().__init__(_AF_PACKET, socket_type, protocol)

    def set_promiscuous(self) -> None:
        """Put the bound interface into promiscuous mode."""
        local = self.local_address()
        if local.family != _AF_PACKET:
            raise RuntimeError("Address::as() conversion failure")
        ifindex = socket.if_nametoindex(local.sockaddr[0])
        mreq = struct.pack("iHH8s", ifindex, _PACKET_MR_PROMISC, 0, b"")
        self._setsockopt(_SOL_PACKET, _PACKET_ADD_MEMBERSHIP, mreq)


class LocalStreamSocket(Socket):
    """A Unix-domain stream socket over an existing descriptor."""

    def __init__(self, fd: FileDescriptor) -> None:
        super().__init__(socket.AF_UNIX, socket.SOCK_STREAM, 0, fd)


class LocalDatagramSocket(DatagramSocket):
    """An unbound, unconnected Unix-domain datagram socket."""

    def __init__(self) -> None:
        super().__init__(socket.AF_UNIX, socket.SOCK_DGRAM)