import os
import socket

import pytest

from minnow.file_descriptor import FileDescriptor
from minnow.sockets import LocalStreamSocket
from minnow.stream_copy import bidirectional_stream_copy


@pytest.fixture
def connected():
    ours, peer = socket.socketpair()
    peer.settimeout(5)
    sock = LocalStreamSocket(FileDescriptor(ours.detach()))
    yield sock, peer
    peer.close()
    if not sock.closed():
        sock.close()


def _recv_all(peer):
    chunks = []
    while True:
        chunk = peer.recv(4096)
        if not chunk:
            return b"".join(chunks)
        chunks.append(chunk)


def test_copies_both_directions(connected, capsys):
    sock, peer = connected
    in_r, in_w = os.pipe()
    out_r, out_w = os.pipe()
    os.write(in_w, b"to peer")
    os.close(in_w)
    peer.sendall(b"from peer")
    peer.shutdown(socket.SHUT_WR)

    bidirectional_stream_copy(sock, "peer", FileDescriptor(in_r), FileDescriptor(out_w))

    try:
        assert os.read(out_r, 100) == b"from peer"
        assert os.read(out_r, 100) == b""
    finally:
        os.close(out_r)
    assert _recv_all(peer) == b"to peer"
    err = capsys.readouterr().err
    assert "DEBUG: Outbound stream to peer finished." in err
    assert "DEBUG: Inbound stream from peer finished." in err


def test_empty_streams_finish(connected, capsys):
    sock, peer = connected
    in_r, in_w = os.pipe()
    out_r, out_w = os.pipe()
    os.close(in_w)
    peer.shutdown(socket.SHUT_WR)

    bidirectional_stream_copy(sock, "nobody", FileDescriptor(in_r), FileDescriptor(out_w))

    try:
        assert os.read(out_r, 100) == b""
    finally:
        os.close(out_r)
    assert _recv_all(peer) == b""
    err = capsys.readouterr().err
    assert "Inbound stream from nobody finished." in err
    assert "uncleanly" not in err