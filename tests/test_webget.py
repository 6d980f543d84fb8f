import socket
import threading
from unittest import mock

import pytest

from minnow.webget import build_request, get_url, main


def test_build_request():
    assert build_request("stanford.edu", "/class/cs144") == (
        b"GET /class/cs144 HTTP/1.1\r\nHost: stanford.edu\r\nConnection: close\r\n\r\n"
    )


@pytest.mark.parametrize("argv", [[], ["stanford.edu"], ["a", "b", "c"]])
def test_usage(argv, capsys):
    assert main(argv) == 1
    err = capsys.readouterr().err
    assert "Usage:" in err
    assert "Example:" in err


def test_fetches_response(capsys):
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen(1)
    port = listener.getsockname()[1]
    received = bytearray()
    reply = b"HTTP/1.1 200 OK\r\nContent-Length: 5\r\n\r\nhello"

    def serve():
        conn, _ = listener.accept()
        with conn:
            conn.settimeout(5)
            while b"\r\n\r\n" not in received:
                chunk = conn.recv(4096)
                if not chunk:
                    break
                received.extend(chunk)
            conn.sendall(reply)

    server = threading.Thread(target=serve)
    server.start()
    resolved = [(socket.AF_INET, socket.SOCK_STREAM, 6, "", ("127.0.0.1", port))]
    try:
        with mock.patch("socket.getaddrinfo", return_value=resolved):
            get_url("example.com", "/index.html")
    finally:
        server.join(5)
        listener.close()

    assert bytes(received) == build_request("example.com", "/index.html")
    assert capsys.readouterr().out == reply.decode()