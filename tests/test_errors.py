import errno
import os

import pytest

from minnow.errors import TaggedError, UnixError, check_system_call, notnull


def test_tagged_error_message_and_code():
    err = TaggedError("getaddrinfo(host, http)", 7, "boom")
    assert str(err) == "getaddrinfo(host, http): boom"
    assert err.error_code == 7
    assert err.attempt == "getaddrinfo(host, http)"


def test_unix_error_uses_strerror():
    err = UnixError("read", errno.EBADF)
    assert err.error_code == errno.EBADF
    assert str(err) == "read: " + os.strerror(errno.EBADF)
    assert isinstance(err, TaggedError)


def test_check_system_call_passes_non_negative():
    assert check_system_call("poll", 0) == 0
    assert check_system_call("poll", 5) == 5


def test_check_system_call_raises_on_negative():
    with pytest.raises(UnixError) as info:
        check_system_call("socket", -errno.EACCES)
    assert info.value.error_code == errno.EACCES
    assert str(info.value).startswith("socket: ")


def test_notnull_returns_value():
    obj = object()
    assert notnull("ctx", obj) is obj
    assert notnull("ctx", 0) == 0


def test_notnull_raises_on_none():
    with pytest.raises(RuntimeError, match="ctx: returned null pointer"):
        notnull("ctx", None)