import os

import pytest

from minnow.eventloop import Direction, EventLoop, Result
from minnow.file_descriptor import FileDescriptor


@pytest.fixture
def pipe():
    r, w = os.pipe()
    reader, writer = FileDescriptor(r), FileDescriptor(w)
    yield reader, writer
    for fd in (reader, writer):
        if not fd.closed():
            fd.close()


def test_categories_get_sequential_ids():
    loop = EventLoop()
    assert loop.add_category("a") == 0
    assert loop.add_category("b") == 1


def test_category_limit():
    loop = EventLoop()
    for i in range(64):
        loop.add_category(str(i))
    with pytest.raises(RuntimeError, match="maximum categories reached"):
        loop.add_category("too many")


def test_bad_category_id():
    loop = EventLoop()
    with pytest.raises(IndexError, match="bad category_id"):
        loop.add_basic_rule(3, lambda: None)


def test_no_rules_exits():
    assert EventLoop().wait_next_event(0) is Result.EXIT


def test_basic_rule_runs_while_interested():
    loop = EventLoop()
    calls = []
    loop.add_basic_rule("count", lambda: calls.append(1), lambda: len(calls) < 3)
    assert loop.wait_next_event(0) is Result.SUCCESS
    assert len(calls) == 3
    assert loop.wait_next_event(0) is Result.EXIT


def test_basic_rule_busy_wait_detected():
    loop = EventLoop()
    loop.add_basic_rule("spin", lambda: None)
    with pytest.raises(RuntimeError, match='busy wait detected: rule "spin"'):
        loop.wait_next_event(0)


def test_cancelled_basic_rule_never_runs():
    loop = EventLoop()
    calls = []
    handle = loop.add_basic_rule("x", lambda: calls.append(1), lambda: not calls)
    handle.cancel()
    assert loop.wait_next_event(0) is Result.EXIT
    assert calls == []


def test_timeout_when_nothing_ready(pipe):
    reader, _writer = pipe
    loop = EventLoop()
    loop.add_rule("read", reader, Direction.IN, lambda: reader.read())
    assert loop.wait_next_event(0) is Result.TIMEOUT


def test_read_rule_until_exit(pipe):
    reader, writer = pipe
    loop = EventLoop()
    received = bytearray()
    cancels = []
    loop.add_rule(
        "read",
        reader,
        Direction.IN,
        lambda: received.extend(reader.read()),
        cancel=lambda: cancels.append(True),
    )
    writer.write(b"hello")
    assert loop.wait_next_event(0) is Result.SUCCESS
    assert bytes(received) == b"hello"
    writer.close()
    results = [loop.wait_next_event(0) for _ in range(4)]
    assert results[-1] is Result.EXIT
    assert cancels == [True]
    assert bytes(received) == b"hello"


def test_cancelled_fd_rule_is_dropped(pipe):
    reader, writer = pipe
    loop = EventLoop()
    calls = []
    handle = loop.add_rule("read", reader, Direction.IN, lambda: calls.append(reader.read()))
    writer.write(b"x")
    handle.cancel()
    assert loop.wait_next_event(0) is Result.EXIT
    assert calls == []


def test_fd_busy_wait_detected(pipe):
    reader, writer = pipe
    loop = EventLoop()
    loop.add_rule("lazy", reader, Direction.IN, lambda: None)
    writer.write(b"x")
    with pytest.raises(RuntimeError, match="did not read/write fd and is still interested"):
        loop.wait_next_event(0)


def test_uninterested_rule_exits(pipe):
    reader, writer = pipe
    loop = EventLoop()
    loop.add_rule("read", reader, Direction.IN, lambda: reader.read(), lambda: False)
    writer.write(b"x")
    assert loop.wait_next_event(0) is Result.EXIT


def test_error_on_write_end_with_no_reader(pipe, capsys):
    reader, writer = pipe
    loop = EventLoop()
    errors = []
    cancels = []
    loop.add_rule(
        "write",
        writer,
        Direction.OUT,
        lambda: writer.write(b"x"),
        error=lambda: errors.append(True),
        cancel=lambda: cancels.append(True),
    )
    reader.close()
    assert loop.wait_next_event(0) is Result.SUCCESS
    assert errors == [True]
    assert cancels == [True]
    assert 'error on polled file descriptor for rule "write"' in capsys.readouterr().err
    assert loop.wait_next_event(0) is Result.EXIT