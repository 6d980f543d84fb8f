# minnow

Building blocks for a user-space TCP implementation (a bounded byte stream
and a stream reassembler), together with a few small command-line tools
built on the operating system's own sockets.

## What is inside

- `minnow.byte_stream`: `ByteStream(capacity)` is a bounded, in-memory
  FIFO of bytes with a writing side (`Writer`) and a reading side
  (`Reader`), reached through `stream.writer()` and `stream.reader()`.
  A push stores only as much of the data as the remaining capacity allows
  and drops the rest. The writer offers `push(data)`, `close()`,
  `is_closed()`, `available_capacity()` and `bytes_pushed()`; the reader
  offers `peek()`, `pop(length)`, `bytes_buffered()`, `bytes_popped()` and
  `is_finished()` (closed and fully drained). `set_error()` and
  `has_error()` flag a failed stream. The function `read(reader, max_len)`
  peeks and pops up to `max_len` bytes and returns them.
- `minnow.reassembler`: `Reassembler(output)` takes indexed substrings that
  may arrive out of order, overlap or repeat, and writes them into its
  output `ByteStream` as soon as the next bytes are known. Bytes beyond the
  stream's available capacity are discarded. When a substring is marked as
  last, the stream is closed once every byte up to its end has been
  written. `count_bytes_pending()` tells how many bytes are held back
  waiting for gaps to be filled; `reader()` and `writer()` give the two
  sides of the output stream.
- `minnow.helpers`: `pretty_print(data, max_length=32)` escapes
  unprintable bytes and double quotes as `\xNN` and truncates long values
  with `...`; `concat(buffers)` joins a sequence of byte buffers.
- `minnow.errors`: `TaggedError` and `UnixError` for failed system calls,
  `check_system_call(attempt, return_value)` and `notnull(context, value)`.
- `minnow.debug`: `debug(fmt, *args, **kwargs)` and `debug_str(message)`
  send messages to a handler that writes `DEBUG: ...` lines to standard
  error; `set_debug_handler(handler)` and `reset_debug_handler()` replace
  and restore it.
- `minnow.rng`: `get_random_engine()` returns a `random.Random` seeded from
  the operating system's entropy.
- `minnow.file_descriptor`: `FileDescriptor(fd)`, a handle on a kernel
  descriptor whose duplicates (`duplicate()`) share state, with `read`,
  `read_vectored`, `write`, `set_blocking`, `close`, counters of reads and
  writes, and use as a context manager.
- `minnow.address`: `Address(host, service)` resolves an IPv4 host and a
  service name, or takes a dotted-quad address with a numeric port;
  `Address.from_ipv4_numeric`, `ip_port()`, `ip()`, `port()`,
  `ipv4_numeric()` and `to_string()` convert it.
- `minnow.sockets`: `TCPSocket`, `UDPSocket`, `PacketSocket`,
  `LocalStreamSocket` and `LocalDatagramSocket`, built on
  `FileDescriptor`, with `bind`, `connect`, `listen`, `accept`, `shutdown`,
  `sendto`, `recv` and friends.
- `minnow.eventloop`: `EventLoop` polls descriptors and runs a rule's
  callback when its descriptor is readable or writable (`Direction.IN` /
  `Direction.OUT`) and the rule is interested; `wait_next_event(timeout_ms)`
  serves one rule and returns a `Result` (`SUCCESS`, `TIMEOUT`, `EXIT`).
  `add_basic_rule` registers rules that do not depend on a descriptor, and
  `RuleHandle.cancel()` drops a rule.
- `minnow.stream_copy`: `bidirectional_stream_copy(sock, peer_name)`
  copies standard input to a connected socket and the socket to standard
  output until both directions are finished.

## Using the stream and the reassembler

    from minnow.byte_stream import ByteStream, read
    from minnow.reassembler import Reassembler

    stream = ByteStream(15)
    stream.writer().push(b"hello")
    stream.writer().close()
    assert read(stream.reader(), 5) == b"hello"
    assert stream.reader().is_finished()

    r = Reassembler(ByteStream(64))
    r.insert(1, b"b")
    r.insert(0, b"a", False)
    r.insert(2, b"c", True)
    assert r.reader().peek() == b"abc"

## Command-line tools

Installing the package provides three commands.

Fetch a web page over plain HTTP (port 80) and print the raw response:

    minnow-webget example.com /index.html

Connect to a TCP server, sending standard input to it and printing what
comes back:

    minnow-tcp example.com 80

Listen for a single incoming connection instead (`-l` must come first):

    minnow-tcp -l 127.0.0.1 9090

Send the datagram `Hello UDP!` to 127.0.0.1 port 12345 through a raw
socket (this needs the privileges to open raw sockets):

    minnow-ip-raw

## What it does not do

The byte stream and the reassembler are the only parts of a TCP stack that
the package implements. It has no TCP sender or receiver, no
sequence-number wrapping, no network interface and no IP router; the
command-line tools use the operating system's own TCP and UDP.

## Requirements

Python 3.10 or later on Linux. There are no third-party runtime
dependencies; the tests use pytest, available through the `test` extra.