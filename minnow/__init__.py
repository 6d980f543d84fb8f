"""Byte streams, a stream reassembler, and socket, event-loop and command-line utilities."""

__version__ = "0.1.0"