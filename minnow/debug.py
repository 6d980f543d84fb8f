"""Debug output routed through a replaceable handler."""

from __future__ import annotations

import sys
from collections.abc import Callable

DebugHandler = Callable[[str], None]


def _default_debug_handler(message: str) -> None:
    sys.stderr.write(f"DEBUG: {message}\n")


class _Dispatcher:
    """Holds the handler that debug messages are sent to."""

    def __init__(self) -> None:
        self._handler: DebugHandler = _default_debug_handler

    def route(self, handler: DebugHandler) -> None:
        if not callable(handler):
            raise TypeError("debug handler must be callable")
        self._handler = handler

    def restore(self) -> None:
        self._handler = _default_debug_handler

    def send(self, message: str) -> None:
        self._handler(message)


_dispatcher = _Dispatcher()


def debug_str(message: str) -> None:
    """Send ``message`` to the current debug handler."""
    _dispatcher.send(message)


def debug(fmt: str, *args: object, **kwargs: object) -> None:
    """Format a debug message and send it on, unless running optimised."""
    if __debug__:
        debug_str(fmt.format(*args, **kwargs))


def set_debug_handler(handler: DebugHandler) -> None:
    """Route debug messages to ``handler``."""
    _dispatcher.route(handler)


def reset_debug_handler() -> None:
    """Route debug messages back to standard error."""
    _dispatcher.restore()