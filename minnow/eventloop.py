"""An event loop that polls file descriptors and runs callbacks for ready ones."""

from __future__ import annotations

import errno
import os
import select
import socket
import sys
import weakref
from collections.abc import Callable
from enum import Enum, auto

from minnow.errors import UnixError
from minnow.file_descriptor import FileDescriptor

Callback = Callable[[], None]
Interest = Callable[[], bool]

MAX_CATEGORIES = 64
_MAX_ITERATIONS = 128


def _always() -> bool:
    return True


def _nothing() -> None:
    return None


class Direction(Enum):
    """Whether a rule waits for its descriptor to be readable or writable."""

    IN = auto()
    OUT = auto()


class Result(Enum):
    """Outcome of one call to :meth:`EventLoop.wait_next_event`."""

    SUCCESS = auto()
    TIMEOUT = auto()
    EXIT = auto()


class _BasicRule:
    def __init__(self, category_id: int, interest: Interest, callback: Callback) -> None:
        self.category_id = category_id
        self.interest = interest
        self.callback = callback
        self.cancel_requested = False


class _FDRule(_BasicRule):
    def __init__(
        self,
        category_id: int,
        interest: Interest,
        callback: Callback,
        fd: FileDescriptor,
        direction: Direction,
        on_cancel: Callback,
        on_error: Callback,
    ) -> None:
        super().__init__(category_id, interest, callback)
        self.fd = fd
        self.direction = direction
        self.on_cancel = on_cancel
        self.on_error = on_error

    def service_count(self) -> int:
        """How often the descriptor has been read or written, by direction."""
        if self.direction is Direction.IN:
            return self.fd.read_count()
        return self.fd.write_count()


class RuleHandle:
    """A weak handle on a rule that can cancel it."""

    def __init__(self, rule: _BasicRule) -> None:
        self._rule = weakref.ref(rule)

    def cancel(self) -> None:
        """Ask the loop to drop the rule (its cancel callback is not run)."""
        rule = self._rule()
        if rule is not None:
            rule.cancel_requested = True


class EventLoop:
    """Waits for events on file descriptors and runs the matching callbacks."""

    def __init__(self) -> None:
        self._categories: list[str] = []
        self._fd_rules: list[_FDRule] = []
        self._basic_rules: list[_BasicRule] = []

    def add_category(self, name: str) -> int:
        """Register a rule category and return its id."""
        if len(self._categories) >= MAX_CATEGORIES:
            raise RuntimeError("maximum categories reached")
        self._categories.append(name)
        return len(self._categories) - 1

    def _category_id(self, category: int | str) -> int:
        if isinstance(category, str):
            return self.add_category(category)
        if not 0 <= category < len(self._categories):
            raise IndexError("bad category_id")
        return category

    def add_rule(
        self,
        category: int | str,
        fd: FileDescriptor,
        direction: Direction,
        callback: Callback,
        interest: Interest | None = None,
        cancel: Callback | None = None,
        error: Callback | None = None,
    ) -> RuleHandle:
        """Run ``callback`` whenever ``fd`` is ready in ``direction`` and ``interest()`` holds.

        ``category`` is a category id, or a name for which a new category is made.
        """
        rule = _FDRule(
            self._category_id(category),
            interest or _always,
            callback,
            fd.duplicate(),
            direction,
            cancel or _nothing,
            error or _nothing,
        )
        self._fd_rules.append(rule)
        return RuleHandle(rule)

    def add_basic_rule(
        self, category: int | str, callback: Callback, interest: Interest | None = None
    ) -> RuleHandle:
        """Run ``callback`` repeatedly while ``interest()`` holds, independent of any descriptor."""
        rule = _BasicRule(self._category_id(category), interest or _always, callback)
        self._basic_rules.append(rule)
        return RuleHandle(rule)

    def _name(self, rule: _BasicRule) -> str:
        return self._categories[rule.category_id]

    def _drop(self, rule: _FDRule) -> None:
        if rule in self._fd_rules:
            self._fd_rules.remove(rule)

    def _report_error(self, rule: _FDRule) -> None:
        try:
            sock = socket.socket(fileno=rule.fd.fd_num())
        except OSError as exc:
            if exc.errno == errno.ENOTSOCK:
                sys.stderr.write(f'error on polled file descriptor for rule "{self._name(rule)}"\n')
                return
            raise UnixError("getsockopt", exc.errno or 0) from exc
        try:
            socket_error = sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
        except OSError as exc:
            raise UnixError("getsockopt", exc.errno or 0) from exc
        finally:
            sock.detach()
        if socket_error:
            sys.stderr.write(
                f'error on polled socket for rule "{self._name(rule)}": '
                f"{os.strerror(socket_error)}\n"
            )

    def _serve_basic_rules(self) -> bool:
        for rule in list(self._basic_rules):
            if rule.cancel_requested:
                self._basic_rules.remove(rule)
                continue
            fired = False
            iterations = 0
            while rule.interest():
                iterations += 1
                if iterations > _MAX_ITERATIONS:
                    raise RuntimeError(
                        f'EventLoop: busy wait detected: rule "{self._name(rule)}" '
                        f"is still interested after {iterations} iterations"
                    )
                fired = True
                rule.callback()
            if fired:
                return True
        return False

    def wait_next_event(self, timeout_ms: int) -> Result:
        """Serve at most one rule, waiting up to ``timeout_ms`` (negative: forever)."""
        if self._serve_basic_rules():
            return Result.SUCCESS

        polled: list[tuple[_FDRule, int]] = []
        something_to_poll = False
        for rule in list(self._fd_rules):
            if rule.cancel_requested:
                self._drop(rule)
                continue
            if (rule.direction is Direction.IN and rule.fd.eof()) or rule.fd.closed():
                rule.on_cancel()
                self._drop(rule)
                continue
            if rule.interest():
                events = select.POLLIN if rule.direction is Direction.IN else select.POLLOUT
                something_to_poll = True
            else:
                events = 0
            polled.append((rule, events))

        if not something_to_poll:
            return Result.EXIT

        masks: dict[int, int] = {}
        for rule, events in polled:
            masks[rule.fd.fd_num()] = masks.get(rule.fd.fd_num(), 0) | events
        poller = select.poll()
        for fd_num, mask in masks.items():
            poller.register(fd_num, mask)
        try:
            ready = poller.poll(timeout_ms)
        except OSError as exc:
            raise UnixError("poll", exc.errno or 0) from exc
        if not ready:
            return Result.TIMEOUT

        revents_by_fd = dict(ready)
        for rule, events in polled:
            revents = revents_by_fd.get(rule.fd.fd_num(), 0)

            if revents & (select.POLLERR | select.POLLNVAL):
                self._report_error(rule)
                rule.on_error()
                rule.on_cancel()
                self._drop(rule)
                continue

            poll_ready = bool(revents & events)
            poll_hup = bool(revents & select.POLLHUP)
            if poll_hup and ((events and not poll_ready) or rule.direction is Direction.OUT):
                rule.on_cancel()
                self._drop(rule)
                continue

            if poll_ready:
                count_before = rule.service_count()
                rule.callback()
                if (
                    count_before == rule.service_count()
                    and not rule.fd.closed()
                    and rule.interest()
                ):
                    raise RuntimeError(
                        f'EventLoop: busy wait detected: rule "{self._name(rule)}" '
                        "did not read/write fd and is still interested"
                    )
                return Result.SUCCESS

        return Result.SUCCESS