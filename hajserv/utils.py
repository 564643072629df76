"""Shared helpers: terminal colours, string helpers, dates and shutdown signalling."""

from __future__ import annotations

import os
import signal
import time
from email.utils import formatdate
from types import FrameType

RESET = "\033[0m"
CYAN = "\033[36m"
GREEN = "\033[32m"
RED = "\033[31m"
YELLOW = "\033[33m"
PURPLE = "\033[35m"

_WHITESPACE = " \t\r\n"
_ASCII_LOWER = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz"
)


def trim(text: str) -> str:
    """Strip spaces, tabs, carriage returns and newlines from both ends."""
    return text.strip(_WHITESPACE)


def to_lower(text: str) -> str:
    """Lower-case ASCII letters only, leaving every other character alone."""
    return text.translate(_ASCII_LOWER)


def http_date(now: float | None = None) -> str:
    """Format a time as an RFC 1123 date: ``Day, DD Mon YYYY HH:MM:SS GMT``."""
    return formatdate(time.time() if now is None else now, usegmt=True)


def timestamp(now: float | None = None) -> str:
    """Format a local time as ``[YYYY-MM-DD HH:MM:SS]`` for log lines."""
    return time.strftime("[%Y-%m-%d %H:%M:%S]", time.localtime(now))


class ShutdownSignal:
    """A self-pipe that wakes a poll loop and records a request to stop.

    Its read end can be registered with a poller through :meth:`fileno`.
    """

    _STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)

    def __init__(self) -> None:
        self._read_fd, self._write_fd = os.pipe()
        os.set_blocking(self._read_fd, False)
        os.set_blocking(self._write_fd, False)
        self.stopped = False
        self._previous: dict[int, object] = {}

    def install(self) -> None:
        """Route SIGINT and SIGTERM here and ignore SIGPIPE."""
        sigpipe = getattr(signal, "SIGPIPE", None)
        if sigpipe is not None:
            self._previous[sigpipe] = signal.signal(sigpipe, signal.SIG_IGN)
        for signum in self._STOP_SIGNALS:
            self._previous[signum] = signal.signal(signum, self.trigger)

    def trigger(self, signum: int, frame: FrameType | None) -> None:
        """Wake the poll loop; stop it if the signal is SIGINT or SIGTERM."""
        if self._write_fd != -1:
            try:
                os.write(self._write_fd, b"\0")
            except (BlockingIOError, OSError):
                pass
        if signum in self._STOP_SIGNALS:
            self.stopped = True

    def fileno(self) -> int:
        """Return the read end of the pipe."""
        return self._read_fd

    def drain(self) -> int:
        """Read away every pending wake-up byte and return how many there were."""
        total = 0
        while self._read_fd != -1:
            try:
                chunk = os.read(self._read_fd, 4096)
            except BlockingIOError:
                break
            if not chunk:
                break
            total += len(chunk)
        return total

    def close(self) -> None:
        """Close both ends of the pipe and restore previous signal handlers."""
        for signum, handler in self._previous.items():
            signal.signal(signum, handler)
        self._previous.clear()
        for fd in (self._read_fd, self._write_fd):
            if fd != -1:
                os.close(fd)
        self._read_fd = self._write_fd = -1

    def __enter__(self) -> ShutdownSignal:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()