"""Saving, switching to raw mode and restoring terminal settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from types import TracebackType
from typing import Any

try:
    import termios
    import tty
except ImportError:  # platforms without termios
    termios = None  # type: ignore[assignment]
    tty = None  # type: ignore[assignment]

STDIN_FD = 0


@dataclass
class TerminalState:
    """Saved settings of a file descriptor; empty when it is not a terminal."""

    fd: int
    attributes: list[Any] | None = None

    @property
    def is_terminal(self) -> bool:
        return self.attributes is not None

    def restore(self) -> None:
        """Put the saved settings back; does nothing for a non-terminal."""
        if self.attributes is not None and termios is not None:
            termios.tcsetattr(self.fd, termios.TCSANOW, self.attributes)

    def __enter__(self) -> TerminalState:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.restore()


def _is_tty(fd: int) -> bool:
    try:
        return fd >= 0 and os.isatty(fd)
    except OSError:
        return False


def get_state(fd: int) -> TerminalState:
    """Capture the current settings of fd."""
    if termios is None or not _is_tty(fd):
        return TerminalState(fd)
    try:
        return TerminalState(fd, termios.tcgetattr(fd))
    except termios.error:
        return TerminalState(fd)


def make_raw(fd: int) -> TerminalState:
    """Switch fd to raw mode and return the settings it had before."""
    state = get_state(fd)
    if state.is_terminal and tty is not None:
        tty.setraw(fd, termios.TCSANOW)
    return state


def setup_terminal() -> TerminalState:
    """Capture standard input's settings so they can be restored later."""
    return get_state(STDIN_FD)