"""Coloured, level-filtered console messages."""

from __future__ import annotations

import enum
import logging
import os
import sys
from dataclasses import dataclass
from typing import Any, NoReturn, TextIO


class LogLevel(enum.IntEnum):
    """Severity threshold for console messages."""

    INFO = 0
    WARN = 1
    ERROR = 2


_GREEN = "32"
_YELLOW = "33"
_RED = "31"

_plain_handler = logging.StreamHandler()
_plain_handler.setFormatter(logging.Formatter("%(message)s"))


def _colour_enabled(stream: TextIO) -> bool:
    if "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb":
        return False
    isatty = getattr(stream, "isatty", None)
    try:
        return bool(isatty and isatty())
    except (ValueError, OSError):
        return False


def _emit(colour: str, prefix: str, message: str, args: tuple[Any, ...]) -> None:
    text = prefix + (message % args if args else message)
    text = text.removesuffix("\n")
    stream = sys.stdout
    if _colour_enabled(stream):
        text = f"\x1b[{colour}m{text}\x1b[0m"
    stream.write(text + "\n")
    stream.flush()


@dataclass
class Logger:
    """Writes coloured messages at or above its level to standard output."""

    level: LogLevel = LogLevel.INFO

    def info(self, message: str, *args: Any) -> None:
        if self.level <= LogLevel.INFO:
            _emit(_GREEN, "info: ", message, args)

    def warn(self, message: str, *args: Any) -> None:
        if self.level <= LogLevel.WARN:
            _emit(_YELLOW, "warn: ", message, args)

    def error(self, message: str, *args: Any) -> None:
        if self.level <= LogLevel.ERROR:
            _emit(_RED, "error: ", message, args)

    def fatal(self, message: str, *args: Any) -> NoReturn:
        """Print an error regardless of level and exit with status 1."""
        _emit(_RED, "error: ", message, args)
        raise SystemExit(1)


_default = Logger(LogLevel.INFO)


def info(message: str, *args: Any) -> None:
    _default.info(message, *args)


def warn(message: str, *args: Any) -> None:
    _default.warn(message, *args)


def error(message: str, *args: Any) -> None:
    _default.error(message, *args)


def fatal(message: str, *args: Any) -> NoReturn:
    _default.fatal(message, *args)


def set_level(level: LogLevel) -> None:
    """Set the level of the shared logger."""
    _default.level = LogLevel(level)


def get_level() -> LogLevel:
    """Return the level of the shared logger."""
    return _default.level


def setup_logger() -> logging.Handler:
    """Make the standard logging module print bare messages, with no prefixes."""
    root = logging.getLogger()
    if _plain_handler not in root.handlers:
        root.addHandler(_plain_handler)
    return _plain_handler