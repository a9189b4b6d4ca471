"""Catching of the interrupt and termination signals."""

from __future__ import annotations

import signal
from collections.abc import Callable
from dataclasses import dataclass
from types import FrameType

_EXIT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


@dataclass
class _Watcher:
    callback: Callable[[], None] | None
    fired: bool = False


_watchers: list[_Watcher] = []


def _dispatch(signum: int, frame: FrameType | None) -> None:
    pending = [watcher for watcher in _watchers if not watcher.fired]
    for watcher in pending:
        watcher.fired = True
    for watcher in pending:
        if watcher.callback is not None:
            watcher.callback()


def _register(callback: Callable[[], None] | None) -> None:
    if any(signal.getsignal(signum) is not _dispatch for signum in _EXIT_SIGNALS):
        _watchers.clear()
        for signum in _EXIT_SIGNALS:
            signal.signal(signum, _dispatch)
    _watchers.append(_Watcher(callback))


def block_exit_signals() -> None:
    """Stop SIGINT and SIGTERM from ending the process."""
    _register(None)


def setup_signal_handler(handler: Callable[[], None]) -> None:
    """Call handler once on the first SIGINT or SIGTERM; later ones are swallowed."""
    _register(handler)