"""Copying bytes between connections and streams."""

from __future__ import annotations

import contextlib
import queue
import threading
from typing import Any

from tcpcat import logger

_CHUNK_SIZE = 32 * 1024


class ConnectionLost(Exception):
    """The other side went away and the session is over."""

    def __init__(self, message: str = "Connection lost") -> None:
        super().__init__(message)


def _read(src: Any, size: int) -> bytes:
    recv = getattr(src, "recv", None)
    if recv is not None:
        return recv(size)
    return src.read(size) or b""


def _write(dst: Any, data: bytes) -> None:
    sendall = getattr(dst, "sendall", None)
    if sendall is not None:
        sendall(data)
        return
    while data:
        written = dst.write(data)
        if written is None or written >= len(data):
            return
        if written <= 0:
            raise OSError("short write")
        data = data[written:]


def _copy(dst: Any, src: Any) -> None:
    while True:
        chunk = _read(src, _CHUNK_SIZE)
        if not chunk:
            return
        _write(dst, chunk)


def pipe_data(conn1: Any, conn2: Any) -> None:
    """Relay bytes both ways between two connections until both reach end of input.

    Raises ConnectionLost as soon as either direction fails.
    """
    outcomes: queue.Queue[BaseException | None] = queue.Queue()

    def relay(dst: Any, src: Any) -> None:
        try:
            _copy(dst, src)
        except (OSError, ValueError) as exc:
            outcomes.put(exc)
        else:
            outcomes.put(None)

    for dst, src in ((conn2, conn1), (conn1, conn2)):
        threading.Thread(target=relay, args=(dst, src), daemon=True).start()

    for _ in range(2):
        failure = outcomes.get()
        if failure is not None:
            logger.warn("Connection lost")
            raise ConnectionLost() from failure


def pipe_with_buffer(dst: Any, src: Any, buffer_size: int) -> None:
    """Copy src to dst in reads of at most buffer_size bytes, flushing after each.

    End of input raises ConnectionLost; read and write errors propagate.
    """
    if buffer_size < 1:
        raise ValueError(f"buffer size must be positive: {buffer_size}")
    flush = getattr(dst, "flush", None)
    while True:
        chunk = _read(src, buffer_size)
        if not chunk:
            logger.warn("Connection lost")
            raise ConnectionLost()
        _write(dst, chunk)
        if flush is not None:
            with contextlib.suppress(OSError):
                flush()