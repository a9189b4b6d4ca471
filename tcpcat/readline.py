"""Line editor with history, cursor movement and reverse search."""

from __future__ import annotations

import codecs
import os
import sys
from typing import Any, TextIO

from tcpcat.terminal import make_raw

_ENTER = "\r"
_CTRL_C = "\x03"
_CTRL_D = "\x04"
_CTRL_G = "\x07"
_CTRL_R = "\x12"
_ESCAPE = "\x1b"
_BACKSPACES = ("\x7f", "\x08")
_CLEAR_LINE = "\r\x1b[K"

_YELLOW = "33"
_CYAN = "36"


class Interrupted(Exception):
    """The user pressed Ctrl+C while editing a line."""

    def __init__(self) -> None:
        super().__init__("interrupted")


def _fileno(stream: Any) -> int | None:
    try:
        return stream.fileno()
    except (AttributeError, OSError, ValueError):
        return None


class Editor:
    """Reads lines from a terminal with editing keys, or plain lines otherwise."""

    def __init__(
        self,
        stdin: Any = None,
        stdout: TextIO | None = None,
        prompt: str = ">> ",
        interactive: bool | None = None,
    ) -> None:
        self.prompt = prompt
        self._input = sys.stdin if stdin is None else stdin
        self._output = sys.stdout if stdout is None else stdout
        self._interactive = interactive
        self._history: list[str] = []
        self._line: list[str] = []
        self._cursor = 0
        self._history_index = -1
        self._newline = "\n"
        self._decoder = codecs.getincrementaldecoder("utf-8")("replace")

    @property
    def history(self) -> list[str]:
        """A copy of the entered lines, oldest first."""
        return list(self._history)

    def add_history_entry(self, entry: str) -> None:
        self._history.append(entry)

    def readline(self) -> str:
        """Return the next line without its line ending.

        Raises EOFError at end of input and Interrupted on Ctrl+C.
        """
        tty_fd = self._tty_fd()
        interactive = self._interactive if self._interactive is not None else tty_fd is not None
        if not interactive:
            return self._read_plain_line()

        self._line = []
        self._cursor = 0
        self._history_index = -1
        state = make_raw(tty_fd) if tty_fd is not None else None
        self._newline = "\r\n" if state is not None and state.is_terminal else "\n"
        try:
            self._write(self._colour(_YELLOW, self.prompt))
            return self._edit(tty_fd)
        finally:
            if state is not None:
                state.restore()
            self._newline = "\n"

    def _tty_fd(self) -> int | None:
        fd = _fileno(self._input)
        if fd is None:
            return None
        try:
            return fd if os.isatty(fd) else None
        except OSError:
            return None

    def _read_plain_line(self) -> str:
        line = self._input.readline()
        if isinstance(line, bytes):
            line = line.decode("utf-8", "replace")
        if not line.endswith("\n"):
            raise EOFError
        line = line.rstrip("\r\n")
        if line:
            self.add_history_entry(line)
        return line

    def _edit(self, tty_fd: int | None) -> str:
        while True:
            ch = self._read_char(tty_fd)
            if ch == _ENTER:
                self._write(self._newline)
                line = "".join(self._line)
                if line:
                    self.add_history_entry(line)
                return line
            if ch == _CTRL_C:
                self._write(self._newline)
                raise Interrupted()
            if ch == _CTRL_D:
                if not self._line:
                    raise EOFError
            elif ch == _CTRL_R:
                self._reverse_search(tty_fd)
            elif ch in _BACKSPACES:
                self._backspace()
            elif ch == _ESCAPE:
                self._escape_sequence(tty_fd)
            elif ch.isprintable():
                self._insert(ch)

    def _read_char(self, tty_fd: int | None) -> str:
        while True:
            if tty_fd is not None:
                data: Any = os.read(tty_fd, 1)
            else:
                data = self._input.read(1)
            if not data:
                raise EOFError
            if isinstance(data, str):
                return data
            text = self._decoder.decode(data)
            if text:
                return text

    def _colour(self, code: str, text: str) -> str:
        isatty = getattr(self._output, "isatty", None)
        try:
            coloured = bool(isatty and isatty()) and "NO_COLOR" not in os.environ
        except (OSError, ValueError):
            coloured = False
        return f"\x1b[{code}m{text}\x1b[0m" if coloured else text

    def _write(self, text: str) -> None:
        self._output.write(text)
        self._output.flush()

    def _refresh(self) -> None:
        text = _CLEAR_LINE + self._colour(_YELLOW, self.prompt) + "".join(self._line)
        behind = len(self._line) - self._cursor
        if behind > 0:
            text += f"\x1b[{behind}D"
        self._write(text)

    def _insert(self, ch: str) -> None:
        self._line.insert(self._cursor, ch)
        self._cursor += 1
        self._refresh()

    def _backspace(self) -> None:
        if self._cursor > 0:
            del self._line[self._cursor - 1]
            self._cursor -= 1
            self._refresh()

    def _escape_sequence(self, tty_fd: int | None) -> None:
        if self._read_char(tty_fd) != "[":
            return
        key = self._read_char(tty_fd)
        if key == "A":
            self._history_up()
        elif key == "B":
            self._history_down()
        elif key == "C":
            self._cursor_right()
        elif key == "D":
            self._cursor_left()

    def _show_history_entry(self, entry: str) -> None:
        self._line = list(entry)
        self._cursor = len(self._line)
        self._refresh()

    def _history_up(self) -> None:
        if not self._history:
            return
        if self._history_index == -1:
            self._history_index = len(self._history) - 1
        elif self._history_index > 0:
            self._history_index -= 1
        self._show_history_entry(self._history[self._history_index])

    def _history_down(self) -> None:
        if not self._history or self._history_index == -1:
            return
        if self._history_index < len(self._history) - 1:
            self._history_index += 1
            self._show_history_entry(self._history[self._history_index])
        else:
            self._history_index = -1
            self._show_history_entry("")

    def _cursor_left(self) -> None:
        if self._cursor > 0:
            self._cursor -= 1
            self._write("\x1b[D")

    def _cursor_right(self) -> None:
        if self._cursor < len(self._line):
            self._cursor += 1
            self._write("\x1b[C")

    def _find(self, term: str, before: int) -> int:
        return next(
            (index for index in reversed(range(before)) if term in self._history[index]),
            -1,
        )

    def _reverse_search(self, tty_fd: int | None) -> None:
        if not self._history:
            return
        term = ""
        match = -1
        while True:
            if term and match < 0:
                match = self._find(term, len(self._history))
            shown = self._history[match] if match >= 0 else ""
            self._write(
                _CLEAR_LINE + self._colour(_CYAN, f"(reverse-i-search)`{term}': ") + shown
            )
            try:
                ch = self._read_char(tty_fd)
            except EOFError:
                break
            if ch == _ENTER:
                if match >= 0:
                    self._line = list(self._history[match])
                    self._cursor = len(self._line)
                break
            if ch in (_CTRL_C, _CTRL_G):
                break
            if ch == _CTRL_R:
                if match > 0:
                    earlier = self._find(term, match)
                    if earlier >= 0:
                        match = earlier
            elif ch in _BACKSPACES:
                if term:
                    term = term[:-1]
                    match = -1
            elif ch.isprintable():
                term += ch
                match = -1
        self._refresh()