# tcpcat

tcpcat is a small netcat-like command-line tool. It listens for or opens a
single TCP connection. It then pipes that connection to your terminal or to a
shell. It needs nothing beyond the Python standard library.

## Installation

```
pip install .
```

This installs the `tcpcat` command.

## Listening

`tcpcat listen` waits for one incoming connection and handles it. Then it
exits.

```
tcpcat listen 4444              # binds 0.0.0.0:4444
tcpcat listen 127.0.0.1 4444    # binds a specific address
tcpcat l 4444                   # short alias
```

In the default mode, bytes from the peer go to standard output and bytes from
standard input go to the peer.

Options:

- `-i`, `--interactive`: start a local shell in a pseudo-terminal and connect
  it to the peer. The shell is `$SHELL`, or `/bin/sh` if `$SHELL` is not set.
  The pseudo-terminal takes its window size from your terminal, and it follows
  resizes. This mode needs pseudo-terminal support, so it fails on Windows.
- `-l`, `--local-interactive`: read commands with a line editor and send each
  line to the peer. The peer's output is printed as it arrives. The editor
  has these keys:
  - left and right arrows move the cursor.
  - up and down arrows move through history.
  - Ctrl+R searches history backwards.
  - Ctrl+D on an empty line ends the session.

  Typing `exit` also ends the session. Ctrl+C stops the session with an error.
- `-b`, `--block-signals`: catch SIGINT and SIGTERM so that they do not end
  the session. This applies to the default and `--interactive` modes.
- `-e`, `--exec COMMAND`: send `COMMAND` and a newline to the peer as soon as
  it connects. This applies to the default mode.

`--interactive` and `--local-interactive` cannot be used together.

## Connecting

`tcpcat connect` opens a connection and runs a shell on it. On Unix, the shell
is started as `SHELL -i` with its input, output and errors on the connection.
On Windows, its pipes are relayed to and from the connection. When the shell
exits, tcpcat reports how it exited and stops.

```
tcpcat connect 4444                  # connects to 127.0.0.1:4444
tcpcat connect example.com 4444
tcpcat c example.com 4444 -s /bin/bash
```

- `-s`, `--shell PATH`: the shell to run. The default is `/bin/sh`, or
  `cmd.exe` on Windows.

## Other commands

```
tcpcat --help
tcpcat listen --help
tcpcat --version        # prints "tcpcat version 1.0.0"
```

Both commands take one or two address arguments. With more than two, tcpcat
prints a usage error. If binding, connecting or starting a shell fails, tcpcat
prints `error: Error: ...` and exits with status 1.

## Library use

The modules can also be used on their own.

`tcpcat.input` validates arguments:

```python
from tcpcat.input import parse_host_port, parse_command, validate_port, validate_shell

parse_host_port(["8080"], "0.0.0.0")   # ("0.0.0.0", "8080")
parse_command("ls -la /tmp")           # ("ls", ["-la", "/tmp"])
validate_port("443")                   # 443; raises ValueError outside 1-65535
validate_shell("/bin/sh; rm x")        # raises ValueError
```

`tcpcat.pipe` copies data between connections and streams:

- `pipe_data(conn1, conn2)` relays data both ways until both sides reach end
  of input. It raises `ConnectionLost` if either direction fails.
- `pipe_with_buffer(dst, src, buffer_size)` copies in reads of at most
  `buffer_size` bytes and flushes `dst` after each write. It raises
  `ConnectionLost` at end of input.

`tcpcat.readline.Editor` is the line editor:

- `Editor(stdin=None, stdout=None, prompt=">> ", interactive=None)` creates
  an editor.
- `readline()` returns the next line. It raises `EOFError` at end of input,
  and `Interrupted` on Ctrl+C.
- `history` returns a copy of the entered lines.
- `add_history_entry()` appends a line to the history.

When the input is not a terminal, the editor reads plain lines.

`tcpcat.terminal` provides these terminal helpers:

- `get_state(fd)` and `setup_terminal()` save a terminal's settings.
- `make_raw(fd)` switches a terminal to raw mode and returns the earlier
  settings.

Each of these returns a `TerminalState`. Its `restore()` method puts the saved
settings back, and it can be used as a context manager. For a descriptor that
is not a terminal, these helpers do nothing.

`tcpcat.signals` provides `block_exit_signals()` and
`setup_signal_handler(handler)`. The handler is called once, on the first
SIGINT or SIGTERM.

`tcpcat.logger` prints coloured `info:`, `warn:` and `error:` messages:

- `Logger(level)` creates a logger, and `LogLevel` sets the threshold.
- `info`, `warn`, `error` and `fatal` log through a shared logger. `fatal`
  always prints, then exits with status 1.
- `set_level` and `get_level` change and read the shared logger's level.

## What it does not do

tcpcat handles exactly one connection per run, over TCP only. It has no UDP
mode, no port scanning, no file-transfer commands, no port forwarding, and no
encryption.