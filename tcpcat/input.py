"""Validation of command-line addresses, commands and shell paths."""

from __future__ import annotations

import re
from collections.abc import Sequence

_INTEGER = re.compile(r"[+-]?[0-9]+")
_INT64_MAX = 2**63 - 1


def validate_port(port: str) -> int:
    """Return the port as an integer, or raise ValueError if it is not 1-65535."""
    if not _INTEGER.fullmatch(port):
        raise ValueError(f"invalid port number: {port}")
    number = int(port)
    if not -_INT64_MAX - 1 <= number <= _INT64_MAX:
        raise ValueError(f"invalid port number: {port}")
    if number < 1 or number > 65535:
        raise ValueError(f"port number out of range (1-65535): {number}")
    return number


def parse_host_port(args: Sequence[str], default_host: str) -> tuple[str, str]:
    """Split ``[host] port`` arguments, using default_host when only a port is given."""
    if len(args) == 0:
        raise ValueError("missing host and port")
    if len(args) == 1:
        (port,) = args
        validate_port(port)
        return default_host, port
    if len(args) == 2:
        host, port = args
        validate_port(port)
        return host, port
    raise ValueError("too many arguments")


def parse_command(command: str) -> tuple[str, list[str]]:
    """Split a command line on whitespace into the program and its arguments."""
    parts = command.split()
    if not parts:
        return "", []
    return parts[0], parts[1:]


def validate_shell(shell: str) -> None:
    """Raise ValueError if the shell path is empty or holds command separators."""
    if not shell:
        raise ValueError("shell cannot be empty")
    if ";" in shell or "&" in shell:
        raise ValueError("shell path contains invalid characters")