import pytest

from tcpcat.input import parse_command, parse_host_port, validate_port, validate_shell


@pytest.mark.parametrize(
    "args, default_host, expected",
    [
        (["8080"], "0.0.0.0", ("0.0.0.0", "8080")),
        (["localhost", "8080"], "0.0.0.0", ("localhost", "8080")),
    ],
)
def test_parse_host_port(args, default_host, expected):
    assert parse_host_port(args, default_host) == expected


@pytest.mark.parametrize(
    "args, message",
    [
        ([], "missing host and port"),
        (["invalid"], "invalid port number: invalid"),
        (["70000"], r"port number out of range \(1-65535\): 70000"),
        (["a", "b", "c"], "too many arguments"),
        (["localhost", "0"], r"port number out of range \(1-65535\): 0"),
    ],
)
def test_parse_host_port_errors(args, message):
    with pytest.raises(ValueError, match=message):
        parse_host_port(args, "0.0.0.0")


@pytest.mark.parametrize(
    "shell",
    ["/bin/bash", "/bin/bash | cat", "/usr/bin/my shell"],
)
def test_validate_shell_accepts(shell):
    assert validate_shell(shell) is None


@pytest.mark.parametrize(
    "shell, message",
    [
        ("", "shell cannot be empty"),
        ("/bin/bash; rm -rf /", "shell path contains invalid characters"),
        ("/bin/bash & rm -rf /", "shell path contains invalid characters"),
    ],
)
def test_validate_shell_rejects(shell, message):
    with pytest.raises(ValueError, match=message):
        validate_shell(shell)


@pytest.mark.parametrize(
    "command, expected",
    [
        ("ls", ("ls", [])),
        ("ls -la /tmp", ("ls", ["-la", "/tmp"])),
        ("", ("", [])),
        ("  ls   -la   /tmp  ", ("ls", ["-la", "/tmp"])),
        ("echo hello world", ("echo", ["hello", "world"])),
    ],
)
def test_parse_command(command, expected):
    assert parse_command(command) == expected


@pytest.mark.parametrize(
    "port, expected",
    [("80", 80), ("443", 443), ("65535", 65535), ("1", 1), ("+22", 22)],
)
def test_validate_port_accepts(port, expected):
    assert validate_port(port) == expected


@pytest.mark.parametrize("port", ["0", "65536", "-1", "abc", "", " 80 ", "8_0", "99999999999999999999"])
def test_validate_port_rejects(port):
    with pytest.raises(ValueError):
        validate_port(port)


def test_validate_port_messages():
    with pytest.raises(ValueError, match="^invalid port number: abc$"):
        validate_port("abc")
    with pytest.raises(ValueError, match=r"^port number out of range \(1-65535\): -1$"):
        validate_port("-1")