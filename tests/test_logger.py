import logging

import pytest

from tcpcat import logger
from tcpcat.logger import Logger, LogLevel


@pytest.fixture(autouse=True)
def no_colour(monkeypatch):
    monkeypatch.setenv("NO_COLOR", "1")


@pytest.fixture
def restore_default_level():
    original = logger.get_level()
    yield
    logger.set_level(original)


@pytest.mark.parametrize("level", [LogLevel.INFO, LogLevel.WARN, LogLevel.ERROR])
def test_new_logger_keeps_level(level):
    assert Logger(level).level == level


@pytest.mark.parametrize(
    "level, value", [(LogLevel.INFO, 0), (LogLevel.WARN, 1), (LogLevel.ERROR, 2)]
)
def test_level_values(level, value):
    assert int(level) == value


def test_default_level_is_info():
    assert Logger().level == LogLevel.INFO


def test_warn_level_filters_info(capsys):
    log = Logger(LogLevel.WARN)
    log.info("hidden")
    log.warn("shown %d", 1)
    log.error("also shown")
    out = capsys.readouterr().out
    assert out == "warn: shown 1\nerror: also shown\n"


def test_info_formats(capsys):
    Logger(LogLevel.INFO).info("test message with %s", "formatting")
    assert capsys.readouterr().out == "info: test message with formatting\n"


def test_warn_formats(capsys):
    Logger(LogLevel.INFO).warn("test warning with %d", 42)
    assert capsys.readouterr().out == "warn: test warning with 42\n"


def test_error_formats(capsys):
    Logger(LogLevel.INFO).error("test error: %s", "something went wrong")
    assert capsys.readouterr().out == "error: test error: something went wrong\n"


def test_message_without_args_keeps_percent(capsys):
    Logger().info("100% done")
    assert capsys.readouterr().out == "info: 100% done\n"


def test_trailing_newline_not_doubled(capsys):
    Logger().info("line\n")
    assert capsys.readouterr().out == "info: line\n"


def test_error_level_filters_warn(capsys):
    log = Logger(LogLevel.ERROR)
    log.info("a")
    log.warn("b")
    assert capsys.readouterr().out == ""


def test_fatal_exits_with_status_one(capsys):
    log = Logger(LogLevel.ERROR)
    with pytest.raises(SystemExit) as excinfo:
        log.fatal("boom %s", "now")
    assert excinfo.value.code == 1
    assert capsys.readouterr().out == "error: boom now\n"


def test_colour_when_enabled(monkeypatch, capsys):
    monkeypatch.delenv("NO_COLOR")
    monkeypatch.setenv("TERM", "xterm")
    monkeypatch.setattr("sys.stdout.isatty", lambda: True, raising=False)
    Logger().warn("x")
    assert capsys.readouterr().out == "\x1b[33mwarn: x\x1b[0m\n"


def test_default_logger_functions(capsys, restore_default_level):
    logger.set_level(LogLevel.ERROR)
    assert logger.get_level() == LogLevel.ERROR
    logger.info("info message")
    logger.warn("warn message")
    logger.error("error message")
    assert capsys.readouterr().out == "error: error message\n"


def test_set_level_round_trip(restore_default_level):
    original = logger.get_level()
    logger.set_level(LogLevel.WARN)
    assert logger.get_level() == LogLevel.WARN
    logger.set_level(original)
    assert logger.get_level() == original


def test_default_fatal_exits():
    with pytest.raises(SystemExit) as excinfo:
        logger.fatal("gone")
    assert excinfo.value.code == 1


def test_setup_logger_installs_plain_handler_once():
    root = logging.getLogger()
    try:
        handler = logger.setup_logger()
        again = logger.setup_logger()
        assert handler is again
        assert root.handlers.count(handler) == 1
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "hello", None, None)
        assert handler.format(record) == "hello"
    finally:
        root.removeHandler(handler)