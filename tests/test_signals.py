import os
import signal
import time

import pytest

from tcpcat.signals import block_exit_signals, setup_signal_handler


@pytest.fixture(autouse=True)
def restore_handlers():
    saved = {signum: signal.getsignal(signum) for signum in (signal.SIGINT, signal.SIGTERM)}
    yield
    for signum, handler in saved.items():
        signal.signal(signum, handler)


def _send(signum):
    os.kill(os.getpid(), signum)
    time.sleep(0.05)


def _wait_for(predicate, timeout=1.0):
    deadline = time.monotonic() + timeout
    while not predicate() and time.monotonic() < deadline:
        time.sleep(0.01)
    return predicate()


def _recover_from_error():
    try:
        raise RuntimeError("test panic")
    except RuntimeError as exc:
        return str(exc)


def test_handler_called_on_sigterm():
    calls = []
    setup_signal_handler(lambda: calls.append("term"))
    _send(signal.SIGTERM)
    assert _wait_for(lambda: calls)
    assert calls == ["term"]


def test_handler_called_on_sigint():
    calls = []
    setup_signal_handler(lambda: calls.append("int"))
    _send(signal.SIGINT)
    assert _wait_for(lambda: calls)
    assert calls == ["int"]


def test_multiple_handlers_all_called():
    calls = []
    setup_signal_handler(lambda: calls.append(1))
    setup_signal_handler(lambda: calls.append(2))
    _send(signal.SIGTERM)
    assert _wait_for(lambda: len(calls) == 2)
    assert sorted(calls) == [1, 2]


def test_handler_runs_once_and_later_signals_are_swallowed():
    calls = []
    setup_signal_handler(lambda: calls.append(1))
    _send(signal.SIGTERM)
    _send(signal.SIGTERM)
    _send(signal.SIGINT)
    assert calls == [1]


def test_block_exit_signals_prevents_keyboard_interrupt():
    block_exit_signals()
    assert signal.getsignal(signal.SIGINT) not in (signal.SIG_DFL, signal.default_int_handler)
    _send(signal.SIGINT)
    calls = []
    setup_signal_handler(lambda: calls.append("after block"))
    _send(signal.SIGINT)
    assert _wait_for(lambda: calls)
    assert calls == ["after block"]


def test_block_exit_signals_multiple_calls():
    block_exit_signals()
    block_exit_signals()
    block_exit_signals()
    _send(signal.SIGTERM)
    calls = []
    setup_signal_handler(lambda: calls.append("later"))
    _send(signal.SIGTERM)
    assert _wait_for(lambda: calls)
    assert calls == ["later"]


def test_handler_recovering_from_its_own_error():
    calls = []
    setup_signal_handler(lambda: calls.append(_recover_from_error()))
    _send(signal.SIGTERM)
    assert _wait_for(lambda: calls)
    assert calls == ["test panic"]