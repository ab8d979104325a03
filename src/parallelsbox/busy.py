"""
Interrupt guarding for blocking control-utility calls.

While a guarded block runs in the main thread, SIGINT does not raise
``KeyboardInterrupt``. Every registered callback fires instead and the
block is allowed to finish. The child process is never killed here.
"""

import signal
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, List, TypeVar

from .logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")

_callbacks: List[Callable[[], None]] = []
_lock = threading.RLock()
_previous_handler = None


def _fire_callbacks(signum, frame) -> None:
    log.info("busy.interrupted", signal=signal.Signals(signum).name)
    with _lock:
        callbacks = list(_callbacks)
    for callback in callbacks:
        callback()


def _register(callback: Callable[[], None]) -> None:
    global _previous_handler
    with _lock:
        if not _callbacks:
            _previous_handler = signal.signal(signal.SIGINT, _fire_callbacks)
        _callbacks.append(callback)


def _unregister(callback: Callable[[], None]) -> None:
    global _previous_handler
    with _lock:
        _callbacks.remove(callback)
        if not _callbacks:
            previous, _previous_handler = _previous_handler, None
            # None means the handler was not installed from Python
            if previous is None:
                previous = signal.default_int_handler
            signal.signal(signal.SIGINT, previous)


@contextmanager
def busy(on_interrupt: Callable[[], None]) -> Iterator[None]:
    """
    Run the enclosed block with ``on_interrupt`` registered for SIGINT.

    Usage:
        with busy(lambda: print("interrupted")):
            runner.execute("prlctl", "start", uuid)
    """
    if threading.current_thread() is not threading.main_thread():
        # signal.signal() only works in the main thread
        log.debug("busy.unguarded", thread=threading.current_thread().name)
        yield
        return

    _register(on_interrupt)
    try:
        yield
    finally:
        _unregister(on_interrupt)


def guard(work: Callable[[], T], on_interrupt: Callable[[], None]) -> T:
    """Call ``work()`` inside :func:`busy` and return its result."""
    with busy(on_interrupt):
        return work()


def registered_callbacks() -> int:
    """Number of callbacks currently registered."""
    with _lock:
        return len(_callbacks)
