#!/usr/bin/env python3
"""Tests for the SIGINT interruption guard."""

import signal
import threading

import pytest

from parallelsbox import busy


class TestBusy:
    """Test busy() / guard()."""

    def test_guard_returns_work_result(self):
        assert busy.guard(lambda: 42, lambda: None) == 42

    def test_handler_installed_only_while_guarded(self):
        before = signal.getsignal(signal.SIGINT)
        inside = []

        busy.guard(lambda: inside.append(signal.getsignal(signal.SIGINT)), lambda: None)

        assert inside[0] is not before
        assert signal.getsignal(signal.SIGINT) is before
        assert busy.registered_callbacks() == 0

    def test_registration_removed_on_error(self):
        before = signal.getsignal(signal.SIGINT)

        def work():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            busy.guard(work, lambda: None)

        assert busy.registered_callbacks() == 0
        assert signal.getsignal(signal.SIGINT) is before

    def test_sigint_fires_callback_and_work_finishes(self):
        fired = []

        def work():
            signal.raise_signal(signal.SIGINT)
            return "finished"

        assert busy.guard(work, lambda: fired.append(True)) == "finished"
        assert fired == [True]

    def test_nested_guards_all_fire(self):
        fired = []

        with busy.busy(lambda: fired.append("outer")):
            with busy.busy(lambda: fired.append("inner")):
                assert busy.registered_callbacks() == 2
                signal.raise_signal(signal.SIGINT)
            assert busy.registered_callbacks() == 1

        assert sorted(fired) == ["inner", "outer"]
        assert busy.registered_callbacks() == 0

    def test_worker_thread_runs_unguarded(self):
        results = []

        def worker():
            results.append(busy.guard(busy.registered_callbacks, lambda: None))

        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()

        assert results == [0]
