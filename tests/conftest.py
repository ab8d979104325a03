"""
Pytest fixtures and configuration for parallelsbox tests.
"""
import json
from typing import Callable, List, Optional, Tuple
from unittest.mock import patch

import pytest

from parallelsbox.di import set_container
from parallelsbox.driver.pd9 import PD9Driver
from parallelsbox.interfaces.process import ProcessResult, ProcessRunner
from parallelsbox.models import DriverSettings

VM_UUID = "{6a2a5a3e-0001-4c1f-9d1b-000000000001}"


class FakeRunner(ProcessRunner):
    """ProcessRunner that answers from a handler and records every call."""

    def __init__(self, handler: Optional[Callable[..., ProcessResult]] = None):
        self.calls: List[Tuple[str, Tuple[str, ...]]] = []
        self.notify_calls = []
        self.handler = handler or (lambda executable, args: ok())

    def execute(self, executable, *args, notify=(), on_output=None):
        self.calls.append((executable, args))
        self.notify_calls.append(frozenset(notify))
        result = self.handler(executable, args)
        if on_output is not None:
            for name in ("stdout", "stderr"):
                text = getattr(result, name)
                if text and name in notify:
                    on_output(name, text)
        return result

    @property
    def commands(self) -> List[Tuple[str, ...]]:
        return [args for _, args in self.calls]


def ok(stdout: str = "", stderr: str = "") -> ProcessResult:
    return ProcessResult(exit_code=0, stdout=stdout, stderr=stderr)


def fail(stderr: str = "error", exit_code: int = 1, stdout: str = "") -> ProcessResult:
    return ProcessResult(exit_code=exit_code, stdout=stdout, stderr=stderr)


def as_json(data) -> str:
    return json.dumps(data)


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def settings():
    return DriverSettings(retry_delay_seconds=0)


@pytest.fixture
def no_sleep():
    """Patch out retry delays and expose the mock for assertions."""
    with patch("parallelsbox.driver.base.time.sleep") as mock_sleep:
        yield mock_sleep


@pytest.fixture
def driver(fake_runner, settings, no_sleep):
    return PD9Driver(uuid=VM_UUID, runner=fake_runner, settings=settings)


@pytest.fixture(autouse=True)
def reset_container():
    yield
    set_container(None)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "posix: Tests that spawn real POSIX processes")
