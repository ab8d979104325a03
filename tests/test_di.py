#!/usr/bin/env python3
"""Tests for the dependency injection container."""

from unittest.mock import MagicMock

import pytest

from parallelsbox.backends.subprocess_runner import SubprocessRunner
from parallelsbox.di import DependencyContainer, create_default_container, get_container, set_container
from parallelsbox.interfaces.process import ProcessRunner
from parallelsbox.models import DriverSettings


class Consumer:
    def __init__(self, runner: ProcessRunner, settings: DriverSettings = None):
        self.runner = runner
        self.settings = settings


class TestDependencyContainer:
    def test_register_instance(self):
        runner = MagicMock(spec=ProcessRunner)
        container = DependencyContainer().register(ProcessRunner, instance=runner)

        assert container.resolve(ProcessRunner) is runner

    def test_singleton(self):
        container = DependencyContainer().register(ProcessRunner, SubprocessRunner)

        assert container.resolve(ProcessRunner) is container.resolve(ProcessRunner)

    def test_instance_overrides_factory(self):
        runner = MagicMock(spec=ProcessRunner)
        container = DependencyContainer().register(ProcessRunner, SubprocessRunner)
        container.resolve(ProcessRunner)

        container.register(ProcessRunner, instance=runner)

        assert container.resolve(ProcessRunner) is runner

    def test_constructor_injection(self):
        runner = MagicMock(spec=ProcessRunner)
        container = DependencyContainer().register(ProcessRunner, instance=runner)

        consumer = container.resolve(Consumer)

        assert consumer.runner is runner
        assert consumer.settings is None

    def test_defaults_not_overridden_by_unregistered_types(self):
        container = DependencyContainer().register(ProcessRunner, SubprocessRunner)

        assert container.resolve(ProcessRunner).encoding == "utf-8"

    def test_abstract_interface_unregistered(self):
        with pytest.raises(KeyError):
            DependencyContainer().resolve(ProcessRunner)

    def test_register_requires_target(self):
        with pytest.raises(ValueError):
            DependencyContainer().register(ProcessRunner)

    def test_reregistering_factory_drops_cached_instance(self):
        container = DependencyContainer().register(ProcessRunner, SubprocessRunner)
        first = container.resolve(ProcessRunner)

        container.register(ProcessRunner, SubprocessRunner)

        assert container.resolve(ProcessRunner) is not first


class TestDefaultContainer:
    def test_default_registrations(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("PARALLELSBOX_CONFIG", str(tmp_path / "none.yaml"))

        container = create_default_container()

        assert isinstance(container.resolve(ProcessRunner), SubprocessRunner)
        assert isinstance(container.resolve(DriverSettings), DriverSettings)

    def test_global_container(self):
        custom = DependencyContainer()
        set_container(custom)

        assert get_container() is custom
