#!/usr/bin/env python3
"""Tests for the CLI module."""

from unittest.mock import patch

import pytest

from conftest import FakeRunner, as_json, fail, ok
from parallelsbox.cli import build_parser, main
from parallelsbox.di import DependencyContainer, set_container
from parallelsbox.interfaces.process import ProcessRunner
from parallelsbox.models import DriverSettings

VERSION = ok("prlctl version 9.0.24172\n")


def routed(routes):
    def handler(exe, args):
        if args == ("--version",):
            return VERSION
        for prefix, result in routes.items():
            if args[: len(prefix)] == prefix:
                return result
        return ok()

    return handler


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture(autouse=True)
def container(runner):
    container = DependencyContainer()
    container.register(ProcessRunner, instance=runner)
    container.register(DriverSettings, instance=DriverSettings(retry_delay_seconds=0))
    set_container(container)
    with patch("parallelsbox.cli.utils.configure_logging"):
        yield container
    set_container(None)


class TestParser:
    def test_subcommands(self):
        parser = build_parser()
        args = parser.parse_args(["start", "{vm}", "--gui"])

        assert args.uuid == "{vm}"
        assert args.gui is True

    def test_no_command_prints_help(self, capsys):
        main([])
        assert "parallelsbox" in capsys.readouterr().out


class TestCommands:
    def test_version(self, runner, capsys):
        runner.handler = routed({})

        main(["version"])

        assert "9.0.24172" in capsys.readouterr().out

    def test_list(self, runner, capsys):
        runner.handler = routed(
            {("list", "--all", "--info"): ok(as_json([{"ID": "{vm-1}", "Name": "box", "State": "running"}]))}
        )

        main(["list"])

        out = capsys.readouterr().out
        assert "{vm-1}" in out
        assert "box" in out

    def test_list_empty(self, runner, capsys):
        runner.handler = routed({("list", "--all", "--info"): ok("[]")})

        main(["list"])

        assert "No VMs found" in capsys.readouterr().out

    def test_status(self, runner, capsys):
        runner.handler = routed({("list", "{vm}"): ok("suspended\n")})

        main(["status", "{vm}"])

        assert "suspended" in capsys.readouterr().out

    def test_start_already_running(self, runner, capsys):
        runner.handler = routed({("list", "{vm}"): ok("running\n")})

        main(["start", "{vm}"])

        assert "already running" in capsys.readouterr().out
        assert ("start", "{vm}") not in runner.commands

    def test_start(self, runner, capsys):
        runner.handler = routed({("list", "{vm}"): ok("stopped\n")})

        main(["start", "{vm}"])

        assert ("start", "{vm}") in runner.commands

    def test_halt(self, runner):
        runner.handler = routed({})

        main(["halt", "{vm}"])

        assert ("stop", "{vm}", "--kill") in runner.commands

    def test_prlctl_error_exits_nonzero(self, runner, capsys):
        runner.handler = routed({("suspend",): fail("VM is not running")})

        with pytest.raises(SystemExit) as exc_info:
            main(["suspend", "{vm}"])

        assert exc_info.value.code == 1
        assert "VM is not running" in capsys.readouterr().out

    def test_missing_prlctl_exits_nonzero(self, runner, capsys):
        def handler(exe, args):
            raise FileNotFoundError(exe)

        runner.handler = handler

        with pytest.raises(SystemExit):
            main(["list"])

        assert "could not" in capsys.readouterr().out
