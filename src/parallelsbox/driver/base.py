"""
Base class for all Parallels Desktop drivers.

Provides execution of prlctl/prlsrvctl with retries, SIGINT handling and
exit-code translation. Version-specific drivers subclass it and implement
the lifecycle operations on top of :meth:`BaseDriver.execute`.
"""

import dataclasses
import json
import time
from typing import Any, Mapping, Optional, Sequence

from ..busy import busy
from ..errors import PrlCtlError
from ..interfaces.driver import ParallelsDriver
from ..interfaces.process import STREAMS, OutputCallback, ProcessResult, ProcessRunner
from ..logging import get_logger
from ..models import CommandOptions, DriverSettings

log = get_logger(__name__)

# Leading command token that routes a command to prlsrvctl instead of prlctl.
PRLSRVCTL = "prlsrvctl"


class BaseDriver(ParallelsDriver):
    """Shared plumbing for every driver version."""

    def __init__(
        self,
        uuid: Optional[str] = None,
        runner: Optional[ProcessRunner] = None,
        settings: Optional[DriverSettings] = None,
    ):
        if runner is None:
            from ..backends.subprocess_runner import SubprocessRunner

            runner = SubprocessRunner()

        self.uuid = uuid
        self.runner = runner
        self.settings = settings or DriverSettings()

        # Set once SIGINT is observed during a call, never reset.
        self.interrupted = False

        self.prlctl_path = self.settings.prlctl_path
        self.prlsrvctl_path = self.settings.prlsrvctl_path

        self.log = log.bind(driver=type(self).__name__, uuid=uuid)
        self.log.info("driver.init", prlctl=self.prlctl_path, prlsrvctl=self.prlsrvctl_path)

    def max_network_adapters(self) -> int:
        return 16

    def json(self, text: Optional[str], default: Any = None) -> Any:
        """Parse a JSON payload from the control utility.

        Returns ``default`` when the payload is not valid JSON; prlctl prints
        plain diagnostics instead of JSON on some error paths.
        """
        try:
            return json.loads(text)
        except (TypeError, ValueError):
            return default

    def execute_command(self, command: Sequence[Any]) -> str:
        return self.execute(*command)

    def execute_prlsrvctl(self, *command: Any, **options: Any) -> str:
        """Shorthand for ``execute(PRLSRVCTL, *command)``."""
        return self.execute(PRLSRVCTL, *command, **options)

    def execute(
        self,
        *command: Any,
        on_output: Optional[OutputCallback] = None,
        **options: Any,
    ) -> str:
        """
        Execute a prlctl (or prlsrvctl) command and return its stdout.

        Options may be given as a trailing ``CommandOptions``/dict argument or
        as keyword arguments. Retryable commands are attempted
        ``settings.retry_attempts`` times.

        Raises ``PrlCtlError`` if the command exits nonzero outside an
        interrupted session.
        """
        command = list(command)
        opts = CommandOptions()
        if command and isinstance(command[-1], (CommandOptions, Mapping)):
            opts = CommandOptions.from_value(command.pop())
        if options:
            opts = dataclasses.replace(opts, **options)

        attempts = self.settings.retry_attempts if opts.retryable else 1

        for attempt in range(1, attempts + 1):
            try:
                return self._execute_once(command, opts, on_output).stdout
            except PrlCtlError as e:
                if attempt >= attempts:
                    raise
                self.log.warning(
                    "prlctl.retry",
                    command=command,
                    attempt=attempt,
                    attempts=attempts,
                    stderr=e.stderr,
                )
                time.sleep(self.settings.retry_delay_seconds)

    def _execute_once(
        self,
        command: Sequence[str],
        opts: CommandOptions,
        on_output: Optional[OutputCallback],
    ) -> ProcessResult:
        errored = False

        result = self.raw(*command, on_output=on_output, notify=opts.notify)

        if result.exit_code != 0:
            if self.interrupted:
                self.log.info("prlctl.interrupted_exit_ignored", exit_code=result.exit_code)
            else:
                errored = True

        if errored:
            raise PrlCtlError(command=command, stderr=result.stderr)

        return result

    def raw(
        self,
        *command: Any,
        on_output: Optional[OutputCallback] = None,
        notify=(),
    ) -> ProcessResult:
        """Execute a command and return the raw result without checking it."""

        def on_interrupt():
            self.interrupted = True
            self.log.info("prlctl.interrupted")

        args = [str(arg) for arg in command]

        if on_output is not None and not notify:
            notify = STREAMS

        if args and args[0] == PRLSRVCTL:
            cli = self.prlsrvctl_path
            args = args[1:]
        else:
            cli = self.prlctl_path

        self.log.debug("prlctl.execute", cli=cli, args=args)

        with busy(on_interrupt):
            return self.runner.execute(cli, *args, notify=notify, on_output=on_output)
