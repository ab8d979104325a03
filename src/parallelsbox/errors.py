"""Exceptions raised by the Parallels Desktop driver."""

from typing import Any, Optional, Sequence


class ParallelsError(Exception):
    """Base exception for all driver errors.

    Subclasses set ``message`` to a user-facing template that is formatted
    with the keyword arguments given to the constructor.
    """

    message = "An error occurred while controlling Parallels Desktop."

    def __init__(self, message: Optional[str] = None, **context: Any):
        self.context = context
        text = message or self.message
        if context:
            text = text.format(**context)
        super().__init__(text)


class PrlCtlError(ParallelsError):
    """Raised when the control utility exits with a nonzero status."""

    message = (
        "There was an error while executing `prlctl`, a CLI used for\n"
        "controlling Parallels Desktop. The command and stderr is shown below.\n"
        "\n"
        "Command: {command}\n"
        "\n"
        "Stderr: {stderr}"
    )

    def __init__(self, command: Sequence[str], stderr: str = ""):
        self.command = list(command)
        self.stderr = stderr
        super().__init__(command=self.command, stderr=stderr)


class PrlCtlNotFoundError(ParallelsError):
    """Raised by ``verify()`` when the control utility is missing or broken."""

    message = (
        'The "prlctl" command or one of its dependencies could not\n'
        "be found. Please verify Parallels Desktop is properly installed. You can verify\n"
        'everything is okay by running "prlctl --version" and verifying\n'
        "that the Parallels Desktop version is outputted."
    )


class ParallelsKernelModuleNotLoaded(PrlCtlNotFoundError):
    """Parallels Desktop reports that its kernel module is not loaded."""

    message = (
        "Parallels Desktop is complaining that the kernel module is not loaded. Please\n"
        "run `prlctl --version` or open the Parallels Desktop GUI to see the error\n"
        "message which should contain instructions on how to fix this error."
    )


class ParallelsInstallIncomplete(PrlCtlNotFoundError):
    """Parallels Desktop reports an incomplete installation."""

    message = (
        "Parallels Desktop is complaining that the installation is incomplete.\n"
        "Try to reinstall Parallels Desktop or contact Parallels support."
    )


class ParallelsInvalidVersion(ParallelsError):
    """The installed Parallels Desktop version has no matching driver."""

    message = (
        "Parallels Desktop version {version} is not supported. Supported major\n"
        "versions are: {supported}"
    )


class ParallelsNoRoomForHighLevelNetwork(ParallelsError):
    """Raised when adapter configuration would exceed the VM's slot limit."""

    message = (
        "There is no available slots on the Parallels Desktop VM for the configured\n"
        "high-level network interfaces. Each private or public network consumes a\n"
        "single network adapter slot on the Parallels Desktop VM. Parallels Desktop\n"
        "limits the number of slots to {limit}, and {requested} adapters were\n"
        "requested. Please lower the number of used network adapters."
    )
