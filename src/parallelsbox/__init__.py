"""
parallelsbox - control Parallels Desktop virtual machines through prlctl.

Provides a driver contract for VM lifecycle and network operations with
per-version implementations built on the prlctl/prlsrvctl command-line
tools.
"""

__version__ = "0.1.0"

from parallelsbox.driver import BaseDriver, PD9Driver, PD10Driver, create_driver
from parallelsbox.errors import ParallelsError, PrlCtlError, PrlCtlNotFoundError
from parallelsbox.models import VMState

__all__ = [
    "BaseDriver",
    "PD9Driver",
    "PD10Driver",
    "ParallelsError",
    "PrlCtlError",
    "PrlCtlNotFoundError",
    "VMState",
    "create_driver",
    "__version__",
]
