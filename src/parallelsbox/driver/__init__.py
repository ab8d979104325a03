"""Parallels Desktop drivers."""

from .base import PRLSRVCTL, BaseDriver
from .meta import create_driver, driver_class
from .pd9 import PD9Driver
from .pd10 import PD10Driver

__all__ = [
    "PRLSRVCTL",
    "BaseDriver",
    "PD9Driver",
    "PD10Driver",
    "create_driver",
    "driver_class",
]
