"""
Selection of the driver class matching the installed Parallels Desktop.
"""

import re
from typing import Dict, Optional, Type

from ..errors import ParallelsInvalidVersion, PrlCtlNotFoundError
from ..interfaces.process import ProcessRunner
from ..logging import get_logger
from ..models import DriverSettings
from .base import BaseDriver
from .pd9 import PD9Driver
from .pd10 import PD10Driver

log = get_logger(__name__)

# Major version -> driver class. Versions above the highest key use the
# newest driver.
DRIVERS: Dict[int, Type[BaseDriver]] = {
    8: PD9Driver,
    9: PD9Driver,
    10: PD10Driver,
}

_VERSION_RE = re.compile(r"prlctl version (\d+\.\d+\.\d+)")


def read_version(
    runner: Optional[ProcessRunner] = None,
    settings: Optional[DriverSettings] = None,
) -> str:
    """Return the installed Parallels Desktop version, e.g. ``10.1.2``."""
    driver = PD9Driver(runner=runner, settings=settings)
    driver.verify()
    out = driver.execute("--version")
    match = _VERSION_RE.search(out)
    if not match:
        raise PrlCtlNotFoundError()
    return match.group(1)


def driver_class(version: str) -> Type[BaseDriver]:
    """Return the driver class for a Parallels Desktop version string."""
    try:
        major = int(version.split(".", 1)[0])
    except ValueError:
        major = -1

    if major < min(DRIVERS):
        raise ParallelsInvalidVersion(
            version=version,
            supported=", ".join(str(v) for v in sorted(DRIVERS)),
        )
    return DRIVERS.get(major, DRIVERS[max(DRIVERS)])


def create_driver(
    uuid: Optional[str] = None,
    runner: Optional[ProcessRunner] = None,
    settings: Optional[DriverSettings] = None,
) -> BaseDriver:
    """Detect the installed version and return a driver bound to ``uuid``."""
    version = read_version(runner, settings)
    cls = driver_class(version)
    log.info("driver.selected", version=version, driver=cls.__name__)
    return cls(uuid=uuid, runner=runner, settings=settings)
