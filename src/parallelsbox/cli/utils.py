#!/usr/bin/env python3
"""
Shared utilities for the parallelsbox CLI.
"""

from pathlib import Path
from typing import Optional

from rich.console import Console

from parallelsbox.config import load_settings
from parallelsbox.di import get_container
from parallelsbox.driver.base import BaseDriver
from parallelsbox.driver.meta import create_driver
from parallelsbox.interfaces.process import ProcessRunner
from parallelsbox.logging import configure_logging
from parallelsbox.models import DriverSettings

console = Console()


def setup(args) -> DriverSettings:
    """Load settings for this invocation and configure logging from them."""
    container = get_container()
    config = getattr(args, "config", None)
    if config:
        container.register(DriverSettings, instance=load_settings(Path(config)))
    settings = container.resolve(DriverSettings)

    level = getattr(args, "log_level", None) or settings.log_level
    json_logs = getattr(args, "json_logs", False) or settings.log_json
    configure_logging(level=level, json_output=json_logs)
    return settings


def build_driver(args, uuid: Optional[str] = None) -> BaseDriver:
    """Create the driver matching the installed Parallels Desktop."""
    settings = setup(args)
    runner = get_container().resolve(ProcessRunner)
    return create_driver(uuid=uuid, runner=runner, settings=settings)
