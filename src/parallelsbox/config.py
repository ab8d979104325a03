"""
Loading of driver settings from YAML files and the environment.
"""

import os
from pathlib import Path
from typing import Optional

import yaml

from .logging import get_logger
from .models import DriverSettings

log = get_logger(__name__)

CONFIG_FILE = ".parallelsbox.yaml"

ENV_OVERRIDES = {
    "PARALLELSBOX_PRLCTL": "prlctl_path",
    "PARALLELSBOX_PRLSRVCTL": "prlsrvctl_path",
}


def user_config_path() -> Path:
    """~/.config/parallelsbox/config.yaml"""
    return Path(
        os.getenv("PARALLELSBOX_CONFIG", str(Path.home() / ".config/parallelsbox/config.yaml"))
    )


def find_config(start: Optional[Path] = None) -> Optional[Path]:
    """Return the project config in ``start`` (or cwd), else the user config if present."""
    project = (start or Path.cwd()) / CONFIG_FILE
    if project.exists():
        return project
    user = user_config_path()
    if user.exists():
        return user
    return None


def load_settings(path: Optional[Path] = None) -> DriverSettings:
    """
    Load driver settings.

    An explicit ``path`` must exist. Without one, the project and user
    config files are tried in order and defaults are used when neither
    exists. Environment overrides are applied last.
    """
    data = {}

    if path is not None:
        if path.is_dir():
            path = path / CONFIG_FILE
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
    else:
        path = find_config()

    if path is not None:
        raw = yaml.safe_load(path.read_text()) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"Config file must be a YAML mapping: {path}")
        data.update(raw.get("driver", raw))
        log.debug("config.loaded", path=str(path))

    for env_name, key in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            data[key] = value

    return DriverSettings.model_validate(data)
