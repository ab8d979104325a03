"""Driver for Parallels Desktop 10 and newer."""

from typing import Any, Dict, Optional

from .pd9 import PD9Driver


class PD10Driver(PD9Driver):
    """PD10 reports a guest tools ``state`` next to the version."""

    def _guest_tools(self) -> Dict[str, Any]:
        tools = self.read_settings().get("GuestTools")
        return tools if isinstance(tools, dict) else {}

    def read_guest_tools_state(self) -> str:
        """Return "installed", "outdated", "not_installed" or "unknown"."""
        return self._guest_tools().get("state", "unknown")

    def read_guest_tools_version(self) -> Optional[str]:
        tools = self._guest_tools()
        if tools.get("state") == "not_installed":
            return None
        return tools.get("version")
