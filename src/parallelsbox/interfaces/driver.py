"""Interface every Parallels Desktop driver version implements."""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Sequence, Set

from ..models import HostOnlyNetworkOptions, NetworkAdapterSpec, SharedFolder, VMState

ProgressCallback = Callable[[int], None]


class ParallelsDriver(ABC):
    """Abstract interface for VM lifecycle and network operations."""

    @abstractmethod
    def verify(self) -> None:
        """Verify the driver is ready to accept work.

        Raises ``PrlCtlNotFoundError`` when the control utility is missing
        or misconfigured. Called before any other operation in a session.
        """
        pass

    @abstractmethod
    def vm_exists(self, uuid: str) -> bool:
        """Check if a VM with the given UUID exists."""
        pass

    @abstractmethod
    def read_state(self) -> VMState:
        """Return the current state of this VM."""
        pass

    @abstractmethod
    def read_vms(self) -> Set[str]:
        """Return the UUIDs of all VMs known to Parallels Desktop."""
        pass

    @abstractmethod
    def start(self, mode: str = "headless") -> None:
        """Start the VM. ``mode`` is either "headless" or "gui"."""
        pass

    @abstractmethod
    def halt(self) -> None:
        """Halt the VM (pulls the plug)."""
        pass

    @abstractmethod
    def suspend(self) -> None:
        """Suspend the VM."""
        pass

    @abstractmethod
    def delete(self) -> None:
        """Delete the VM referenced by this driver."""
        pass

    @abstractmethod
    def import_vm(self, source_path: str) -> str:
        """Import the VM bundle at ``source_path`` and return its UUID."""
        pass

    @abstractmethod
    def export(self, path: str, on_progress: Optional[ProgressCallback] = None) -> None:
        """Export the VM to ``path``, reporting progress percentages."""
        pass

    @abstractmethod
    def read_network_interfaces(self) -> Dict[int, Dict[str, Any]]:
        """Return the VM's network adapters keyed by slot index."""
        pass

    @abstractmethod
    def enable_adapters(self, adapters: Sequence[NetworkAdapterSpec]) -> None:
        """Enable the given network adapters on the VM.

        Host-only, bridged and shared adapters must all be supported.
        """
        pass

    @abstractmethod
    def read_bridged_interfaces(self) -> List[Dict[str, Any]]:
        """Return the host interfaces available for bridging."""
        pass

    @abstractmethod
    def read_host_only_interfaces(self) -> List[Dict[str, Any]]:
        """Return the available host-only networks."""
        pass

    @abstractmethod
    def create_host_only_network(self, options: HostOnlyNetworkOptions) -> Dict[str, Any]:
        """Create a host-only network.

        Returns the network details with keys ``name``, ``ip`` and ``netmask``.
        """
        pass

    @abstractmethod
    def delete_unused_host_only_networks(self) -> None:
        """Delete host-only networks that no VM is using."""
        pass

    @abstractmethod
    def read_mac_address(self) -> str:
        """Return the MAC address of the first network adapter."""
        pass

    @abstractmethod
    def set_mac_address(self, mac: str) -> None:
        """Set the MAC address (no separators) of the first network adapter."""
        pass

    @abstractmethod
    def set_name(self, name: str) -> None:
        """Rename the VM."""
        pass

    @abstractmethod
    def share_folders(self, folders: Sequence[SharedFolder]) -> None:
        """Share a set of host folders with the VM."""
        pass

    @abstractmethod
    def clear_shared_folders(self) -> None:
        """Remove all shared folders from the VM."""
        pass

    @abstractmethod
    def read_guest_tools_version(self) -> Optional[str]:
        """Return the guest tools version installed in this VM."""
        pass

    @abstractmethod
    def ssh_port(self, expected_port: int) -> int:
        """Return the host port that reaches the guest's ``expected_port``."""
        pass

    @abstractmethod
    def max_network_adapters(self) -> int:
        """Return the maximum number of network adapters."""
        pass

    @abstractmethod
    def execute_command(self, command: Sequence[Any]) -> str:
        """Execute a raw command straight through to prlctl.

        Accepts a trailing options record, e.g. ``{"retryable": True}``.
        Raises ``PrlCtlError`` if it fails.
        """
        pass
