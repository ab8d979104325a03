"""Driver for Parallels Desktop 8 and 9."""

import itertools
import re
import time
from typing import Any, Dict, List, Optional, Sequence, Set

from ..errors import (
    ParallelsInstallIncomplete,
    ParallelsKernelModuleNotLoaded,
    ParallelsNoRoomForHighLevelNetwork,
    PrlCtlNotFoundError,
)
from ..interfaces.driver import ProgressCallback
from ..logging import log_operation
from ..models import (
    HostOnlyNetworkOptions,
    NetworkAdapterSpec,
    SharedFolder,
    VMState,
)
from .base import BaseDriver

# prlctl status -> VMState
STATE_MAP = {
    "running": VMState.RUNNING,
    "starting": VMState.RUNNING,
    "resuming": VMState.RUNNING,
    "stopping": VMState.RUNNING,
    "stopped": VMState.STOPPED,
    "suspended": VMState.SUSPENDED,
    "suspending": VMState.SUSPENDED,
    "paused": VMState.SUSPENDED,
    "invalid": VMState.INACCESSIBLE,
}

ADAPTER_TYPES = {"hostonly": "host", "bridged": "bridged", "shared": "shared"}
ADAPTER_TYPES_REVERSE = {v: k for k, v in ADAPTER_TYPES.items()}

_PROGRESS_RE = re.compile(r".+?(\d{1,3}) ?%")
_NET_SLOT_RE = re.compile(r"^net(\d+)$")
# 'Shared' (vnic0) and 'Host-Only' (vnic1) ship with Parallels Desktop.
_HOST_ONLY_IFACE_RE = re.compile(r"^(?:vnic|Parallels Host-Only #)(\d+)$")


def _hardware(info: Dict[str, Any]) -> Dict[str, Any]:
    hardware = info.get("Hardware")
    return hardware if isinstance(hardware, dict) else {}


def _assign_slots(adapters: Sequence[NetworkAdapterSpec]) -> List[int]:
    """Pin explicit slots, then give the rest the lowest slots left over."""
    explicit = [a.adapter for a in adapters if a.adapter is not None]
    duplicates = sorted({slot for slot in explicit if explicit.count(slot) > 1})
    if duplicates:
        raise ValueError(f"Network adapter slots requested more than once: {duplicates}")

    taken = set(explicit)
    free = (i for i in itertools.count() if i not in taken)
    return [a.adapter if a.adapter is not None else next(free) for a in adapters]


class PD9Driver(BaseDriver):
    """Parallels Desktop 9 driver built on ``prlctl ... --json`` output."""

    def max_network_adapters(self) -> int:
        return 8

    def _vm(self) -> str:
        if not self.uuid:
            raise ValueError(f"{type(self).__name__} is not bound to a VM uuid")
        return self.uuid

    # ── session / inventory ─────────────────────────────────────────────

    def verify(self) -> None:
        try:
            result = self.raw("--version")
        except OSError as e:
            raise PrlCtlNotFoundError() from e

        if result.exit_code != 0:
            output = f"{result.stdout}\n{result.stderr}".lower()
            if "kernel module" in output:
                raise ParallelsKernelModuleNotLoaded()
            if "installation is incomplete" in output:
                raise ParallelsInstallIncomplete()
            raise PrlCtlNotFoundError()

    def read_version(self) -> str:
        """Return the Parallels Desktop version, e.g. ``9.0.24172``."""
        out = self.execute("--version")
        match = re.search(r"(\d+\.\d+\.\d+)", out)
        return match.group(1) if match else out.strip()

    def vm_exists(self, uuid: str) -> bool:
        return self.raw("list", uuid).exit_code == 0

    def _records(self, text: str) -> List[Dict[str, Any]]:
        """Parse a JSON list of objects, dropping anything of another shape."""
        data = self.json(text, [])
        if not isinstance(data, list):
            return []
        return [item for item in data if isinstance(item, dict)]

    def read_vms(self) -> Set[str]:
        vms = self._records(self.execute("list", "--all", "--json"))
        return {vm["uuid"] for vm in vms if "uuid" in vm}

    def read_vms_info(self) -> List[Dict[str, Any]]:
        """Return ``--info`` records for every registered VM."""
        return self._records(self.execute("list", "--all", "--info", "--json"))

    def read_settings(self) -> Dict[str, Any]:
        """Return the ``--info`` record of this VM."""
        info = self._records(self.execute("list", self._vm(), "--info", "--json"))
        return info[0] if info else {}

    def read_state(self) -> VMState:
        if not self.uuid:
            return VMState.NOT_CREATED

        result = self.raw("list", self.uuid, "--no-header", "--output", "status")
        if result.exit_code != 0:
            # A registered VM whose bundle was removed can no longer be
            # listed by uuid but still shows up in the inventory.
            if self.uuid in self.read_vms():
                return VMState.INACCESSIBLE
            return VMState.NOT_CREATED

        status = result.stdout.strip().lower()
        state = STATE_MAP.get(status)
        if state is None:
            self.log.warning("vm.unknown_status", status=status)
            return VMState.INACCESSIBLE
        return state

    # ── lifecycle ───────────────────────────────────────────────────────

    def start(self, mode: str = "headless") -> None:
        """
        Start the VM.

        ``mode`` is only validated. prlctl has no headless switch, so both
        modes run the same command and whether a window opens is decided by
        the VM's own startup view setting in Parallels Desktop.
        """
        if mode not in ("headless", "gui"):
            raise ValueError(f"mode must be 'headless' or 'gui', got {mode!r}")
        with log_operation(self.log, "start", mode=mode):
            self.execute("start", self._vm())

    def halt(self) -> None:
        with log_operation(self.log, "halt"):
            self.execute("stop", self._vm(), "--kill")

    def suspend(self) -> None:
        with log_operation(self.log, "suspend"):
            self.execute("suspend", self._vm())

    def delete(self) -> None:
        with log_operation(self.log, "delete"):
            self.execute("delete", self._vm())

    def import_vm(self, source_path: str) -> str:
        with log_operation(self.log, "import", source=source_path):
            before = self.read_vms()
            self.execute("register", source_path, "--preserve-uuid", retryable=True)

            added = self.read_vms() - before
            if len(added) == 1:
                return added.pop()

            home = source_path.rstrip("/")
            for vm in self.read_vms_info():
                if str(vm.get("Home", "")).rstrip("/") == home:
                    return vm["ID"]

            raise LookupError(f"Registered VM not found for {source_path}")

    def export(self, path: str, on_progress: Optional[ProgressCallback] = None) -> None:
        tpl_name = f"parallelsbox_temp_{int(time.time() * 1000)}"

        def on_output(stream: str, data: str) -> None:
            # Progress is in the last \r-separated chunk of the output.
            last = data.split("\r")[-1]
            match = _PROGRESS_RE.match(last)
            if match and on_progress is not None:
                on_progress(int(match.group(1)))

        with log_operation(self.log, "export", path=path):
            self.execute(
                "clone", self._vm(), "--name", tpl_name, "--template", "--dst", path,
                on_output=on_output,
            )
            self.execute("unregister", tpl_name)

    def set_name(self, name: str) -> None:
        self.execute("set", self._vm(), "--name", name, retryable=True)

    # ── networking ──────────────────────────────────────────────────────

    def read_network_interfaces(self) -> Dict[int, Dict[str, Any]]:
        nics = {}
        for name, params in _hardware(self.read_settings()).items():
            match = _NET_SLOT_RE.match(name)
            if not match or not isinstance(params, dict):
                continue
            nics[int(match.group(1))] = {
                "type": ADAPTER_TYPES_REVERSE.get(params.get("type"), params.get("type")),
                "iface": params.get("iface"),
                "mac": params.get("mac"),
                "enabled": params.get("enabled", True),
            }
        return nics

    def enable_adapters(self, adapters: Sequence[NetworkAdapterSpec]) -> None:
        adapters = [
            a if isinstance(a, NetworkAdapterSpec) else NetworkAdapterSpec.model_validate(a)
            for a in adapters
        ]

        slots = _assign_slots(adapters)
        limit = self.max_network_adapters()
        if len(adapters) > limit or any(slot >= limit for slot in slots):
            raise ParallelsNoRoomForHighLevelNetwork(limit=limit, requested=len(adapters))

        # Every command is built before the first one runs.
        occupied = set(self.read_network_interfaces())
        commands = []
        for slot, adapter in sorted(zip(slots, adapters), key=lambda pair: pair[0]):
            args = ["set", self._vm()]
            if slot in occupied:
                args += ["--device-set", f"net{slot}"]
            else:
                # prlctl adds a new adapter in the lowest free slot
                next_free = next(i for i in itertools.count() if i not in occupied)
                if slot != next_free:
                    raise ValueError(
                        f"Cannot add a network adapter at slot {slot}: "
                        f"prlctl would place it at net{next_free}"
                    )
                occupied.add(slot)
                args += ["--device-add", "net"]

            args += ["--type", ADAPTER_TYPES[adapter.type]]
            if adapter.type == "hostonly":
                args += ["--iface", adapter.hostonly]
            elif adapter.type == "bridged":
                args += ["--iface", adapter.bridge]

            args += ["--mac", adapter.mac_address or "auto"]
            commands.append((slot, adapter.type, args))

        for slot, adapter_type, args in commands:
            self.log.info("adapter.enable", slot=slot, type=adapter_type)
            self.execute(*args, retryable=True)

    def read_virtual_networks(self) -> List[Dict[str, Any]]:
        """Return the virtual networks known to prlsrvctl."""
        return self._records(self.execute_prlsrvctl("net", "list", "--json"))

    def read_network_info(self, network_id: str) -> Dict[str, Any]:
        info = self.json(self.execute_prlsrvctl("net", "info", network_id, "--json"), {})
        return info if isinstance(info, dict) else {}

    def read_bridged_interfaces(self) -> List[Dict[str, Any]]:
        bridged = []
        for net in self.read_virtual_networks():
            if net.get("Type") != "bridged":
                continue
            bridged.append(
                {
                    "name": net.get("Bound To"),
                    "network_id": net.get("Network ID"),
                    "status": "Up" if net.get("Bound To") else "Down",
                }
            )
        return bridged

    def read_host_only_interfaces(self) -> List[Dict[str, Any]]:
        hostonly = []
        for net in self.read_virtual_networks():
            if net.get("Type") != "host-only" or "Network ID" not in net:
                continue
            info = self.read_network_info(net["Network ID"])
            adapter = info.get("Parallels adapter")
            if not isinstance(adapter, dict):
                adapter = {}
            hostonly.append(
                {
                    "name": net["Network ID"],
                    "bound_to": net.get("Bound To"),
                    "ip": adapter.get("IPv4 address"),
                    "netmask": adapter.get("IPv4 subnet mask"),
                    "status": "Up" if adapter else "Down",
                }
            )
        return hostonly

    def create_host_only_network(self, options: HostOnlyNetworkOptions) -> Dict[str, Any]:
        if not isinstance(options, HostOnlyNetworkOptions):
            options = HostOnlyNetworkOptions.model_validate(options)

        self.execute_prlsrvctl("net", "add", options.network_id, "--type", "host-only")

        args = ["net", "set", options.network_id, "--ip", f"{options.adapter_ip}/{options.netmask}"]
        if options.has_dhcp:
            if options.dhcp_ip:
                args += ["--dhcp-ip", options.dhcp_ip]
            args += ["--ip-scope-start", options.dhcp_lower, "--ip-scope-end", options.dhcp_upper]
        self.execute_prlsrvctl(*args)

        return {
            "name": options.network_id,
            "ip": options.adapter_ip,
            "netmask": options.netmask,
            "dhcp": options.has_dhcp,
        }

    def delete_unused_host_only_networks(self) -> None:
        candidates = {}
        for net in self.read_virtual_networks():
            if net.get("Type") != "host-only":
                continue
            match = _HOST_ONLY_IFACE_RE.match(str(net.get("Bound To", "")))
            if match and int(match.group(1)) >= 2 and "Network ID" in net:
                candidates[net["Network ID"]] = net

        for vm in self.read_vms_info():
            for name, params in _hardware(vm).items():
                if _NET_SLOT_RE.match(name) and isinstance(params, dict):
                    candidates.pop(params.get("iface"), None)

        for network_id in candidates:
            self.log.info("network.delete_unused", network_id=network_id)
            self.execute_prlsrvctl("net", "del", network_id)

    def read_mac_address(self) -> str:
        net0 = _hardware(self.read_settings()).get("net0")
        if not isinstance(net0, dict):
            return ""
        return str(net0.get("mac", "")).replace(":", "").upper()

    def set_mac_address(self, mac: str) -> None:
        self.execute("set", self._vm(), "--device-set", "net0", "--type", "shared", "--mac", mac)

    def ssh_port(self, expected_port: int) -> int:
        # Guests are reached directly on their own address, not via forwarding.
        return expected_port

    # ── shared folders / guest tools ────────────────────────────────────

    def share_folders(self, folders: Sequence[SharedFolder]) -> None:
        for folder in folders:
            if not isinstance(folder, SharedFolder):
                folder = SharedFolder.model_validate(folder)
            self.execute("set", self._vm(), "--shf-host-add", folder.name, "--path", folder.hostpath)

    def clear_shared_folders(self) -> None:
        shared = self.read_settings().get("Host Shared Folders")
        if not isinstance(shared, dict):
            return
        for name in shared:
            if name == "enabled":
                continue
            self.execute("set", self._vm(), "--shf-host-del", name)

    def read_guest_tools_version(self) -> Optional[str]:
        tools = self.read_settings().get("GuestTools")
        return tools.get("version") if isinstance(tools, dict) else None
