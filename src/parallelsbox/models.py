#!/usr/bin/env python3
"""
Data models for the Parallels Desktop driver.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, FrozenSet, Literal, Mapping, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .interfaces.process import STREAMS


class VMState(Enum):
    """Lifecycle state of a virtual machine."""

    RUNNING = "running"
    STOPPED = "stopped"
    SUSPENDED = "suspended"
    INACCESSIBLE = "inaccessible"
    NOT_CREATED = "not_created"

    @property
    def description(self) -> str:
        return _STATE_DESCRIPTIONS[self]


_STATE_DESCRIPTIONS = {
    VMState.RUNNING: (
        "The VM is running. To stop this VM, halt it to shut it down forcefully,\n"
        "or suspend it. In either case, start it again to resume work."
    ),
    VMState.STOPPED: "The VM is stopped. To start the VM, simply start it again.",
    VMState.SUSPENDED: (
        "The VM is suspended. Start it again to resume this VM so that it can\n"
        "be controlled again."
    ),
    VMState.INACCESSIBLE: (
        "The VM is inaccessible! This is a rare case which means that Parallels\n"
        "Desktop can't find your VM configuration. This usually happens when deleting\n"
        "the VM via Parallels Desktop GUI, moving to a new computer, etc."
    ),
    VMState.NOT_CREATED: "The environment has not yet been created.",
}


@dataclass(frozen=True)
class CommandOptions:
    """Per-call options recognized by ``BaseDriver.execute``."""

    retryable: bool = False
    notify: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        notify = frozenset(self.notify)
        unknown = notify - STREAMS
        if unknown:
            raise ValueError(f"notify must be a subset of {sorted(STREAMS)}: {sorted(unknown)}")
        object.__setattr__(self, "notify", notify)

    @classmethod
    def from_value(cls, value: Any) -> "CommandOptions":
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            return cls(**value)
        raise TypeError(f"Unsupported command options: {value!r}")


_MAC_RE = re.compile(r"^[0-9A-F]{12}$")


class NetworkAdapterSpec(BaseModel):
    """A network adapter the caller wants attached to the VM."""

    type: Literal["hostonly", "bridged", "shared"]
    mac_address: Optional[str] = Field(default=None, description="MAC without separators")
    hostonly: Optional[str] = Field(default=None, description="Host-only network id")
    bridge: Optional[str] = Field(default=None, description="Host interface to bridge to")
    adapter: Optional[int] = Field(default=None, ge=0, description="Adapter slot index")

    @field_validator("mac_address")
    @classmethod
    def mac_must_be_valid(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        mac = re.sub(r"[:\-\s]", "", v).upper()
        if not _MAC_RE.match(mac):
            raise ValueError(f"Invalid MAC address: {v}")
        return mac

    @model_validator(mode="after")
    def type_identifiers_present(self) -> "NetworkAdapterSpec":
        if self.type == "hostonly" and not self.hostonly:
            raise ValueError("hostonly adapters require a 'hostonly' network id")
        if self.type == "bridged" and not self.bridge:
            raise ValueError("bridged adapters require a 'bridge' interface")
        return self


class SharedFolder(BaseModel):
    """A host directory shared into the guest."""

    name: str
    hostpath: str

    @field_validator("name")
    @classmethod
    def name_must_be_valid(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Shared folder name cannot be empty")
        return v.strip()


class HostOnlyNetworkOptions(BaseModel):
    """Options for creating a host-only network."""

    network_id: str
    adapter_ip: str
    netmask: str = "255.255.255.0"
    dhcp_ip: Optional[str] = None
    dhcp_lower: Optional[str] = None
    dhcp_upper: Optional[str] = None

    @property
    def has_dhcp(self) -> bool:
        return bool(self.dhcp_lower and self.dhcp_upper)


class DriverSettings(BaseModel):
    """Driver configuration."""

    prlctl_path: str = Field(default="prlctl", description="Path to prlctl")
    prlsrvctl_path: str = Field(default="prlsrvctl", description="Path to prlsrvctl")
    retry_attempts: int = Field(default=3, ge=1, le=20, description="Attempts for retryable commands")
    retry_delay_seconds: float = Field(default=1.0, ge=0, description="Sleep between attempts")
    log_level: str = Field(default="INFO", description="Log level")
    log_json: bool = Field(default=False, description="Render logs as JSON")

    @field_validator("prlctl_path", "prlsrvctl_path")
    @classmethod
    def path_must_be_set(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Tool path cannot be empty")
        return v.strip()

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_valid(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR"}
        if v.upper() not in valid:
            raise ValueError(f"log_level must be one of: {valid}")
        return v.upper()
