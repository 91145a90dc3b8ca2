"""
Core data models and enums for the ARP Discovery Module.

This module defines the data structures used throughout a discovery cycle,
including host records, lifecycle events, probe and vendor summaries, and
the per-cycle result returned by ``DiscoveryEngine.discover()``.
"""

import ipaddress
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import List, Optional, Dict, Any


UNKNOWN_HOSTNAME = "unknown"
BROADCAST_MAC = "FF:FF:FF:FF:FF:FF"


class HostEventType(Enum):
    """Lifecycle transitions a host can go through."""
    FOUND = "found"
    UPDATE = "update"
    LOST = "lost"


class CycleStage(Enum):
    """Named stages of a discovery cycle, in execution order."""
    IDLE = "idle"
    FLOOD = "flood"
    READ = "read"
    PARSE = "parse"
    UPDATE = "update"
    RESOLVE = "resolve"
    PUBLISH = "publish"


class ProbeOutcome(Enum):
    """How a single flood probe terminated. All three count as complete."""
    CONNECTED = "connected"
    TIMED_OUT = "timed_out"
    ERRORED = "errored"


@dataclass
class HostRecord:
    """
    A host present in the neighbor cache.

    Attributes:
        ip_address: IPv4 address of the host
        mac_address: Normalized MAC address (uppercase, colon separated)
        hostname: Resolved hostname or "unknown"
        interface_name: Local interface the entry was learned on (if reported)
        last_seen: Epoch seconds of the last cycle that saw this host
        vendor: Hardware vendor name (only when vendor resolution is enabled)
    """
    ip_address: str
    mac_address: str
    hostname: str = UNKNOWN_HOSTNAME
    interface_name: Optional[str] = None
    last_seen: float = 0.0
    vendor: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class InterfaceInfo:
    """
    The local interface selected for discovery.

    Attributes:
        name: Interface name as reported by the OS
        address: IPv4 address of the interface
        netmask: Dotted-decimal netmask
    """
    name: str
    address: str
    netmask: str

    @property
    def network(self) -> str:
        """Subnet in CIDR notation, e.g. 192.168.1.0/24."""
        return str(ipaddress.IPv4Network(f"{self.address}/{self.netmask}", strict=False))


@dataclass
class HostEvent:
    """A lifecycle transition produced by the host registry."""
    event_type: HostEventType
    record: HostRecord


@dataclass
class ProbeSummary:
    """
    Outcome counters for one flood.

    Attributes:
        total: Number of candidates probed
        connected: Probes that completed a TCP handshake
        timed_out: Probes that hit the connect timeout
        errored: Probes that failed with any other socket error
        duration: Wall-clock duration of the flood in seconds
    """
    total: int = 0
    connected: int = 0
    timed_out: int = 0
    errored: int = 0
    duration: float = 0.0

    def record(self, outcome: ProbeOutcome) -> None:
        if outcome == ProbeOutcome.CONNECTED:
            self.connected += 1
        elif outcome == ProbeOutcome.TIMED_OUT:
            self.timed_out += 1
        else:
            self.errored += 1

    @property
    def completed(self) -> int:
        return self.connected + self.timed_out + self.errored


@dataclass
class VendorResolution:
    """
    Result of a vendor resolution pass.

    Partial success is normal: ``last_error`` only carries the most recent
    failure and ``resolved`` may be lower than ``attempted``.
    """
    attempted: int = 0
    resolved: int = 0
    last_error: Optional[Exception] = None


@dataclass
class CycleResult:
    """
    Result of one ``discover()`` call.

    Attributes:
        flooded: Whether this cycle ran a flood (False when throttled)
        flood_timestamp: Flood timestamp used as the staleness boundary
        events: Lifecycle events emitted during the cycle, in order
        hosts: Snapshot of the registry after the cycle, keyed by MAC
        errors: Non-fatal errors reported during the cycle
        duration: Wall-clock duration of the cycle in seconds
        skipped: True when a monitor tick was skipped because a cycle was running
    """
    flooded: bool = False
    flood_timestamp: float = 0.0
    events: List[HostEvent] = field(default_factory=list)
    hosts: Dict[str, HostRecord] = field(default_factory=dict)
    errors: List[Exception] = field(default_factory=list)
    duration: float = 0.0
    skipped: bool = False
