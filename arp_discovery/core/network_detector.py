"""
Network detection functionality for selecting the interface to monitor.

This module provides the NetworkDetector class which picks the local IPv4
interface discovery runs on and calculates the ordered list of subnet
addresses the flood stage probes.
"""

import ipaddress
import socket
from itertools import islice
from typing import List, Optional, Tuple

import psutil

from .data_models import InterfaceInfo
from ..utils.error_handler import ConfigurationError
from ..utils.logger import Logger, get_logger


class NetworkDetector:
    """
    Selects the local interface and calculates flood candidates.

    Interfaces come from ``psutil.net_if_addrs()``; links that
    ``psutil.net_if_stats()`` reports as down are ignored. The first IPv4
    address that is not loopback and carries a netmask is used, unless an
    explicit restriction address pins the choice to one interface.
    """

    def __init__(self, logger: Optional[Logger] = None):
        """
        Initialize the NetworkDetector.

        Args:
            logger: Logger instance (defaults to a module logger)
        """
        self.logger = logger or get_logger(__name__)

    def list_interfaces(self) -> List[InterfaceInfo]:
        """
        List every IPv4 address bound to a local interface that is up.

        Returns:
            List[InterfaceInfo]: Addresses in OS enumeration order
        """
        stats = psutil.net_if_stats()
        interfaces = []
        for interface_name, addresses in psutil.net_if_addrs().items():
            link = stats.get(interface_name)
            if link is not None and not link.isup:
                self.logger.debug(f"Skipping {interface_name}: link is down")
                continue
            for address in addresses:
                if address.family != socket.AF_INET:
                    continue
                interfaces.append(InterfaceInfo(
                    name=interface_name,
                    address=address.address,
                    netmask=address.netmask or "",
                ))
        self.logger.debug(f"IPv4 interfaces: {[(i.name, i.address) for i in interfaces]}")
        return interfaces

    def select_interface(self, restrict: Optional[str] = None) -> InterfaceInfo:
        """
        Pick the interface to run discovery on.

        Args:
            restrict: Optional local IPv4 address; only the interface holding
                      this address is eligible

        Returns:
            InterfaceInfo: The selected interface

        Raises:
            ConfigurationError: If no eligible interface exists
        """
        restrict_addr = None
        if restrict is not None:
            try:
                restrict_addr = ipaddress.IPv4Address(restrict)
            except ipaddress.AddressValueError as e:
                raise ConfigurationError(f"Invalid restrict address '{restrict}': {e}")

        for interface in self.list_interfaces():
            if not self._is_eligible(interface):
                continue
            if restrict_addr is not None and ipaddress.IPv4Address(interface.address) != restrict_addr:
                continue

            self.logger.info(f"Selected interface {interface.name} ({interface.address}/{interface.netmask})")
            return interface

        if restrict is not None:
            raise ConfigurationError(f"No eligible IPv4 interface with address {restrict}")
        raise ConfigurationError("No eligible non-loopback IPv4 interface found")

    def calculate_scan_range(self, address: str, netmask: str, max_hosts: int) -> List[str]:
        """
        Calculate the ordered flood candidates for a subnet.

        Addresses start at the first usable address of the subnet and ascend,
        truncated to ``min(number of hosts, max_hosts)``. The host's own
        address is included: probing it is harmless and keeps the list a
        plain prefix of the subnet.

        Args:
            address: IPv4 address on the subnet
            netmask: Dotted-decimal netmask or prefix length
            max_hosts: Upper bound on the number of candidates

        Returns:
            List[str]: Candidate IPv4 addresses

        Raises:
            ConfigurationError: If address or netmask is invalid
        """
        try:
            network = ipaddress.IPv4Network(f"{address}/{netmask}", strict=False)
        except ValueError as e:
            raise ConfigurationError(f"Invalid subnet {address}/{netmask}: {e}")

        candidates = [str(host) for host in islice(network.hosts(), max(max_hosts, 0))]

        if candidates:
            self.logger.debug(
                f"Scan range for {network}: {len(candidates)} addresses "
                f"from {candidates[0]} to {candidates[-1]}"
            )
        return candidates

    def get_host_network_info(self, restrict: Optional[str] = None,
                              max_hosts: int = 1024) -> Tuple[InterfaceInfo, List[str]]:
        """
        Select the interface and calculate its flood candidates.

        Returns:
            Tuple[InterfaceInfo, List[str]]: Selected interface and candidates
        """
        interface = self.select_interface(restrict)
        candidates = self.calculate_scan_range(interface.address, interface.netmask, max_hosts)
        return interface, candidates

    def _is_eligible(self, interface: InterfaceInfo) -> bool:
        """Check if an interface can be used (IPv4, not loopback, has a netmask)."""
        try:
            ip_addr = ipaddress.IPv4Address(interface.address)
        except ipaddress.AddressValueError:
            return False

        if ip_addr.is_loopback:
            return False

        return bool(interface.netmask)
