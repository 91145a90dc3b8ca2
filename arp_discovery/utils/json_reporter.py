"""
JSON Report Generator for ARP Discovery Module.

Exports a snapshot of the host registry to a timestamped JSON file. The
report is write-only: the engine never reads it back.
"""

import ipaddress
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from ..core.data_models import HostRecord, InterfaceInfo
from .logger import Logger, get_logger


class JSONReporter:
    """
    Writes registry snapshots as JSON reports.

    Files are named ``arp_discovery_<YYYYmmdd_HHMMSS>.json``; a numeric
    suffix is added when a file with the same name already exists.
    """

    def __init__(self, output_directory: str = "results", logger: Optional[Logger] = None):
        """
        Initialize the JSON reporter.

        Args:
            output_directory: Directory where JSON reports will be saved
            logger: Logger instance
        """
        self.output_directory = Path(output_directory)
        self.logger = logger or get_logger(__name__)

        self.output_directory.mkdir(parents=True, exist_ok=True)

    def generate_report(self, hosts: Dict[str, HostRecord], interface: InterfaceInfo,
                        timestamp: Optional[datetime] = None) -> str:
        """
        Generate a JSON report from a registry snapshot.

        Args:
            hosts: Snapshot keyed by MAC address
            interface: Interface the discovery ran on
            timestamp: Report timestamp (defaults to now)

        Returns:
            str: Path to the generated JSON file
        """
        timestamp = timestamp or datetime.now()
        json_data = self.build_report(hosts, interface, timestamp)

        filepath = self._handle_file_collision(
            self.output_directory / f"arp_discovery_{timestamp.strftime('%Y%m%d_%H%M%S')}.json"
        )

        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(json_data, f, indent=2, ensure_ascii=False)

        self.logger.info(f"JSON report successfully generated: {filepath}")
        return str(filepath)

    def build_report(self, hosts: Dict[str, HostRecord], interface: InterfaceInfo,
                     timestamp: datetime) -> Dict[str, Any]:
        """
        Build the JSON-serializable report structure.

        Hosts are sorted numerically by IP address.
        """
        ordered = sorted(hosts.values(), key=lambda record: ipaddress.IPv4Address(record.ip_address))
        return {
            "metadata": {
                "timestamp": timestamp.isoformat(),
                "interface": interface.name,
                "own_address": interface.address,
                "network": interface.network,
                "host_count": len(ordered),
            },
            "hosts": [
                dict(record.to_dict(), last_seen=datetime.fromtimestamp(record.last_seen).isoformat())
                for record in ordered
            ],
        }

    def _handle_file_collision(self, filepath: Path) -> Path:
        if not filepath.exists():
            return filepath

        counter = 1
        while True:
            candidate = filepath.with_name(f"{filepath.stem}_{counter}{filepath.suffix}")
            if not candidate.exists():
                return candidate
            counter += 1
