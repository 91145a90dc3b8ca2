"""
Neighbor-cache reading and parsing for the ARP Discovery Module.

ARPTableReader runs the system dump command (``arp -a`` by default) and
ARPTableParser turns its BSD-style output into HostRecord sightings:

    router.lan (192.168.1.1) at 0:11:22:33:44:55 on en0 ifscope [ethernet]
    ? (192.168.1.5) at 0a:1b:2c:3d:4e:5f [ether] on eth0

Lines that do not fit this shape are routine noise (incomplete entries,
headers, broadcast entries) and are dropped without being reported.
"""

import ipaddress
import re
import subprocess
from typing import List, Optional, Tuple

from .base_scanner import BaseScanner
from ..core.data_models import HostRecord, UNKNOWN_HOSTNAME, BROADCAST_MAC
from ..utils.error_handler import CommandError
from ..utils.logger import Logger, get_logger


DEFAULT_ARP_COMMAND = ["arp", "-a"]

_ENTRY_PATTERN = re.compile(r'^([^ ]+) \(([^)]+)\)')
_MAC_PATTERN = re.compile(r'^.* at ([^ ]+)')
_INTERFACE_PATTERN = re.compile(r'^.* on ([a-z][a-z0-9]+)')
_HEX_GROUP = re.compile(r'^[0-9A-F]{2}$')


def normalize_mac(mac: str) -> Optional[str]:
    """
    Normalize a MAC address to uppercase, colon separated, two-digit groups.

    ``"a:b:c:1:2:3"`` becomes ``"0A:0B:0C:01:02:03"``.

    Args:
        mac: MAC address as printed by the dump command

    Returns:
        The canonical MAC, or None if it does not have six hex groups
    """
    if not mac:
        return None

    parts = mac.upper().split(":")
    if len(parts) != 6:
        return None

    parts = ["0" + part if len(part) == 1 else part for part in parts]
    if not all(_HEX_GROUP.match(part) for part in parts):
        return None

    return ":".join(parts)


class ARPTableParser:
    """
    Converts raw neighbor-cache text into host sightings.
    """

    def __init__(self, logger: Optional[Logger] = None):
        self.logger = logger or get_logger(__name__)

    def parse(self, raw_output: str, seen_at: float) -> List[HostRecord]:
        """
        Parse a full neighbor-cache dump.

        Args:
            raw_output: Text returned by the dump command
            seen_at: Timestamp applied to every retained sighting

        Returns:
            List of HostRecord sightings in dump order
        """
        sightings = []
        for line in raw_output.splitlines():
            record = self.parse_line(line, seen_at)
            if record is not None:
                sightings.append(record)
        return sightings

    def parse_line(self, line: str, seen_at: float) -> Optional[HostRecord]:
        """
        Parse a single neighbor-cache line.

        Args:
            line: One line of dump output
            seen_at: Timestamp to stamp the sighting with

        Returns:
            HostRecord, or None when the line is skipped
        """
        match = _ENTRY_PATTERN.match(line)
        if not match:
            return None

        hostname, ip_address = match.group(1), match.group(2)
        try:
            ipaddress.IPv4Address(ip_address)
        except ipaddress.AddressValueError:
            self._skip(line, "address is not IPv4")
            return None

        mac_match = _MAC_PATTERN.match(line)
        mac_address = normalize_mac(mac_match.group(1)) if mac_match else None
        if mac_address is None:
            self._skip(line, "no usable hardware address")
            return None
        if mac_address == BROADCAST_MAC:
            return None

        interface_match = _INTERFACE_PATTERN.match(line)

        return HostRecord(
            ip_address=ip_address,
            mac_address=mac_address,
            hostname=UNKNOWN_HOSTNAME if hostname == "?" else hostname,
            interface_name=interface_match.group(1) if interface_match else None,
            last_seen=seen_at,
        )

    def _skip(self, line: str, reason: str) -> None:
        self.logger.debug(f"Skipping neighbor entry ({reason}): {line.strip()}")


class ARPTableReader(BaseScanner):
    """
    Runs the neighbor-cache dump command.
    """

    def __init__(self, command: Optional[List[str]] = None, timeout: int = 10,
                 logger: Optional[Logger] = None):
        """
        Initialize the reader.

        Args:
            command: Command and arguments that print the neighbor cache
            timeout: Seconds to wait for the command before giving up
            logger: Logger instance
        """
        super().__init__(logger)
        self.command = list(command or DEFAULT_ARP_COMMAND)
        self.timeout = timeout

    def read(self) -> Tuple[str, Optional[CommandError]]:
        """
        Run the dump command.

        Failures never raise: whatever stdout was captured is returned along
        with a CommandError describing what went wrong.

        Returns:
            Tuple of (stdout text, CommandError or None)
        """
        self._start_scan_timer()
        try:
            result = subprocess.run(
                self.command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            return "", CommandError(
                f"Command not found: {self.command[0]}", command=self.command
            )
        except subprocess.TimeoutExpired as e:
            return self._decode(e.stdout), CommandError(
                f"Command timed out after {self.timeout} seconds: {' '.join(self.command)}",
                command=self.command,
            )
        except OSError as e:
            return "", CommandError(
                f"Could not run {' '.join(self.command)}: {e}", command=self.command
            )

        duration = self._end_scan_timer()
        self._log_debug(
            f"{' '.join(self.command)} returned {len(result.stdout.splitlines())} lines in {duration:.2f}s"
        )

        error = None
        stderr = (result.stderr or "").strip()
        if stderr or result.returncode != 0:
            error = CommandError(
                stderr or f"{' '.join(self.command)} exited with code {result.returncode}",
                command=self.command,
                returncode=result.returncode,
                stderr=stderr,
            )
        return result.stdout or "", error

    @staticmethod
    def _decode(output) -> str:
        if output is None:
            return ""
        if isinstance(output, bytes):
            return output.decode("utf-8", errors="ignore")
        return output
