"""
Main entry point for the ARP Discovery Module.

This module provides the command-line interface for the discovery tool,
including argument parsing, pre-flight checks, and graceful shutdown handling.
"""

import argparse
import ipaddress
import shutil
import signal
import sys
import threading
from typing import Dict, Optional

from . import __version__
from .config.config_loader import ConfigLoader, DiscoveryConfig
from .core.data_models import HostRecord
from .core.discovery_engine import DiscoveryEngine
from .utils.error_handler import ConfigurationError
from .utils.json_reporter import JSONReporter
from .utils.logger import LogLevel, get_logger, set_log_level


class ARPDiscoveryApp:
    """
    Main application class for ARP Discovery Module.

    Handles CLI interface, pre-flight checks, and application lifecycle.
    """

    def __init__(self):
        """Initialize the application."""
        self.logger = get_logger(__name__)
        self.engine: Optional[DiscoveryEngine] = None
        self.shutdown_requested = threading.Event()

    def _signal_handler(self, signum: int, frame) -> None:
        """
        Handle shutdown signals gracefully.

        Args:
            signum: Signal number
            frame: Current stack frame
        """
        signal_names = {signal.SIGINT: "SIGINT", signal.SIGTERM: "SIGTERM"}
        signal_name = signal_names.get(signum, f"Signal {signum}")

        if not self.shutdown_requested.is_set():
            self.logger.warning(f"Received {signal_name} - initiating graceful shutdown...")
            self.shutdown_requested.set()
        else:
            self.logger.error("Force shutdown requested - terminating immediately")
            sys.exit(1)

    def _cleanup(self) -> None:
        """Stop monitoring and release HTTP sessions."""
        if self.engine is None:
            return
        self.engine.stop(timeout=5)
        if self.engine.resolver is not None:
            self.engine.resolver.close()

        total = self.engine.error_handler.total_errors()
        if total:
            self.logger.info(f"{total} non-fatal errors reported during this run")

    def _perform_preflight_checks(self, config: DiscoveryConfig) -> bool:
        """
        Check that the neighbor-cache dump command is available.

        Returns:
            bool: True if all checks pass, False otherwise
        """
        self.logger.section("PRE-FLIGHT CHECKS")

        tool = config.arp_command[0]
        tool_path = shutil.which(tool)
        if not tool_path:
            self.logger.error(f"Required tool '{tool}' not found in PATH")
            self.logger.info(f"Installation suggestions for {tool}:")
            self.logger.info("  • Ubuntu/Debian: sudo apt-get install net-tools")
            self.logger.info("  • CentOS/RHEL: sudo yum install net-tools")
            return False

        self.logger.debug(f"Found {tool} at: {tool_path}")
        self.logger.success("All pre-flight checks passed")
        return True

    def _load_config(self, args: argparse.Namespace) -> DiscoveryConfig:
        """Load YAML configuration and apply command line overrides."""
        config = ConfigLoader(args.config_dir).load_discovery_config()

        if args.restrict:
            config.restrict = args.restrict
        if args.resolve_vendor:
            config.resolve_vendor = True
        if args.flood_interval is not None:
            config.flood_interval = args.flood_interval
        if args.max_hosts is not None:
            config.max_hosts = args.max_hosts
        return config

    def _print_hosts(self, hosts: Dict[str, HostRecord]) -> None:
        """Print the registry snapshot as a table sorted by IP."""
        self.logger.section(f"ACTIVE HOSTS ({len(hosts)})")
        headers = ["IP Address", "MAC Address", "Hostname", "Interface", "Vendor"]
        widths = [15, 17, 28, 10, 30]
        self.logger.table_header(headers, widths)

        for record in sorted(hosts.values(), key=lambda r: ipaddress.IPv4Address(r.ip_address)):
            self.logger.table_row(
                [
                    record.ip_address,
                    record.mac_address,
                    record.hostname,
                    record.interface_name or "-",
                    record.vendor or "-",
                ],
                widths,
                highlight=record.ip_address == self.engine.own_address,
            )

    def run(self, args: argparse.Namespace) -> int:
        """
        Run the ARP discovery application.

        Args:
            args: Parsed command line arguments

        Returns:
            int: Exit code (0 for success, non-zero for failure)
        """
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        try:
            config = self._load_config(args)

            if not self._perform_preflight_checks(config):
                if not args.skip_checks:
                    self.logger.error("Pre-flight checks failed. Use --skip-checks to bypass.")
                    return 1
                self.logger.warning("Skipping pre-flight checks as requested")

            self.engine = DiscoveryEngine(config)
            self.logger.network_info(
                interface=self.engine.interface.name,
                network=self.engine.interface.network,
                own_address=self.engine.own_address,
                candidates=len(self.engine.hosts),
            )

            reporter = JSONReporter(args.output_dir) if args.output_dir else None

            if args.monitor is None:
                result = self.engine.discover()
                self._print_hosts(result.hosts)
                if reporter:
                    reporter.generate_report(result.hosts, self.engine.interface)
                self.logger.success(f"Discovery completed: {len(result.hosts)} hosts active")
                return 0

            if reporter:
                self.engine.on("success", lambda hosts: reporter.generate_report(hosts, self.engine.interface))
            self.engine.monitor(args.monitor or config.monitor_interval_ms)
            while not self.shutdown_requested.wait(1.0):
                pass
            return 0

        except ConfigurationError as e:
            self.logger.error(f"Configuration error: {str(e)}")
            return 2
        except KeyboardInterrupt:
            self.logger.warning("Discovery interrupted by user")
            return 130
        finally:
            self._cleanup()


def _monitor_interval(value: str) -> int:
    """argparse type for --monitor: milliseconds, 0 selects the configured interval."""
    try:
        interval = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid interval: '{value}'")
    if interval < 0:
        raise argparse.ArgumentTypeError(f"interval must not be negative: {interval}")
    return interval


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the command line argument parser.

    Returns:
        argparse.ArgumentParser: Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="arp_discovery",
        description="ARP Discovery - discover and monitor hosts on the local subnet through the neighbor cache",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m arp_discovery                            # Single discovery cycle
  python -m arp_discovery --monitor 30000            # Re-run every 30 seconds
  python -m arp_discovery --resolve-vendor           # Look up hardware vendors
  python -m arp_discovery --restrict 192.168.1.20    # Use the interface holding this address
  python -m arp_discovery --output-dir ./reports     # Write JSON reports
        """
    )

    parser.add_argument(
        "--config-dir",
        type=str,
        help="Directory containing discovery_config.yml. Defaults to arp_discovery/config/"
    )

    parser.add_argument(
        "--monitor",
        type=_monitor_interval,
        nargs="?",
        const=0,
        metavar="MS",
        help="Keep monitoring, running a cycle every MS milliseconds "
             "(defaults to monitor_interval_ms from the configuration)"
    )

    parser.add_argument(
        "--resolve-vendor",
        action="store_true",
        help="Look up hardware vendors for discovered MAC addresses"
    )

    parser.add_argument(
        "--restrict",
        type=str,
        metavar="IP",
        help="Only use the local interface holding this IPv4 address"
    )

    parser.add_argument(
        "--flood-interval",
        type=int,
        metavar="SECONDS",
        help="Minimum number of seconds between two floods"
    )

    parser.add_argument(
        "--max-hosts",
        type=int,
        help="Maximum number of subnet addresses to flood"
    )

    parser.add_argument(
        "--output-dir",
        type=str,
        help="Directory for JSON reports (no report is written when omitted)"
    )

    parser.add_argument(
        "--skip-checks",
        action="store_true",
        help="Skip pre-flight checks for the neighbor-cache command"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging output"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"ARP Discovery {__version__}"
    )

    return parser


def main() -> int:
    """
    Main entry point for the ARP Discovery Module.

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    parser = create_argument_parser()
    args = parser.parse_args()

    if args.verbose:
        set_log_level(LogLevel.DEBUG)

    app = ARPDiscoveryApp()
    return app.run(args)


if __name__ == "__main__":
    sys.exit(main())
