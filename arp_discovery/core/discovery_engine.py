"""
Discovery Engine for ARP Discovery Module.

This module provides the DiscoveryEngine class that runs the discovery cycle
as an explicit sequence of stages:

    FLOOD -> READ -> PARSE -> UPDATE -> RESOLVE -> PUBLISH

and publishes the user-facing events (found, update, lost, success, error).
Each stage completes before the next one starts and cycles never overlap,
so the host registry is only ever touched by one cycle at a time.
"""

import threading
import time
from typing import Any, Callable, Dict, Optional

from .data_models import CycleResult, CycleStage
from .events import EventDispatcher, SUCCESS, ERROR
from .host_registry import HostRegistry
from .network_detector import NetworkDetector
from ..config.config_loader import DiscoveryConfig
from ..scanners.arp_table import ARPTableParser, ARPTableReader
from ..scanners.probe_scheduler import ProbeScheduler
from ..scanners.vendor_resolver import VendorResolver
from ..utils.error_handler import (
    ConfigurationError, ErrorContext, ErrorHandler, ErrorSeverity, ErrorType
)
from ..utils.logger import Logger, get_logger


class DiscoveryEngine:
    """
    Discovers and monitors the hosts of one local IPv4 subnet.

    The engine owns the host registry and the flood clock. Interface selection
    happens at construction time; a ConfigurationError there is fatal. Every
    later failure (dump command, vendor lookups, listeners) is reported and
    the cycle carries on.
    """

    def __init__(
        self,
        config: Optional[DiscoveryConfig] = None,
        network_detector: Optional[NetworkDetector] = None,
        prober: Optional[ProbeScheduler] = None,
        reader: Optional[ARPTableReader] = None,
        parser: Optional[ARPTableParser] = None,
        resolver: Optional[VendorResolver] = None,
        clock: Callable[[], float] = time.time,
        logger: Optional[Logger] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        """
        Initialize the discovery engine.

        Args:
            config: Engine configuration (defaults to DiscoveryConfig())
            network_detector: Interface selection and subnet enumeration
            prober: Flood implementation
            reader: Neighbor-cache dump command runner
            parser: Neighbor-cache parser
            resolver: Vendor resolver, created from config when vendor
                      resolution is enabled and none is given
            clock: Source of epoch-second timestamps
            logger: Logger instance
            error_handler: ErrorHandler for non-fatal errors

        Raises:
            ConfigurationError: If no eligible interface is found
        """
        self.config = config or DiscoveryConfig()
        self.logger = logger or get_logger(__name__)
        self.error_handler = error_handler or ErrorHandler(self.logger)
        self.clock = clock

        self.network_detector = network_detector or NetworkDetector(self.logger)
        self.prober = prober or ProbeScheduler(self.logger)
        self.reader = reader or ARPTableReader(
            self.config.arp_command, self.config.command_timeout, self.logger
        )
        self.parser = parser or ARPTableParser(self.logger)
        if resolver is None and self.config.resolve_vendor:
            resolver = VendorResolver(
                self.config.vendor_api, self.config.vendor_timeout, logger=self.logger
            )
        self.resolver = resolver

        self.registry = HostRegistry()
        self.events = EventDispatcher(self.logger, self.error_handler)

        self.last_flood_timestamp = 0.0
        self.stage = CycleStage.IDLE

        self._cycle_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._monitor_thread: Optional[threading.Thread] = None

        try:
            self.interface, self.hosts = self.network_detector.get_host_network_info(
                self.config.restrict, self.config.max_hosts
            )
        except ConfigurationError as e:
            self.error_handler.handle_error(e, ErrorContext(
                error_type=ErrorType.CONFIGURATION_ERROR,
                severity=ErrorSeverity.CRITICAL,
                operation="select_interface",
                component="DiscoveryEngine",
                additional_info={"restrict": self.config.restrict},
            ))
            raise

        self.own_address = self.interface.address

    # Event subscription

    def on(self, event: str, callback: Callable[[Any], None]) -> None:
        """
        Subscribe to an event.

        Args:
            event: One of "found", "update", "lost", "success", "error"
            callback: Called with a HostRecord (found/update/lost), the
                      registry snapshot (success) or the exception (error)
        """
        self.events.on(event, callback)

    def off(self, event: str, callback: Callable[[Any], None]) -> None:
        self.events.off(event, callback)

    # Public operations

    def discover(self) -> CycleResult:
        """
        Run exactly one discovery cycle.

        Floods only when the flood interval has elapsed; otherwise the cycle
        just reads and applies the current neighbor cache. A call made while
        another cycle is running waits for it to finish.

        Returns:
            CycleResult describing the cycle
        """
        with self._cycle_lock:
            return self._run_cycle()

    def monitor(self, interval_ms: Optional[int] = None) -> None:
        """
        Run discover() now and then every ``interval_ms`` in a background thread.

        Ticks that fall while a cycle is still running are skipped. Monitoring
        continues until stop() is called.

        Args:
            interval_ms: Milliseconds between cycles (defaults to config)

        Raises:
            ValueError: If the interval is not positive
            RuntimeError: If the engine is already monitoring
        """
        if interval_ms is None:
            interval_ms = self.config.monitor_interval_ms
        if interval_ms <= 0:
            raise ValueError(f"Monitor interval must be positive, got {interval_ms} ms")
        if self.is_monitoring:
            raise RuntimeError("Discovery engine is already monitoring")

        interval = interval_ms / 1000.0
        self._stop_event.clear()
        self._monitor_thread = threading.Thread(
            target=self._monitor_loop,
            args=(interval,),
            name="arp-discovery-monitor",
            daemon=True,
        )
        self._monitor_thread.start()
        self.logger.info(f"Monitoring {self.interface.network} every {interval:.1f}s")

    def stop(self, timeout: Optional[float] = None) -> None:
        """
        Stop monitoring. The cycle in flight, if any, is allowed to finish.

        Args:
            timeout: Seconds to wait for the monitor thread to exit
        """
        self._stop_event.set()
        thread = self._monitor_thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        if thread is None or not thread.is_alive():
            self._monitor_thread = None

    @property
    def is_monitoring(self) -> bool:
        return self._monitor_thread is not None and self._monitor_thread.is_alive()

    def get_ips(self) -> Dict[str, str]:
        """Current hosts as IP address -> MAC address."""
        return self.registry.hosts_by_address()

    def get_macs(self) -> Dict[str, str]:
        """Current hosts as MAC address -> IP address."""
        return self.registry.hosts_by_mac()

    # Cycle stages

    def _run_cycle(self) -> CycleResult:
        result = CycleResult()
        started = time.monotonic()
        try:
            result.flooded = self._flood_stage()
            result.flood_timestamp = self.last_flood_timestamp

            raw_output = self._read_stage(result)
            sightings = self._parse_stage(raw_output)
            self._update_stage(sightings, result)
            self._resolve_stage(result)
            self._publish_stage(result)
        finally:
            self.stage = CycleStage.IDLE

        result.duration = time.monotonic() - started
        self.logger.debug(
            f"Cycle completed in {result.duration:.2f}s: {len(result.hosts)} active hosts, "
            f"{len(result.events)} events, {len(result.errors)} errors"
        )
        return result

    def _flood_stage(self) -> bool:
        self.stage = CycleStage.FLOOD
        now = self.clock()
        elapsed = now - self.last_flood_timestamp
        if elapsed < self.config.flood_interval:
            self.logger.debug(
                f"Flood throttled ({elapsed:.0f}s since last flood, interval {self.config.flood_interval}s)"
            )
            return False

        # Stamped before the flood runs so repeated discover() calls cannot stack floods
        self.last_flood_timestamp = now
        summary = self.prober.flood(
            self.hosts, self.config.port, self.config.timeout_ms, self.config.max_connections
        )
        self.logger.info(
            f"Flooded {summary.total} addresses in {summary.duration:.2f}s",
            connected=summary.connected,
            timed_out=summary.timed_out,
            errored=summary.errored,
        )
        return True

    def _read_stage(self, result: CycleResult) -> str:
        self.stage = CycleStage.READ
        raw_output, error = self.reader.read()
        if error is not None:
            self._report_error(error, ErrorType.COMMAND_ERROR, "read_neighbor_cache", result)
        return raw_output

    def _parse_stage(self, raw_output: str):
        self.stage = CycleStage.PARSE
        return self.parser.parse(raw_output, self.clock())

    def _update_stage(self, sightings, result: CycleResult) -> None:
        self.stage = CycleStage.UPDATE
        result.events = self.registry.update(sightings, self.last_flood_timestamp)

        for event in result.events:
            record = event.record
            self.logger.host_event(
                event.event_type.value,
                record.ip_address,
                record.mac_address,
                hostname=record.hostname,
                interface=record.interface_name,
            )
            self.events.emit(event.event_type.value, record)

    def _resolve_stage(self, result: CycleResult) -> None:
        if self.resolver is None or not self.config.resolve_vendor:
            return

        self.stage = CycleStage.RESOLVE
        resolution = self.resolver.resolve(self.registry.records(), self.config.vendor_concurrency)
        if resolution.attempted:
            self.logger.debug(f"Resolved {resolution.resolved}/{resolution.attempted} vendors")
        if resolution.last_error is not None:
            self._report_error(resolution.last_error, ErrorType.VENDOR_LOOKUP_ERROR, "resolve_vendor", result)

    def _publish_stage(self, result: CycleResult) -> None:
        self.stage = CycleStage.PUBLISH
        result.hosts = self.registry.snapshot()
        self.events.emit(SUCCESS, self.registry.snapshot())

    def _report_error(self, error: Exception, error_type: ErrorType, operation: str,
                      result: CycleResult) -> None:
        result.errors.append(error)
        self.error_handler.handle_error(error, ErrorContext(
            error_type=error_type,
            severity=ErrorSeverity.MEDIUM,
            operation=operation,
            component="DiscoveryEngine",
        ))
        self.events.emit(ERROR, error)

    # Monitoring

    def _monitor_loop(self, interval: float) -> None:
        next_tick = time.monotonic()
        while not self._stop_event.is_set():
            self._tick()

            next_tick += interval
            now = time.monotonic()
            if now > next_tick:
                missed = int((now - next_tick) // interval) + 1
                self.logger.warning(f"Discovery cycle overran the monitor interval, skipping {missed} tick(s)")
                next_tick += missed * interval

            if self._stop_event.wait(next_tick - now):
                break

    def _tick(self) -> CycleResult:
        if not self._cycle_lock.acquire(blocking=False):
            self.logger.warning("Previous discovery cycle still running, skipping monitor tick")
            return CycleResult(skipped=True)

        try:
            return self._run_cycle()
        except Exception as e:
            self.logger.error("Discovery cycle failed", exception=e)
            self.events.emit(ERROR, e)
            return CycleResult(errors=[e])
        finally:
            self._cycle_lock.release()
