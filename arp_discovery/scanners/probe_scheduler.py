"""
Flood stage of the ARP Discovery Module.

Connecting to an address on the local subnet forces the OS to resolve the
peer's hardware address, which lands in the neighbor cache whether or not the
connection succeeds. The ProbeScheduler fires one lightweight TCP connect per
candidate with bounded parallelism and waits for every probe to finish.
"""

import socket
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from .base_scanner import BaseScanner
from ..core.data_models import ProbeOutcome, ProbeSummary
from ..utils.logger import Logger


class ProbeScheduler(BaseScanner):
    """
    Bounded-concurrency TCP connect flood.

    Connected, timed out and errored probes all count as complete; nothing a
    probe does is ever raised to the caller.
    """

    def __init__(self, logger: Optional[Logger] = None):
        super().__init__(logger)

    def flood(self, candidates: List[str], port: int, timeout_ms: int,
              concurrency: int) -> ProbeSummary:
        """
        Probe every candidate once and return after all probes completed.

        Args:
            candidates: IPv4 addresses to probe
            port: TCP port to connect to
            timeout_ms: Per-probe connect timeout in milliseconds
            concurrency: Maximum number of simultaneous in-flight probes

        Returns:
            ProbeSummary with outcome counters and duration
        """
        summary = ProbeSummary(total=len(candidates))
        if not candidates:
            return summary

        self._log_debug(
            f"Flooding {len(candidates)} addresses on port {port} "
            f"(timeout={timeout_ms}ms, concurrency={concurrency})"
        )
        self._start_scan_timer()

        timeout = timeout_ms / 1000.0
        with ThreadPoolExecutor(max_workers=max(1, concurrency)) as executor:
            # map() yields in submission order; the with-block joins all workers
            for outcome in executor.map(lambda host: self._probe(host, port, timeout), candidates):
                summary.record(outcome)

        summary.duration = self._end_scan_timer()
        self._log_debug(
            f"Flood completed in {summary.duration:.2f}s: {summary.connected} connected, "
            f"{summary.timed_out} timed out, {summary.errored} errored"
        )
        return summary

    def _probe(self, host: str, port: int, timeout: float) -> ProbeOutcome:
        """
        Attempt a single connection.

        Args:
            host: IPv4 address to connect to
            port: TCP port
            timeout: Connect timeout in seconds

        Returns:
            ProbeOutcome describing how the attempt terminated
        """
        try:
            with socket.create_connection((host, port), timeout=timeout):
                return ProbeOutcome.CONNECTED
        except socket.timeout:
            return ProbeOutcome.TIMED_OUT
        except OSError:
            return ProbeOutcome.ERRORED
