"""
Tests for the bounded-concurrency connect flood.
"""

import socket
import threading
import time
from unittest.mock import patch

import pytest

from arp_discovery.core.data_models import ProbeOutcome
from arp_discovery.scanners.probe_scheduler import ProbeScheduler
from arp_discovery.utils.logger import Logger


class CountingScheduler(ProbeScheduler):
    """Records the peak number of probes in flight."""

    def __init__(self, logger):
        super().__init__(logger)
        self._lock = threading.Lock()
        self.in_flight = 0
        self.peak = 0
        self.probed = []

    def _probe(self, host, port, timeout):
        with self._lock:
            self.in_flight += 1
            self.peak = max(self.peak, self.in_flight)
            self.probed.append(host)
        time.sleep(0.01)
        with self._lock:
            self.in_flight -= 1
        return ProbeOutcome.ERRORED


@pytest.fixture
def listening_port():
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(("127.0.0.1", 0))
    server.listen(8)
    yield server.getsockname()[1]
    server.close()


@pytest.fixture
def closed_port():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


class TestProbeScheduler:

    def test_empty_candidates(self, quiet_logger):
        summary = ProbeScheduler(quiet_logger).flood([], 1, 100, 4)

        assert summary.total == 0
        assert summary.completed == 0

    def test_connected_probe(self, quiet_logger, listening_port):
        summary = ProbeScheduler(quiet_logger).flood(["127.0.0.1"], listening_port, 1000, 4)

        assert summary.connected == 1
        assert summary.completed == 1

    def test_refused_probe_counts_as_errored(self, quiet_logger, closed_port):
        summary = ProbeScheduler(quiet_logger).flood(["127.0.0.1"], closed_port, 1000, 4)

        assert summary.errored == 1
        assert summary.completed == summary.total == 1

    def test_timeout_is_reported(self, quiet_logger):
        with patch("arp_discovery.scanners.probe_scheduler.socket.create_connection",
                   side_effect=socket.timeout()):
            summary = ProbeScheduler(quiet_logger).flood(["192.0.2.1", "192.0.2.2"], 1, 10, 2)

        assert summary.timed_out == 2
        assert summary.completed == 2

    def test_concurrency_is_bounded(self, quiet_logger):
        scheduler = CountingScheduler(quiet_logger)
        candidates = [f"10.0.0.{i}" for i in range(1, 41)]

        summary = scheduler.flood(candidates, 1, 100, 5)

        assert scheduler.peak <= 5
        assert sorted(scheduler.probed) == sorted(candidates)
        assert summary.completed == summary.total == 40
        assert scheduler.in_flight == 0

    def test_zero_concurrency_still_probes(self, quiet_logger):
        scheduler = CountingScheduler(quiet_logger)

        summary = scheduler.flood(["10.0.0.1", "10.0.0.2"], 1, 100, 0)

        assert scheduler.peak == 1
        assert summary.completed == 2

    def test_default_logger(self):
        assert isinstance(ProbeScheduler().logger, Logger)
