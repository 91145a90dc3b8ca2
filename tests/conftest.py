"""
Shared fixtures and test doubles for the ARP discovery test suite.
"""

import threading

import pytest

from arp_discovery.config.config_loader import DiscoveryConfig
from arp_discovery.core.data_models import InterfaceInfo, ProbeSummary
from arp_discovery.core.discovery_engine import DiscoveryEngine
from arp_discovery.utils.logger import Logger, LogLevel


ARP_OUTPUT = (
    "router.lan (192.168.1.1) at 0:11:22:33:44:55 on en0 ifscope [ethernet]\n"
    "? (192.168.1.5) at 0a:1b:2c:3d:4e:5f on en0 ifscope [ethernet]\n"
    "? (192.168.1.9) at (incomplete) on en0 ifscope [ethernet]\n"
    "? (192.168.1.255) at ff:ff:ff:ff:ff:ff on en0 ifscope [ethernet]\n"
)


class FakeClock:
    """Manually advanced epoch clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeDetector:
    def __init__(self, interface=None, candidates=None):
        self.interface = interface or InterfaceInfo("en0", "192.168.1.10", "255.255.255.0")
        self.candidates = candidates if candidates is not None else ["192.168.1.1", "192.168.1.2"]
        self.calls = []

    def get_host_network_info(self, restrict=None, max_hosts=1024):
        self.calls.append((restrict, max_hosts))
        return self.interface, list(self.candidates)


class FakeProber:
    def __init__(self):
        self.calls = []
        self.stages = []
        self.engine = None

    def flood(self, candidates, port, timeout_ms, concurrency):
        self.calls.append((list(candidates), port, timeout_ms, concurrency))
        if self.engine is not None:
            self.stages.append(self.engine.stage)
        return ProbeSummary(total=len(candidates), errored=len(candidates))


class FakeReader:
    def __init__(self, output: str = ARP_OUTPUT, error=None):
        self.output = output
        self.error = error
        self.calls = 0
        self.stages = []
        self.engine = None
        self.called = threading.Event()

    def read(self):
        self.calls += 1
        if self.engine is not None:
            self.stages.append(self.engine.stage)
        self.called.set()
        return self.output, self.error


@pytest.fixture
def quiet_logger():
    return Logger("test", min_level=LogLevel.ERROR)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def prober():
    return FakeProber()


@pytest.fixture
def reader():
    return FakeReader()


@pytest.fixture
def make_engine(clock, prober, reader, quiet_logger):
    """Build a DiscoveryEngine wired to the fakes above."""

    def _make(config=None, **overrides):
        kwargs = dict(
            config=config or DiscoveryConfig(),
            network_detector=FakeDetector(),
            prober=prober,
            reader=reader,
            clock=clock,
            logger=quiet_logger,
        )
        kwargs.update(overrides)
        engine = DiscoveryEngine(**kwargs)
        if hasattr(kwargs["prober"], "engine"):
            kwargs["prober"].engine = engine
        if hasattr(kwargs["reader"], "engine"):
            kwargs["reader"].engine = engine
        return engine

    return _make


class FakeSession:
    """Minimal stand-in for requests.Session keyed by URL."""

    def __init__(self, responses):
        self.responses = responses
        self.requested = []
        self.closed = False

    def get(self, url, timeout=None):
        self.requested.append((url, timeout))
        response = self.responses[url]
        if isinstance(response, Exception):
            raise response
        return response

    def close(self):
        self.closed = True
