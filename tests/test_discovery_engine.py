"""
Tests for the discovery cycle, flood throttling, events and monitoring.
"""

import threading
import time
from types import SimpleNamespace

import pytest

from arp_discovery.config.config_loader import DiscoveryConfig
from arp_discovery.core.data_models import CycleStage
from arp_discovery.scanners.vendor_resolver import VendorResolver
from arp_discovery.utils.error_handler import (
    CommandError, ConfigurationError, ErrorHandler, ErrorType, VendorLookupError
)

from .conftest import FakeDetector, FakeProber, FakeReader, FakeSession


ROUTER_MAC = "00:11:22:33:44:55"
LAPTOP_MAC = "0A:1B:2C:3D:4E:5F"
LAPTOP_LINE = "? (192.168.1.5) at 0a:1b:2c:3d:4e:5f on en0 ifscope [ethernet]\n"
ROUTER_LINE = "router.lan (192.168.1.1) at 0:11:22:33:44:55 on en0 ifscope [ethernet]\n"


def collect(engine, event):
    received = []
    engine.on(event, received.append)
    return received


class TestConstruction:

    def test_interface_and_candidates(self, make_engine):
        engine = make_engine()

        assert engine.own_address == "192.168.1.10"
        assert engine.interface.name == "en0"
        assert engine.hosts == ["192.168.1.1", "192.168.1.2"]
        assert engine.stage == CycleStage.IDLE

    def test_restrict_and_max_hosts_passed_to_detector(self, make_engine):
        detector = FakeDetector()
        make_engine(DiscoveryConfig(restrict="192.168.1.10", max_hosts=16), network_detector=detector)

        assert detector.calls == [("192.168.1.10", 16)]

    def test_no_interface_is_fatal(self, make_engine, quiet_logger):
        class NoInterfaceDetector:
            def get_host_network_info(self, restrict=None, max_hosts=1024):
                raise ConfigurationError("No eligible non-loopback IPv4 interface found")

        handler = ErrorHandler(quiet_logger)

        with pytest.raises(ConfigurationError):
            make_engine(network_detector=NoInterfaceDetector(), error_handler=handler)

        assert handler.error_statistics[ErrorType.CONFIGURATION_ERROR] == 1

    def test_vendor_resolver_created_when_enabled(self, make_engine):
        engine = make_engine(DiscoveryConfig(resolve_vendor=True))

        assert isinstance(engine.resolver, VendorResolver)
        assert make_engine().resolver is None


class TestDiscoveryCycle:

    def test_stages_run_in_order(self, make_engine, prober, reader):
        engine = make_engine()
        engine.discover()

        assert prober.stages == [CycleStage.FLOOD]
        assert reader.stages == [CycleStage.READ]
        assert engine.stage == CycleStage.IDLE

    def test_first_cycle_finds_hosts(self, make_engine):
        engine = make_engine()
        found = collect(engine, "found")

        result = engine.discover()

        assert result.flooded
        assert [r.mac_address for r in found] == [ROUTER_MAC, LAPTOP_MAC]
        assert found[0].hostname == "router.lan"
        assert set(result.hosts) == {ROUTER_MAC, LAPTOP_MAC}
        assert engine.get_ips() == {"192.168.1.1": ROUTER_MAC, "192.168.1.5": LAPTOP_MAC}
        assert engine.get_macs() == {ROUTER_MAC: "192.168.1.1", LAPTOP_MAC: "192.168.1.5"}

    def test_flood_is_throttled(self, make_engine, prober, clock):
        engine = make_engine(DiscoveryConfig(flood_interval=300, port=7, timeout_ms=100, max_connections=3))

        first = engine.discover()
        clock.advance(10)
        second = engine.discover()

        assert first.flooded and not second.flooded
        assert prober.calls == [(["192.168.1.1", "192.168.1.2"], 7, 100, 3)]
        assert engine.last_flood_timestamp == 1000.0

        clock.advance(300)
        assert engine.discover().flooded
        assert len(prober.calls) == 2
        assert engine.last_flood_timestamp == 1310.0

    def test_flood_timestamp_taken_when_flood_starts(self, make_engine, clock):
        class SlowProber(FakeProber):
            def flood(self, candidates, port, timeout_ms, concurrency):
                clock.advance(50)
                return super().flood(candidates, port, timeout_ms, concurrency)

        engine = make_engine(DiscoveryConfig(flood_interval=300), prober=SlowProber())

        result = engine.discover()

        assert clock() == 1050.0
        assert engine.last_flood_timestamp == 1000.0
        assert result.flood_timestamp == 1000.0

        clock.advance(250)
        assert engine.discover().flooded

    def test_concurrent_discover_waits_for_running_cycle(self, make_engine):
        class BlockingProber(FakeProber):
            def __init__(self):
                super().__init__()
                self.entered = threading.Event()
                self.release = threading.Event()

            def flood(self, *args):
                self.entered.set()
                self.release.wait(5)
                return super().flood(*args)

        class RecordingReader(FakeReader):
            def __init__(self):
                super().__init__()
                self.log = []

            def read(self):
                self.log.append("start")
                time.sleep(0.02)
                self.log.append("end")
                return super().read()

        prober = BlockingProber()
        reader = RecordingReader()
        engine = make_engine(prober=prober, reader=reader)
        results = []

        first = threading.Thread(target=lambda: results.append(engine.discover()))
        second = threading.Thread(target=lambda: results.append(engine.discover()))
        first.start()
        assert prober.entered.wait(5)
        second.start()
        second.join(0.1)

        assert second.is_alive()
        assert reader.calls == 0

        prober.release.set()
        first.join(5)
        second.join(5)

        assert len(prober.calls) == 1
        assert reader.log == ["start", "end", "start", "end"]
        assert sorted(result.flooded for result in results) == [False, True]

    def test_zero_interval_floods_every_cycle(self, make_engine, prober):
        engine = make_engine(DiscoveryConfig(flood_interval=0))
        engine.discover()
        engine.discover()

        assert len(prober.calls) == 2

    def test_host_missing_after_next_flood_is_lost(self, make_engine, reader, clock):
        engine = make_engine()
        lost = collect(engine, "lost")
        engine.discover()

        reader.output = ROUTER_LINE
        clock.advance(10)
        engine.discover()
        assert lost == []

        clock.advance(300)
        result = engine.discover()

        assert [r.mac_address for r in lost] == [LAPTOP_MAC]
        assert set(result.hosts) == {ROUTER_MAC}

    def test_address_change_is_update(self, make_engine, reader, clock):
        engine = make_engine()
        updates = collect(engine, "update")
        engine.discover()

        reader.output = ROUTER_LINE + LAPTOP_LINE.replace("192.168.1.5", "192.168.1.6")
        clock.advance(1)
        engine.discover()

        assert [(r.mac_address, r.ip_address) for r in updates] == [(LAPTOP_MAC, "192.168.1.6")]

    def test_command_error_still_parses_output(self, make_engine):
        failing = FakeReader(error=CommandError("arp exited with code 1", returncode=1))
        engine = make_engine(reader=failing)
        errors = collect(engine, "error")
        successes = collect(engine, "success")

        result = engine.discover()

        assert len(errors) == 1 and isinstance(errors[0], CommandError)
        assert result.errors == errors
        assert set(result.hosts) == {ROUTER_MAC, LAPTOP_MAC}
        assert len(successes) == 1
        assert engine.error_handler.error_statistics[ErrorType.COMMAND_ERROR] == 1

    def test_vendor_partial_failure(self, make_engine, quiet_logger):
        api = "http://vendors.test/"
        session = FakeSession({
            api + ROUTER_MAC: SimpleNamespace(status_code=200, text="Ubiquiti Inc"),
            api + LAPTOP_MAC: SimpleNamespace(status_code=429, text="Too Many Requests"),
        })
        resolver = VendorResolver(api, session=session, logger=quiet_logger)
        engine = make_engine(DiscoveryConfig(resolve_vendor=True, vendor_api=api), resolver=resolver)
        errors = collect(engine, "error")
        successes = collect(engine, "success")

        result = engine.discover()

        assert len(successes) == 1
        assert len(errors) == 1 and isinstance(errors[0], VendorLookupError)
        assert successes[0][ROUTER_MAC].vendor == "Ubiquiti Inc"
        assert successes[0][LAPTOP_MAC].vendor is None
        assert result.hosts[ROUTER_MAC].vendor == "Ubiquiti Inc"

    def test_success_payload_is_snapshot(self, make_engine):
        engine = make_engine()
        successes = collect(engine, "success")
        engine.discover()

        successes[0][ROUTER_MAC].ip_address = "10.9.9.9"

        assert engine.get_macs()[ROUTER_MAC] == "192.168.1.1"

    def test_listener_failure_does_not_abort_cycle(self, make_engine):
        engine = make_engine()

        def broken(record):
            raise RuntimeError("listener bug")

        engine.on("found", broken)
        successes = collect(engine, "success")

        result = engine.discover()

        assert len(successes) == 1
        assert len(result.hosts) == 2
        assert engine.error_handler.error_statistics[ErrorType.LISTENER_ERROR] == 2
        assert result.errors == []

    def test_off_removes_listener(self, make_engine):
        engine = make_engine()
        found = []
        engine.on("found", found.append)
        engine.off("found", found.append)

        engine.discover()

        assert found == []

    def test_unknown_event(self, make_engine):
        with pytest.raises(ValueError):
            make_engine().on("vanished", print)


class TestMonitoring:

    def test_tick_skipped_while_cycle_running(self, make_engine, reader):
        engine = make_engine()
        engine._cycle_lock.acquire()
        try:
            result = engine._tick()
        finally:
            engine._cycle_lock.release()

        assert result.skipped
        assert reader.calls == 0

    def test_tick_survives_unexpected_failure(self, make_engine):
        class ExplodingReader:
            def read(self):
                raise RuntimeError("boom")

        engine = make_engine(reader=ExplodingReader())
        errors = collect(engine, "error")

        result = engine._tick()

        assert len(errors) == 1
        assert result.errors == errors
        assert engine.stage == CycleStage.IDLE
        assert not engine._cycle_lock.locked()

    def test_monitor_runs_until_stopped(self, make_engine, reader):
        engine = make_engine()
        engine.monitor(interval_ms=20)
        try:
            assert reader.called.wait(5)
            with pytest.raises(RuntimeError):
                engine.monitor(interval_ms=20)
            assert engine.is_monitoring
        finally:
            engine.stop(timeout=5)

        assert not engine.is_monitoring
        assert reader.calls >= 1
        assert len(engine.get_ips()) == 2

    def test_monitor_uses_configured_interval(self, make_engine, reader):
        engine = make_engine(DiscoveryConfig(monitor_interval_ms=20))
        engine.monitor()
        try:
            assert reader.called.wait(5)
        finally:
            engine.stop(timeout=5)

        assert not engine.is_monitoring

    @pytest.mark.parametrize("interval_ms", [0, -500])
    def test_monitor_rejects_non_positive_interval(self, make_engine, interval_ms):
        engine = make_engine()

        with pytest.raises(ValueError):
            engine.monitor(interval_ms=interval_ms)

        assert not engine.is_monitoring

    def test_stop_without_monitor(self, make_engine):
        engine = make_engine()
        engine.stop()

        assert not engine.is_monitoring
