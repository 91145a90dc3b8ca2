"""
In-memory table of active hosts and their lifecycle transitions.

Each hardware address is either absent or active. Per cycle:

- first sighting of a MAC          -> FOUND, record inserted
- sighting with a different IP     -> UPDATE, record overwritten in place
- sighting with the same IP        -> last_seen refreshed, no event
- after all sightings are applied  -> every record last seen before the
                                      cycle's flood timestamp is LOST

Staleness is judged against the flood timestamp of the cycle that just ran,
so a host has to miss a whole probe-and-capture cycle before it is lost.
"""

from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from .data_models import HostRecord, HostEvent, HostEventType, BROADCAST_MAC


class HostRegistry:
    """
    Active hosts keyed by normalized MAC address.

    Owned by a single DiscoveryEngine and mutated only from its cycle; every
    query returns a point-in-time copy.
    """

    def __init__(self):
        self._active: Dict[str, HostRecord] = {}

    def update(self, sightings: Iterable[HostRecord], flood_timestamp: float) -> List[HostEvent]:
        """
        Apply one cycle of sightings and expire stale hosts.

        Args:
            sightings: Parsed neighbor-cache entries, in dump order
            flood_timestamp: Timestamp of the most recent flood

        Returns:
            Lifecycle events in the order they happened
        """
        events = []

        for sighting in sightings:
            if sighting.mac_address == BROADCAST_MAC:
                continue

            current = self._active.get(sighting.mac_address)
            if current is None:
                record = replace(sighting)
                self._active[record.mac_address] = record
                events.append(HostEvent(HostEventType.FOUND, replace(record)))
                continue

            address_changed = current.ip_address != sighting.ip_address
            current.ip_address = sighting.ip_address
            current.hostname = sighting.hostname
            current.interface_name = sighting.interface_name
            current.last_seen = sighting.last_seen
            if sighting.vendor is not None:
                current.vendor = sighting.vendor

            if address_changed:
                events.append(HostEvent(HostEventType.UPDATE, replace(current)))

        for mac_address in list(self._active):
            record = self._active[mac_address]
            if record.last_seen < flood_timestamp:
                del self._active[mac_address]
                events.append(HostEvent(HostEventType.LOST, record))

        return events

    def records(self) -> List[HostRecord]:
        """Live records, for the owning engine's resolve stage."""
        return list(self._active.values())

    def get(self, mac_address: str) -> Optional[HostRecord]:
        record = self._active.get(mac_address)
        return replace(record) if record is not None else None

    def snapshot(self) -> Dict[str, HostRecord]:
        """Copy of the table, MAC -> HostRecord."""
        return {mac: replace(record) for mac, record in self._active.items()}

    def hosts_by_address(self) -> Dict[str, str]:
        """IP address -> MAC address."""
        return {record.ip_address: mac for mac, record in self._active.items()}

    def hosts_by_mac(self) -> Dict[str, str]:
        """MAC address -> IP address."""
        return {mac: record.ip_address for mac, record in self._active.items()}

    def __len__(self) -> int:
        return len(self._active)

    def __contains__(self, mac_address: str) -> bool:
        return mac_address in self._active
