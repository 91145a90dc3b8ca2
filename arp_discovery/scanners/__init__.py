"""
Scanner modules for ARP Discovery.

This package contains the I/O stages of a discovery cycle: the connect flood,
the neighbor-cache reader/parser and the vendor resolver.
"""

from .base_scanner import BaseScanner
from .probe_scheduler import ProbeScheduler
from .arp_table import ARPTableParser, ARPTableReader, normalize_mac
from .vendor_resolver import VendorResolver

__all__ = [
    'BaseScanner',
    'ProbeScheduler',
    'ARPTableParser',
    'ARPTableReader',
    'normalize_mac',
    'VendorResolver'
]
