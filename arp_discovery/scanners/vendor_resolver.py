"""
Hardware vendor enrichment for discovered hosts.

Looks up each MAC address against a plain-text vendor API
(``GET <vendor_api><MAC>``, vendor name in the body of a 200 response).
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Optional, Tuple

import requests

from .base_scanner import BaseScanner
from ..core.data_models import HostRecord, VendorResolution
from ..utils.error_handler import VendorLookupError
from ..utils.logger import Logger


DEFAULT_VENDOR_API = "http://api.macvendors.com/"
SUCCESS_STATUS = 200


class VendorResolver(BaseScanner):
    """
    Bounded-concurrency vendor lookups with partial-success semantics.

    A failed lookup leaves that host without a vendor and becomes the
    resolution's ``last_error``; the remaining lookups still run.
    """

    def __init__(self, vendor_api: str = DEFAULT_VENDOR_API, timeout: float = 5,
                 session: Optional[requests.Session] = None,
                 logger: Optional[Logger] = None):
        """
        Initialize the resolver.

        Args:
            vendor_api: Base URL, the MAC address is appended to it
            timeout: Per-request timeout in seconds
            session: requests Session to reuse (one is created if omitted)
            logger: Logger instance
        """
        super().__init__(logger)
        self.vendor_api = vendor_api
        self.timeout = timeout
        self.session = session or requests.Session()

    def resolve(self, records: Iterable[HostRecord], concurrency: int = 10) -> VendorResolution:
        """
        Fill in ``vendor`` for every record that lacks one.

        Lookups run in a worker pool; results are applied to the records by
        the calling thread once every lookup has finished.

        Args:
            records: Host records to enrich (mutated in place)
            concurrency: Maximum number of simultaneous lookups

        Returns:
            VendorResolution with counters and the last error seen
        """
        pending = [record for record in records if record.vendor is None]
        resolution = VendorResolution(attempted=len(pending))
        if not pending:
            return resolution

        self._start_scan_timer()
        with ThreadPoolExecutor(max_workers=max(1, concurrency)) as executor:
            results = list(executor.map(lambda record: self.lookup(record.mac_address), pending))

        for record, (vendor, error) in zip(pending, results):
            if error is not None:
                resolution.last_error = error
                continue
            record.vendor = vendor
            resolution.resolved += 1

        duration = self._end_scan_timer()
        self._log_debug(
            f"Vendor resolution: {resolution.resolved}/{resolution.attempted} resolved in {duration:.2f}s"
        )
        return resolution

    def lookup(self, mac_address: str) -> Tuple[Optional[str], Optional[VendorLookupError]]:
        """
        Look up the vendor of a single MAC address.

        Args:
            mac_address: Normalized MAC address

        Returns:
            Tuple of (vendor name or None, VendorLookupError or None)
        """
        url = f"{self.vendor_api}{mac_address}"
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            return None, VendorLookupError(
                f"Vendor lookup for {mac_address} failed: {e}", mac_address=mac_address
            )

        if response.status_code != SUCCESS_STATUS:
            return None, VendorLookupError(
                f"Vendor lookup for {mac_address} returned HTTP {response.status_code}",
                mac_address=mac_address,
                status_code=response.status_code,
            )

        vendor = response.text.strip()
        self._log_debug(f"Vendor for {mac_address}: {vendor}")
        return vendor, None

    def close(self) -> None:
        self.session.close()
