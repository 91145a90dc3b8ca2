"""
ARP Discovery Module

Discovers and monitors the hosts of the local IPv4 subnet by flooding it with
lightweight connects and parsing the OS neighbor cache, publishing found,
update and lost events as hosts come and go.
"""

__version__ = "1.0.0"
__author__ = "Network Discovery Team"

from .core.discovery_engine import DiscoveryEngine
from .config.config_loader import DiscoveryConfig

__all__ = ['DiscoveryEngine', 'DiscoveryConfig', '__version__']
