"""
Configuration module for ARP Discovery.
Provides configuration loading and validation for the discovery engine.
"""

from .config_loader import ConfigLoader, DiscoveryConfig

__all__ = ['ConfigLoader', 'DiscoveryConfig']
