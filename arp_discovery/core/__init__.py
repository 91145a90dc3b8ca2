"""
Core components for ARP discovery functionality.
"""

from .data_models import (
    HostRecord,
    InterfaceInfo,
    HostEvent,
    HostEventType,
    CycleStage,
    CycleResult,
    ProbeOutcome,
    ProbeSummary,
    VendorResolution,
)
from .host_registry import HostRegistry
from .network_detector import NetworkDetector
from .events import EventDispatcher
from .discovery_engine import DiscoveryEngine

__all__ = [
    'HostRecord',
    'InterfaceInfo',
    'HostEvent',
    'HostEventType',
    'CycleStage',
    'CycleResult',
    'ProbeOutcome',
    'ProbeSummary',
    'VendorResolution',
    'HostRegistry',
    'NetworkDetector',
    'EventDispatcher',
    'DiscoveryEngine'
]
