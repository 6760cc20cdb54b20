"""
Capability detection for server-side partitioning.
"""

from .cache import CapabilityCache, CapabilityState, ServerDialect
from .detector import CapabilityDetector, classify_version, parse_version
from .errors import PartitionError, UnsupportedPartitioning

__all__ = [
    "CapabilityCache",
    "CapabilityDetector",
    "CapabilityState",
    "PartitionError",
    "ServerDialect",
    "UnsupportedPartitioning",
    "classify_version",
    "parse_version",
]
