"""
Partitioning error hierarchy.
"""


class PartitionError(RuntimeError):
    """Base error for partitioning failures."""


class UnsupportedPartitioning(PartitionError):
    """Raised when the server, or the active dialect, cannot perform the requested partitioning."""
