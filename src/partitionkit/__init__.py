"""
partitionkit public package initialization.

Compiles table-partitioning DDL for MySQL (ALTER TABLE ... PARTITION BY) and
PostgreSQL (CREATE TABLE ... PARTITION OF) and issues it through a DB-API adapter.
"""

from .adapters import (
    ConnectionConfig,
    MySQLAdapter,
    PostgresAdapter,
    StatementFailure,
    adapter_for,
)  # noqa: F401
from .capabilities import (
    CapabilityCache,
    CapabilityDetector,
    CapabilityState,
    PartitionError,
    ServerDialect,
    UnsupportedPartitioning,
)  # noqa: F401
from .dialects import MySQLDialect, PostgresDialect  # noqa: F401
from .manager import PartitionManager  # noqa: F401
from .schema import MAXVALUE, PartitionDefinition, PartitionKind, SqlExpression  # noqa: F401
from .validation import InvalidRange, ValidationError  # noqa: F401

__all__ = [
    "CapabilityCache",
    "CapabilityDetector",
    "CapabilityState",
    "ConnectionConfig",
    "InvalidRange",
    "MAXVALUE",
    "MySQLAdapter",
    "MySQLDialect",
    "PartitionDefinition",
    "PartitionError",
    "PartitionKind",
    "PartitionManager",
    "PostgresAdapter",
    "PostgresDialect",
    "ServerDialect",
    "SqlExpression",
    "StatementFailure",
    "UnsupportedPartitioning",
    "ValidationError",
    "adapter_for",
]
