"""
Database adapter interfaces and implementations.
"""

from .base import (
    AdapterConfigurationError,
    AdapterConnectionError,
    AdapterError,
    AdapterExecutionError,
    AdapterTransactionError,
    ConnectionConfig,
    DatabaseAdapter,
    DBAPIAdapter,
    SSLConfig,
    StatementFailure,
)
from .mysql import MySQLAdapter
from .postgres import PostgresAdapter


def adapter_for(config: ConnectionConfig, *, slow_query_ms: int | None = None) -> DatabaseAdapter:
    """
    Instantiate the adapter matching the DSN scheme of ``config`` (not yet connected).
    """
    if config.dsn is None:
        raise AdapterConfigurationError("ConnectionConfig must be built from a DSN.")
    if config.dsn.family == "postgresql":
        return PostgresAdapter(slow_query_ms=slow_query_ms)
    return MySQLAdapter(slow_query_ms=slow_query_ms)


__all__ = [
    "ConnectionConfig",
    "DatabaseAdapter",
    "DBAPIAdapter",
    "SSLConfig",
    "AdapterError",
    "AdapterConfigurationError",
    "AdapterConnectionError",
    "AdapterExecutionError",
    "AdapterTransactionError",
    "StatementFailure",
    "MySQLAdapter",
    "PostgresAdapter",
    "adapter_for",
]
