"""
Dialect strategy registry.
"""

from __future__ import annotations

from ..capabilities.cache import ServerDialect
from .base import MAINTENANCE_VERBS, Dialect, DialectCapabilities
from .mysql import MySQLDialect
from .postgres import PostgresDialect


def dialect_for_server(server_dialect: ServerDialect | None) -> Dialect:
    """
    Pick the DDL strategy matching a detected server dialect.
    """
    if server_dialect is not None and server_dialect.declarative:
        return PostgresDialect()
    return MySQLDialect()


__all__ = [
    "Dialect",
    "DialectCapabilities",
    "MAINTENANCE_VERBS",
    "MySQLDialect",
    "PostgresDialect",
    "dialect_for_server",
]
