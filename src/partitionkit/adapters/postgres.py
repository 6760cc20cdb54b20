"""
PostgreSQL database adapter implementation.
"""

from __future__ import annotations

from typing import Any

from ..dialects.postgres import PostgresDialect
from ..utils import get_logger
from .base import (
    AdapterConfigurationError,
    AdapterConnectionError,
    ConnectionConfig,
    ConnectionState,
    DBAPIAdapter,
)


def _load_driver():
    try:
        import psycopg

        return psycopg
    except ImportError:
        return None


class PostgresAdapter(DBAPIAdapter):
    """
    Adapter wrapping the psycopg PostgreSQL driver.
    """

    label = "PostgreSQL"

    def __init__(self, slow_query_ms: int | None = None) -> None:
        super().__init__(PostgresDialect(), get_logger("adapters.postgres"), slow_query_ms)

    def connect(self, config: ConnectionConfig) -> Any:
        driver = _load_driver()
        if driver is None:
            raise AdapterConfigurationError("psycopg is required to use PostgresAdapter.")

        options = dict(config.options or {})
        if config.ssl:
            for key, value in config.ssl.postgres_options().items():
                options.setdefault(key, value)
        if config.timeout and "connect_timeout" not in options:
            options["connect_timeout"] = int(config.timeout)

        self.logger.info(
            "Connecting to PostgreSQL %s (autocommit=%s)",
            config.descriptive_label(),
            config.autocommit,
        )

        if not config.dsn:
            raise AdapterConfigurationError(
                "ConnectionConfig must be built from a DSN for PostgreSQL connections."
            )

        # Keyword form keeps DSN-only keys such as autocommit out of the libpq conninfo.
        dsn = config.dsn
        connect_kwargs = {
            "host": dsn.host or "localhost",
            "user": dsn.username,
            "password": dsn.password,
            "dbname": dsn.database,
            **options,
        }
        if dsn.port:
            connect_kwargs["port"] = dsn.port
        connect_kwargs = {key: value for key, value in connect_kwargs.items() if value is not None}

        try:
            connection = driver.connect(**connect_kwargs)
        except Exception as exc:
            raise AdapterConnectionError("Failed to connect to PostgreSQL.") from exc
        connection.autocommit = bool(config.autocommit)

        self._state = ConnectionState(connection, config, driver)
        return connection

    def server_version(self) -> str:
        rows = self.query("SHOW server_version")
        if rows:
            return str(next(iter(rows[0].values())))
        return super().server_version()
