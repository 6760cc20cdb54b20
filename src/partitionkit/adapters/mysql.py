"""
MySQL database adapter implementation.
"""

from __future__ import annotations

from typing import Any

from ..dialects.mysql import MySQLDialect
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
        import pymysql  # type: ignore[import-untyped]

        return pymysql
    except ImportError:
        try:
            import MySQLdb

            return MySQLdb
        except ImportError:
            return None


class MySQLAdapter(DBAPIAdapter):
    """
    Adapter wrapping a MySQL DB-API driver (PyMySQL or mysqlclient).
    """

    label = "MySQL"
    begin_statement = "START TRANSACTION"

    def __init__(self, slow_query_ms: int | None = None) -> None:
        super().__init__(MySQLDialect(), get_logger("adapters.mysql"), slow_query_ms)

    def connect(self, config: ConnectionConfig) -> Any:
        driver = _load_driver()
        if driver is None:
            raise AdapterConfigurationError(
                "PyMySQL or mysqlclient is required to use MySQLAdapter."
            )
        if not config.dsn:
            raise AdapterConfigurationError(
                "ConnectionConfig must be built from a DSN for MySQL connections."
            )

        options = dict(config.options or {})
        if config.ssl:
            for key, value in config.ssl.mysql_options().items():
                options.setdefault(key, value)
        if config.timeout and "connect_timeout" not in options:
            options["connect_timeout"] = int(config.timeout)

        self.logger.info(
            "Connecting to MySQL %s (autocommit=%s)",
            config.descriptive_label(),
            config.autocommit,
        )

        dsn = config.dsn
        connect_kwargs = {
            "host": dsn.host or "localhost",
            "user": dsn.username,
            "password": dsn.password,
            "database": dsn.database,
            **options,
        }
        if dsn.port:
            connect_kwargs["port"] = dsn.port

        try:
            connection = driver.connect(**connect_kwargs)
        except Exception as exc:
            raise AdapterConnectionError("Failed to connect to MySQL.") from exc
        if callable(getattr(connection, "autocommit", None)):
            connection.autocommit(config.autocommit)

        self._state = ConnectionState(connection, config, driver)
        return connection

    @staticmethod
    def _autocommit_enabled(connection: Any) -> bool:
        # PyMySQL exposes get_autocommit(); mysqlclient keeps the flag on the instance.
        getter = getattr(connection, "get_autocommit", None)
        if callable(getter):
            return bool(getter())
        return bool(getattr(connection, "_autocommit", False))
