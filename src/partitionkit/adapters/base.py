"""
Adapter protocol definitions for partitionkit.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Protocol, Sequence

from ..dialects.base import Dialect
from ..security.dsns import DSNConfig, parse_dsn
from ..security.redaction import abbreviate_sql, redact_params
from ..utils import time_call
from ..utils.performance import resolve_slow_query_ms


class AdapterError(RuntimeError):
    """Base error for adapter-related failures."""


class AdapterConfigurationError(AdapterError):
    """Raised when configuration or required dependencies are invalid."""


class AdapterConnectionError(AdapterError):
    """Raised when establishing or using a connection fails."""


class AdapterExecutionError(AdapterError):
    """Raised when SQL execution or parameter validation fails."""


class StatementFailure(AdapterExecutionError):
    """Raised when the server rejects a statement; the driver error is chained."""

    def __init__(self, message: str, *, sql: str) -> None:
        super().__init__(message)
        self.sql = sql


class AdapterTransactionError(AdapterError):
    """Raised when transaction operations fail."""


@dataclass
class SSLConfig:
    mode: str | None = None
    rootcert: str | None = None
    cert: str | None = None
    key: str | None = None
    ca: str | None = None
    check_hostname: bool | None = None

    def postgres_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {}
        if self.mode:
            options["sslmode"] = self.mode
        if self.rootcert:
            options["sslrootcert"] = self.rootcert
        if self.cert:
            options["sslcert"] = self.cert
        if self.key:
            options["sslkey"] = self.key
        return options

    def mysql_options(self) -> dict[str, Any]:
        ssl: dict[str, Any] = {}
        if self.ca:
            ssl["ca"] = self.ca
        if self.cert:
            ssl["cert"] = self.cert
        if self.key:
            ssl["key"] = self.key
        if self.check_hostname is not None:
            ssl["check_hostname"] = self.check_hostname
        if not ssl:
            return {}
        return {"ssl": ssl}

    def is_empty(self) -> bool:
        return not any(
            [self.mode, self.rootcert, self.cert, self.key, self.ca, self.check_hostname is not None]
        )


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}

# DSN query keys mapped onto SSLConfig attributes.
_SSL_KEYS = {
    "sslmode": "mode",
    "sslrootcert": "rootcert",
    "sslcert": "cert",
    "sslkey": "key",
    "ssl_ca": "ca",
    "ssl_cert": "cert",
    "ssl_key": "key",
}


def _parse_bool(value: str, *, key: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise AdapterConfigurationError(f"Invalid boolean value for '{key}': {value!r}")


def _parse_number(value: str, *, key: str, cast: type) -> Any:
    try:
        return cast(value)
    except ValueError as exc:
        raise AdapterConfigurationError(
            f"Invalid {cast.__name__} value for '{key}': {value!r}"
        ) from exc


def _parse_ssl(query: dict[str, str]) -> SSLConfig | None:
    ssl = SSLConfig()
    for key, attribute in _SSL_KEYS.items():
        if key in query:
            setattr(ssl, attribute, query.pop(key))
    if "ssl_check_hostname" in query:
        ssl.check_hostname = _parse_bool(query.pop("ssl_check_hostname"), key="ssl_check_hostname")
    return None if ssl.is_empty() else ssl


@dataclass
class ConnectionConfig:
    """
    Normalized connection configuration for adapters.
    """

    url: str
    autocommit: bool = False
    timeout: float | None = None
    options: dict[str, Any] | None = None
    ssl: SSLConfig | None = None
    dsn: DSNConfig | None = None
    source: str | None = None

    @classmethod
    def from_dsn(cls, dsn: str, **kwargs: Any) -> "ConnectionConfig":
        """
        Build a connection config by parsing the DSN string.

        ``autocommit``, ``timeout`` and the SSL keys are lifted out of the query
        string; remaining keys become driver options (``connect_timeout`` as int).
        Keyword arguments override anything parsed from the DSN.
        """

        parsed = parse_dsn(dsn)
        query = dict(parsed.query)

        autocommit = None
        if "autocommit" in query:
            autocommit = _parse_bool(query.pop("autocommit"), key="autocommit")
        timeout = None
        if "timeout" in query:
            timeout = _parse_number(query.pop("timeout"), key="timeout", cast=float)
        ssl = _parse_ssl(query)

        options: dict[str, Any] = {}
        for key, value in query.items():
            if key == "connect_timeout":
                options[key] = _parse_number(value, key=key, cast=int)
            else:
                options[key] = value
        options.update(kwargs.pop("options", None) or {})

        autocommit = kwargs.pop("autocommit", autocommit)
        return cls(
            url=dsn,
            dsn=parsed,
            autocommit=bool(autocommit) if autocommit is not None else False,
            timeout=kwargs.pop("timeout", timeout),
            options=options or None,
            ssl=kwargs.pop("ssl", ssl),
            **kwargs,
        )

    @classmethod
    def from_env(cls, env_var: str, **kwargs: Any) -> "ConnectionConfig":
        """
        Build a config from an environment variable containing a DSN.
        """

        value = os.getenv(env_var)
        if not value:
            raise AdapterConfigurationError(f"Environment variable {env_var} is not set")
        return cls.from_dsn(value, source=env_var, **kwargs)

    def redacted_dsn(self) -> str:
        if self.dsn:
            return self.dsn.redacted()
        return self.url

    def descriptive_label(self) -> str:
        redacted = self.redacted_dsn()
        if self.source:
            return f"{self.source} ({redacted})"
        return redacted


class DatabaseAdapter(Protocol):
    """
    Statement executor consumed by the capability detector and partition manager.
    """

    dialect: Dialect
    slow_query_ms: int

    def connect(self, config: ConnectionConfig) -> Any:
        """
        Establish a connection handle using the supplied configuration.
        """

    def close(self) -> None:
        """
        Close underlying resources. Implementations should be idempotent.
        """

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> Any:
        """
        Execute a single SQL statement returning a cursor-like object.
        """

    def query(self, sql: str, params: Sequence[Any] | None = None) -> list[dict[str, Any]]:
        """
        Execute a statement and return every row as a column-name mapping.
        """

    def driver_name(self) -> str:
        """
        Backend family name, ``mysql`` or ``postgresql``.
        """

    def server_version(self) -> str:
        """
        Raw server version string as reported by ``SELECT version()``.
        """

    def begin(self) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass
class ConnectionState:
    connection: Any
    config: ConnectionConfig
    driver: Any


class DBAPIAdapter:
    """
    Shared DB-API 2.0 plumbing for the pyformat drivers (PyMySQL, mysqlclient, psycopg).
    """

    label = "database"
    begin_statement = "BEGIN"

    def __init__(self, dialect: Dialect, logger, slow_query_ms: int | None = None) -> None:
        self.dialect = dialect
        self.logger = logger
        self.slow_query_ms = resolve_slow_query_ms(default=100, override=slow_query_ms)
        self._state: ConnectionState | None = None
        self._explicit_transaction = False

    def driver_name(self) -> str:
        return self.dialect.name

    def close(self) -> None:
        if self._state:
            try:
                self._state.connection.close()
            finally:
                self._state = None

    def _ensure_connection(self):
        if not self._state:
            raise AdapterConnectionError(f"{type(self).__name__} is not connected.")
        conn = self._state.connection
        if getattr(conn, "closed", False):
            self.logger.warning("%s connection closed; reconnecting.", self.label)
            conn = self.connect(self._state.config)
        return conn

    def connect(self, config: ConnectionConfig) -> Any:  # pragma: no cover - abstract
        raise NotImplementedError

    def execute(self, sql: str, params: Sequence[Any] | None = None):
        connection = self._ensure_connection()
        cursor = connection.cursor()
        params = params or ()
        self._validate_params(sql, params)
        driver_error = getattr(self._state.driver, "Error", Exception) if self._state else Exception
        try:
            with time_call(
                f"{self.dialect.name}.execute",
                self.logger,
                sql=abbreviate_sql(sql),
                params=redact_params(params),
                threshold_ms=self.slow_query_ms,
            ):
                cursor.execute(sql, params or None)
        except driver_error as exc:
            raise StatementFailure(
                f"{self.label} rejected statement: {abbreviate_sql(sql)}", sql=sql
            ) from exc
        return cursor

    def query(self, sql: str, params: Sequence[Any] | None = None) -> list[dict[str, Any]]:
        cursor = self.execute(sql, params)
        description = getattr(cursor, "description", None)
        if description is None:
            # Statement produced no result set (e.g. PostgreSQL ANALYZE).
            return []
        rows = cursor.fetchall() or []
        columns = [column[0] for column in description]
        result: list[dict[str, Any]] = []
        for row in rows:
            if isinstance(row, dict):
                result.append(dict(row))
            else:
                result.append(dict(zip(columns, row)))
        return result

    def server_version(self) -> str:
        rows = self.execute("SELECT version()").fetchall()
        if not rows:
            raise AdapterExecutionError(f"{self.label} did not report a server version.")
        row = rows[0]
        value = next(iter(row.values())) if isinstance(row, dict) else row[0]
        return str(value)

    def begin(self) -> None:
        connection = self._ensure_connection()
        try:
            connection.cursor().execute(self.begin_statement)
        except Exception as exc:
            raise AdapterTransactionError(f"Failed to begin {self.label} transaction.") from exc
        # Driver-level commit/rollback are no-ops under autocommit; end the block with SQL.
        self._explicit_transaction = self._autocommit_enabled(connection)

    def commit(self) -> None:
        self._end_transaction("COMMIT")

    def rollback(self) -> None:
        self._end_transaction("ROLLBACK")

    def _end_transaction(self, statement: str) -> None:
        connection = self._ensure_connection()
        if not self._explicit_transaction:
            getattr(connection, statement.lower())()
            return
        self._explicit_transaction = False
        try:
            connection.cursor().execute(statement)
        except Exception as exc:
            raise AdapterTransactionError(
                f"Failed to {statement.lower()} {self.label} transaction."
            ) from exc

    @staticmethod
    def _autocommit_enabled(connection: Any) -> bool:
        return bool(getattr(connection, "autocommit", False) is True)

    @staticmethod
    def _count_placeholders(sql: str) -> int:
        count = 0
        idx = 0
        while idx < len(sql) - 1:
            if sql[idx] == "%" and sql[idx + 1] == "s":
                count += 1
                idx += 2
                continue
            if sql[idx] == "%" and sql[idx + 1] == "%":
                idx += 2
                continue
            idx += 1
        return count

    def _validate_params(self, sql: str, params: Sequence[Any]) -> None:
        if not params:
            # Executed without bind parameters, so `%s` inside rendered literals is inert.
            return
        placeholder_count = self._count_placeholders(sql)
        if placeholder_count == 0:
            raise AdapterExecutionError("Parameters provided but SQL statement has no placeholders.")
        if placeholder_count != len(params):
            raise AdapterExecutionError(
                f"Parameter count mismatch: expected {placeholder_count}, received {len(params)}."
            )
