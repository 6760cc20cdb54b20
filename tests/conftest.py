import pytest

from partitionkit.dialects import MySQLDialect, PostgresDialect


class DriverError(Exception):
    pass


class RecordingAdapter:
    """
    In-memory stand-in for a connected adapter that records every statement.
    """

    def __init__(self, dialect, *, version="8.0.34", plugins=(), variables=(), fail_on=None):
        self.dialect = dialect
        self.slow_query_ms = 100
        self.version = version
        self.plugins = [{"Name": name, "Status": "ACTIVE"} for name in plugins]
        self.variables = [{"Variable_name": name, "Value": "YES"} for name in variables]
        self.fail_on = fail_on
        self.executed: list[str] = []
        self.queries: list[tuple[str, tuple]] = []
        self.version_calls = 0
        self.transactions: list[str] = []
        self.query_rows: list[dict] = []

    def driver_name(self):
        return self.dialect.name

    def server_version(self):
        self.version_calls += 1
        return self.version

    def execute(self, sql, params=None):
        if self.fail_on is not None and self.fail_on in sql:
            raise DriverError(f"rejected: {sql}")
        self.executed.append(sql)
        return None

    def query(self, sql, params=None):
        self.queries.append((sql, tuple(params or ())))
        if sql == "SHOW PLUGINS":
            return list(self.plugins)
        if sql.startswith("SHOW VARIABLES"):
            return list(self.variables)
        return list(self.query_rows)

    def begin(self):
        self.transactions.append("begin")

    def commit(self):
        self.transactions.append("commit")

    def rollback(self):
        self.transactions.append("rollback")

    @property
    def statement_count(self):
        return len(self.executed) + len(self.queries)


@pytest.fixture
def mysql_adapter():
    return RecordingAdapter(MySQLDialect())


@pytest.fixture
def postgres_adapter():
    return RecordingAdapter(PostgresDialect(), version="16.1")


@pytest.fixture
def make_adapter():
    return RecordingAdapter
