import logging

import pytest

from conftest import DriverError, RecordingAdapter

from partitionkit import (
    CapabilityCache,
    InvalidRange,
    PartitionDefinition,
    PartitionManager,
    UnsupportedPartitioning,
    ValidationError,
)
from partitionkit.dialects import MySQLDialect


def test_partition_by_years_on_mysql(mysql_adapter):
    manager = PartitionManager(mysql_adapter)
    manager.partition_by_years("events", "created_at", 2021, 2022)
    assert mysql_adapter.executed == [
        "ALTER TABLE `events` PARTITION BY RANGE(YEAR(created_at)) ("
        "PARTITION year2021 VALUES LESS THAN (2022), "
        "PARTITION year2022 VALUES LESS THAN (2023), "
        "PARTITION future VALUES LESS THAN (MAXVALUE))"
    ]
    assert mysql_adapter.transactions == []


def test_partition_by_years_on_postgres(postgres_adapter):
    manager = PartitionManager(postgres_adapter)
    manager.partition_by_years("events", "created_at", 2021, 2022)
    assert postgres_adapter.executed == [
        'CREATE TABLE "events_2021" PARTITION OF "events" '
        "FOR VALUES FROM ('2021-01-01') TO ('2022-01-01')",
        'CREATE TABLE "events_2022" PARTITION OF "events" '
        "FOR VALUES FROM ('2022-01-01') TO ('2023-01-01')",
    ]
    # Each statement is committed on its own when not atomic.
    assert postgres_adapter.transactions == ["commit", "commit"]


@pytest.mark.parametrize("method", ["partition_by_years", "partition_by_years_and_months"])
def test_inverted_year_range_issues_nothing(mysql_adapter, method):
    manager = PartitionManager(mysql_adapter)
    with pytest.raises(InvalidRange) as excinfo:
        getattr(manager, method)("events", "created_at", 2025, 2023)
    assert excinfo.value.errors["start_year"]
    assert mysql_adapter.statement_count == 0
    assert mysql_adapter.version_calls == 0


def test_end_year_defaults_to_current_year(mysql_adapter, monkeypatch):
    monkeypatch.setattr("partitionkit.validation.pipeline.current_year", lambda: 2024)
    manager = PartitionManager(mysql_adapter)
    manager.partition_by_years("events", "created_at", 2023)
    [sql] = mysql_adapter.executed
    assert "PARTITION year2024 VALUES LESS THAN (2025)" in sql
    assert "year2025" not in sql


def test_unsupported_server_issues_no_ddl(make_adapter):
    adapter = make_adapter(MySQLDialect(), version="5.7.0")
    manager = PartitionManager(adapter)
    assert manager.have_partitioning() is False
    with pytest.raises(UnsupportedPartitioning):
        manager.partition_by_hash("events", "user_id", 4)
    assert adapter.executed == []


def test_maintenance_skips_capability_detection(make_adapter):
    adapter = make_adapter(MySQLDialect(), version="5.0.1")
    manager = PartitionManager(adapter)
    manager.truncate_partition_data("events", ["year2021"])
    manager.delete_partition("events", ["year2021", "year2022"])
    manager.rebuild_partitions("events", ["future"])
    assert adapter.executed == [
        "ALTER TABLE `events` TRUNCATE PARTITION year2021",
        "ALTER TABLE `events` DROP PARTITION year2021, year2022",
        "ALTER TABLE `events` REBUILD PARTITION future",
    ]
    assert adapter.version_calls == 0


@pytest.mark.parametrize(
    "method, verb",
    [
        ("optimize_partitions", "OPTIMIZE"),
        ("analyze_partitions", "ANALYZE"),
        ("repair_partitions", "REPAIR"),
        ("check_partitions", "CHECK"),
    ],
)
def test_analytical_maintenance_returns_rows(mysql_adapter, method, verb):
    mysql_adapter.query_rows = [{"Table": "db.events", "Op": verb.lower(), "Msg_text": "OK"}]
    manager = PartitionManager(mysql_adapter)
    rows = getattr(manager, method)("events", ["p0", "p1"])
    assert rows == mysql_adapter.query_rows
    assert mysql_adapter.queries[-1] == (f"ALTER TABLE `events` {verb} PARTITION p0, p1", ())


def test_delete_partition_logs_warning(mysql_adapter, caplog):
    caplog.set_level(logging.WARNING, logger="partitionkit.manager")
    PartitionManager(mysql_adapter).delete_partition("events", ["p0"])
    assert any("DROP PARTITION" in record.message for record in caplog.records)


def test_range_list_hash_key_on_mysql(mysql_adapter):
    manager = PartitionManager(mysql_adapter)
    manager.partition_by_range(
        "events", "id", [PartitionDefinition.less_than("p0", 1000)], include_future_partition=False
    )
    manager.partition_by_list("events", "region", [PartitionDefinition.values_in("eu", [1, 2])])
    manager.partition_by_hash("events", "user_id", 4)
    manager.partition_by_key("events", 2, schema="app")
    assert mysql_adapter.executed == [
        "ALTER TABLE `events` PARTITION BY RANGE(id) (PARTITION p0 VALUES LESS THAN (1000))",
        "ALTER TABLE `events` PARTITION BY LIST(region) (PARTITION eu VALUES IN (1, 2))",
        "ALTER TABLE `events` PARTITION BY HASH(user_id) PARTITIONS 4",
        "ALTER TABLE `app`.`events` PARTITION BY KEY() PARTITIONS 2",
    ]
    # Detection ran once for all four operations.
    assert mysql_adapter.version_calls == 1


def test_empty_definitions_are_rejected_before_execution(mysql_adapter):
    manager = PartitionManager(mysql_adapter)
    with pytest.raises(ValidationError):
        manager.partition_by_range("events", "id", [])
    assert mysql_adapter.executed == []


def test_partition_by_months(mysql_adapter):
    PartitionManager(mysql_adapter).partition_by_months("events", "created_at")
    [sql] = mysql_adapter.executed
    assert sql.startswith("ALTER TABLE `events` PARTITION BY RANGE(MONTH(created_at))")


def test_postgres_partial_failure_leaves_earlier_statements_applied(make_adapter):
    from partitionkit.dialects import PostgresDialect

    adapter = make_adapter(PostgresDialect(), fail_on="events_2023")
    manager = PartitionManager(adapter)
    with pytest.raises(DriverError):
        manager.partition_by_years("events", "created_at", 2021, 2024)
    assert [sql.split()[2] for sql in adapter.executed] == ['"events_2021"', '"events_2022"']
    assert adapter.transactions == ["commit", "commit", "rollback"]


def test_postgres_atomic_rolls_back_whole_sequence(make_adapter):
    from partitionkit.dialects import PostgresDialect

    adapter = make_adapter(PostgresDialect(), fail_on="events_feb2022")
    manager = PartitionManager(adapter, atomic=True)
    with pytest.raises(DriverError):
        manager.partition_by_years_and_months("events", "created_at", 2022, 2022)
    assert adapter.transactions == ["begin", "rollback"]


def test_postgres_atomic_commits_once(postgres_adapter):
    manager = PartitionManager(postgres_adapter, atomic=True)
    manager.partition_by_years_and_months("events", "created_at", 2022, 2023)
    assert len(postgres_adapter.executed) == 24
    assert postgres_adapter.transactions == ["begin", "commit"]


def test_atomic_is_ignored_on_mysql(mysql_adapter):
    manager = PartitionManager(mysql_adapter, atomic=True)
    manager.partition_by_years_and_months("events", "created_at", 2022, 2023)
    assert len(mysql_adapter.executed) == 1
    assert mysql_adapter.transactions == []


def test_postgres_rejects_key_partitioning(postgres_adapter):
    with pytest.raises(UnsupportedPartitioning):
        PartitionManager(postgres_adapter).partition_by_key("events", 4)
    assert postgres_adapter.executed == []


def test_get_partition_names_binds_parameters(mysql_adapter):
    mysql_adapter.query_rows = [
        {
            "partition_name": "year2021",
            "subpartition_name": None,
            "ordinal_position": 1,
            "row_estimate": 10,
            "partition_method": "RANGE",
        }
    ]
    rows = PartitionManager(mysql_adapter).get_partition_names("app", "events")
    assert rows[0]["partition_name"] == "year2021"
    sql, params = mysql_adapter.queries[-1]
    assert "information_schema.PARTITIONS" in sql
    assert params == ("app", "events")


def test_create_partitioned_table(postgres_adapter, mysql_adapter):
    PartitionManager(postgres_adapter).create_partitioned_table("events", "created_at", "timestamp")
    assert postgres_adapter.executed == [
        'CREATE TABLE "events" ("created_at" timestamp NOT NULL) PARTITION BY RANGE ("created_at")'
    ]
    PartitionManager(mysql_adapter).create_partitioned_table("events", "created_at", "DATETIME")
    assert mysql_adapter.executed == []


def test_force_auto_increment(mysql_adapter, postgres_adapter):
    PartitionManager(mysql_adapter).force_auto_increment("events")
    assert mysql_adapter.executed == ["ALTER TABLE `events` MODIFY `id` INTEGER NOT NULL AUTO_INCREMENT"]
    PartitionManager(postgres_adapter).force_auto_increment("events")
    assert len(postgres_adapter.executed) == 4


def test_managers_can_share_a_cache(make_adapter):
    cache = CapabilityCache()
    adapter = make_adapter(MySQLDialect(), version="8.0.0")
    PartitionManager(adapter, cache=cache).partition_by_hash("a", "id", 2)
    PartitionManager(adapter, cache=cache).partition_by_hash("b", "id", 2)
    assert adapter.version_calls == 1


def test_version_passthrough(mysql_adapter):
    assert PartitionManager(mysql_adapter).version() == "8.0.34"


def test_postgres_maintenance_commands_are_committed(postgres_adapter):
    manager = PartitionManager(postgres_adapter)
    manager.delete_partition("events", ["events_2021"])
    assert postgres_adapter.executed == ['DROP TABLE "events_2021"']
    assert postgres_adapter.transactions == ["commit"]

    manager.truncate_partition_data("events", ["events_2022"])
    assert postgres_adapter.transactions == ["commit", "commit"]


def test_postgres_analyze_commits_after_returning_rows(postgres_adapter):
    rows = PartitionManager(postgres_adapter).analyze_partitions("events", ["events_2022"])
    assert rows == []
    assert postgres_adapter.queries[-1] == ('ANALYZE "events_2022"', ())
    assert postgres_adapter.transactions == ["commit"]


def test_failed_postgres_maintenance_is_rolled_back(make_adapter):
    from partitionkit.dialects import PostgresDialect

    adapter = make_adapter(PostgresDialect(), fail_on="DROP TABLE")
    with pytest.raises(DriverError):
        PartitionManager(adapter).delete_partition("events", ["events_2021"])
    assert adapter.transactions == ["rollback"]


def test_mysql_maintenance_is_not_committed(mysql_adapter):
    PartitionManager(mysql_adapter).delete_partition("events", ["p0"])
    PartitionManager(mysql_adapter).check_partitions("events", ["p0"])
    assert mysql_adapter.transactions == []


class RollbackFailingAdapter(RecordingAdapter):
    def rollback(self):
        super().rollback()
        raise RuntimeError("connection lost during rollback")


@pytest.mark.parametrize("atomic", [False, True])
def test_statement_error_survives_failing_rollback(atomic):
    from partitionkit.dialects import PostgresDialect

    adapter = RollbackFailingAdapter(PostgresDialect(), fail_on="events_2022")
    manager = PartitionManager(adapter, atomic=atomic)
    with pytest.raises(DriverError):
        manager.partition_by_years("events", "created_at", 2021, 2023)
    assert adapter.transactions[-1] == "rollback"
