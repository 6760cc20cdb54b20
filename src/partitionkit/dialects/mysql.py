"""
MySQL dialect: imperative ``ALTER TABLE ... PARTITION BY`` statements.
"""

from __future__ import annotations

from typing import Final, List, Sequence

from ..schema.builder import StatementBuilder, call, join_list
from ..schema.partition import (
    MAXVALUE,
    PartitionDefinition,
    build_year_partitions,
    range_expression,
)
from ..utils.naming import FUTURE_PARTITION, HASH_ORDERED_MONTHS, month_name
from ..validation import (
    ValidationError,
    validate_definitions,
    validate_partition_count,
    validate_partition_names,
)
from .base import MAINTENANCE_VERBS, DialectCapabilities, qualify

_LISTING_SQL = (
    "SELECT PARTITION_NAME AS partition_name, "
    "SUBPARTITION_NAME AS subpartition_name, "
    "PARTITION_ORDINAL_POSITION AS ordinal_position, "
    "TABLE_ROWS AS row_estimate, "
    "PARTITION_METHOD AS partition_method "
    "FROM information_schema.PARTITIONS "
    "WHERE TABLE_SCHEMA = %s AND TABLE_NAME = %s "
    "ORDER BY PARTITION_ORDINAL_POSITION, SUBPARTITION_ORDINAL_POSITION"
)


class MySQLDialect:
    """
    MySQL dialect rendering one ALTER TABLE statement per partitioning request.
    """

    name: Final[str] = "mysql"
    capabilities: Final[DialectCapabilities] = DialectCapabilities(
        declarative_partitions=False,
        transactional_ddl=False,
        supports_key_partitioning=True,
        supports_subpartitions=True,
    )

    def quote_identifier(self, identifier: str) -> str:
        escaped = identifier.replace("`", "``")
        return f"`{escaped}`"

    def format_table(self, table_name: str, schema: str | None = None) -> str:
        return qualify(self, table_name, schema)

    def _alter(self, table: str, schema: str | None) -> StatementBuilder:
        return StatementBuilder("ALTER TABLE", self.format_table(table, schema))

    # ------------------------------------------------------------------ #
    # Discrete strategies
    # ------------------------------------------------------------------ #
    def render_range_partitions(
        self,
        table: str,
        column: str,
        partitions: Sequence[PartitionDefinition],
        *,
        include_future_partition: bool = True,
        schema: str | None = None,
    ) -> List[str]:
        validate_definitions(partitions, kind="RANGE")
        clauses = [partition.to_sql() for partition in partitions]
        if include_future_partition and not partitions[-1].is_future:
            clauses.append(PartitionDefinition.less_than(FUTURE_PARTITION, MAXVALUE).to_sql())
        statement = self._alter(table, schema).add("PARTITION BY", call("RANGE", column))
        return [statement.group(clauses).build()]

    def render_list_partitions(
        self,
        table: str,
        column: str,
        partitions: Sequence[PartitionDefinition],
        *,
        schema: str | None = None,
    ) -> List[str]:
        validate_definitions(partitions, kind="LIST")
        statement = self._alter(table, schema).add("PARTITION BY", call("LIST", column))
        return [statement.group(partition.to_sql() for partition in partitions).build()]

    def render_hash_partitions(
        self, table: str, column: str, partitions_number: int, *, schema: str | None = None
    ) -> List[str]:
        validate_partition_count(partitions_number)
        statement = self._alter(table, schema).add(
            "PARTITION BY", call("HASH", column), f"PARTITIONS {partitions_number}"
        )
        return [statement.build()]

    def render_key_partitions(
        self, table: str, partitions_number: int, *, schema: str | None = None
    ) -> List[str]:
        validate_partition_count(partitions_number)
        # KEY() with no columns uses the primary key, or a unique key when there is none.
        statement = self._alter(table, schema).add(
            "PARTITION BY", call("KEY"), f"PARTITIONS {partitions_number}"
        )
        return [statement.build()]

    # ------------------------------------------------------------------ #
    # Calendar buckets
    # ------------------------------------------------------------------ #
    def render_month_partitions(
        self, table: str, column: str, *, schema: str | None = None
    ) -> List[str]:
        months = [
            PartitionDefinition.less_than(self.quote_identifier(month_name(month)), month + 1)
            for month in range(1, 13)
        ]
        return self.render_range_partitions(
            table,
            call("MONTH", column),
            months,
            include_future_partition=False,
            schema=schema,
        )

    def render_year_partitions(
        self,
        table: str,
        column: str,
        start_year: int,
        end_year: int,
        *,
        schema: str | None = None,
        timestamp: bool = False,
    ) -> List[str]:
        partitions = build_year_partitions(start_year, end_year, timestamp=timestamp)
        return self.render_range_partitions(
            table,
            range_expression(column, timestamp=timestamp),
            partitions,
            include_future_partition=True,
            schema=schema,
        )

    def render_year_month_partitions(
        self,
        table: str,
        column: str,
        start_year: int,
        end_year: int,
        *,
        include_future_partition: bool = True,
        schema: str | None = None,
        timestamp: bool = False,
    ) -> List[str]:
        partitions = build_year_partitions(
            start_year, end_year, timestamp=timestamp, with_month_subpartitions=True
        )
        if include_future_partition:
            # Singleton partition, so its month subpartitions need no year suffix.
            future_months = [self.quote_identifier(month) for month in HASH_ORDERED_MONTHS]
            partitions.append(PartitionDefinition.less_than(FUTURE_PARTITION, MAXVALUE, future_months))
        validate_definitions(partitions, kind="RANGE")
        statement = self._alter(table, schema).add(
            "PARTITION BY",
            call("RANGE", range_expression(column, timestamp=timestamp)),
            "SUBPARTITION BY",
            call("HASH", call("MONTH", column)),
        )
        return [statement.group(partition.to_sql() for partition in partitions).build()]

    # ------------------------------------------------------------------ #
    # Table helpers
    # ------------------------------------------------------------------ #
    def render_partitioned_table(
        self,
        table: str,
        column: str,
        column_type: str,
        partition_type: str = "RANGE",
        *,
        nullable: bool = False,
        schema: str | None = None,
    ) -> List[str]:
        # MySQL partitions existing tables through ALTER TABLE; nothing to create up front.
        return []

    def render_auto_increment(
        self, table: str, field: str, column_type: str, *, schema: str | None = None
    ) -> List[str]:
        statement = self._alter(table, schema).add(
            "MODIFY", self.quote_identifier(field), column_type, "NOT NULL AUTO_INCREMENT"
        )
        return [statement.build()]

    def render_maintenance(
        self, table: str, verb: str, partitions: Sequence[str], *, schema: str | None = None
    ) -> str:
        if verb not in MAINTENANCE_VERBS:
            raise ValidationError({"verb": [f"Unknown partition maintenance verb {verb!r}."]})
        validate_partition_names(partitions)
        statement = self._alter(table, schema).add(f"{verb} PARTITION", join_list(partitions))
        return statement.build()

    def partition_listing_sql(self) -> str:
        return _LISTING_SQL
