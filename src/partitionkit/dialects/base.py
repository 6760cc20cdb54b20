"""
Dialect strategy interfaces describing partition DDL compilation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Protocol, Sequence

from ..schema.partition import PartitionDefinition

# Maintenance verbs rendered as ``ALTER TABLE t <VERB> PARTITION ...`` on MySQL.
TRUNCATE = "TRUNCATE"
DROP = "DROP"
REBUILD = "REBUILD"
OPTIMIZE = "OPTIMIZE"
ANALYZE = "ANALYZE"
REPAIR = "REPAIR"
CHECK = "CHECK"

MAINTENANCE_VERBS = (TRUNCATE, DROP, REBUILD, OPTIMIZE, ANALYZE, REPAIR, CHECK)


@dataclass(frozen=True)
class DialectCapabilities:
    """
    Feature flags describing backend partitioning behaviour.
    """

    declarative_partitions: bool = False
    transactional_ddl: bool = False
    supports_key_partitioning: bool = False
    supports_subpartitions: bool = False


class Dialect(Protocol):
    """
    Strategy interface turning partitioning intent into dialect-specific statements.

    Every ``render_*`` method is pure and returns the statements to issue, in order.
    """

    @property
    def name(self) -> str: ...

    @property
    def capabilities(self) -> DialectCapabilities: ...

    def quote_identifier(self, identifier: str) -> str: ...

    def format_table(self, table_name: str, schema: str | None = None) -> str: ...

    def render_range_partitions(
        self,
        table: str,
        column: str,
        partitions: Sequence[PartitionDefinition],
        *,
        include_future_partition: bool = True,
        schema: str | None = None,
    ) -> List[str]: ...

    def render_list_partitions(
        self,
        table: str,
        column: str,
        partitions: Sequence[PartitionDefinition],
        *,
        schema: str | None = None,
    ) -> List[str]: ...

    def render_hash_partitions(
        self, table: str, column: str, partitions_number: int, *, schema: str | None = None
    ) -> List[str]: ...

    def render_key_partitions(
        self, table: str, partitions_number: int, *, schema: str | None = None
    ) -> List[str]: ...

    def render_month_partitions(
        self, table: str, column: str, *, schema: str | None = None
    ) -> List[str]: ...

    def render_year_partitions(
        self,
        table: str,
        column: str,
        start_year: int,
        end_year: int,
        *,
        schema: str | None = None,
        timestamp: bool = False,
    ) -> List[str]: ...

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
    ) -> List[str]: ...

    def render_partitioned_table(
        self,
        table: str,
        column: str,
        column_type: str,
        partition_type: str = "RANGE",
        *,
        nullable: bool = False,
        schema: str | None = None,
    ) -> List[str]: ...

    def render_auto_increment(
        self, table: str, field: str, column_type: str, *, schema: str | None = None
    ) -> List[str]: ...

    def render_maintenance(
        self, table: str, verb: str, partitions: Sequence[str], *, schema: str | None = None
    ) -> str: ...

    def partition_listing_sql(self) -> str: ...


def qualify(dialect: Dialect, table: str, schema: str | None) -> str:
    """
    Quote ``table`` (optionally ``schema.table``) with the dialect's identifier rules.
    """
    if schema:
        return f"{dialect.quote_identifier(schema)}.{dialect.quote_identifier(table)}"
    if "." in table:
        schema_part, table_part = table.split(".", 1)
        return f"{dialect.quote_identifier(schema_part)}.{dialect.quote_identifier(table_part)}"
    return dialect.quote_identifier(table)
