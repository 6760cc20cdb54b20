"""
PostgreSQL dialect: declarative ``CREATE TABLE ... PARTITION OF`` statements.
"""

from __future__ import annotations

from typing import Final, Iterable, List, Sequence

from ..capabilities.errors import UnsupportedPartitioning
from ..schema.builder import StatementBuilder, call, join_list
from ..schema.partition import (
    MAXVALUE,
    PartitionDefinition,
    SqlExpression,
    render_bound,
    render_literal,
)
from ..utils.calendar import CalendarPeriod, format_date, iter_months, iter_years
from ..utils.naming import FUTURE_PARTITION, child_table_name, month_name
from ..validation import (
    ValidationError,
    validate_definitions,
    validate_partition_count,
    validate_partition_names,
)
from .base import ANALYZE, DROP, TRUNCATE, DialectCapabilities, qualify

MINVALUE = SqlExpression("MINVALUE")

PARTITION_TYPES = ("RANGE", "LIST", "HASH")

_LISTING_SQL = (
    "SELECT child.relname AS partition_name, "
    "NULL AS subpartition_name, "
    "ROW_NUMBER() OVER (ORDER BY child.relname) AS ordinal_position, "
    "child.reltuples::bigint AS row_estimate, "
    "CASE pt.partstrat WHEN 'r' THEN 'RANGE' WHEN 'l' THEN 'LIST' WHEN 'h' THEN 'HASH' END "
    "AS partition_method "
    "FROM pg_inherits inh "
    "JOIN pg_class parent ON parent.oid = inh.inhparent "
    "JOIN pg_class child ON child.oid = inh.inhrelid "
    "JOIN pg_namespace ns ON ns.oid = parent.relnamespace "
    "LEFT JOIN pg_partitioned_table pt ON pt.partrelid = parent.oid "
    "WHERE ns.nspname = %s AND parent.relname = %s "
    "ORDER BY child.relname"
)

# Maintenance verbs with a table-level PostgreSQL equivalent.
_MAINTENANCE_TEMPLATES = {
    TRUNCATE: "TRUNCATE TABLE",
    DROP: "DROP TABLE",
    ANALYZE: "ANALYZE",
}


class PostgresDialect:
    """
    PostgreSQL dialect: every partition is a child table attached to its parent.

    The parent must already be declared ``PARTITION BY <strategy> (<key>)``, see
    :meth:`render_partitioned_table`; the ``column`` arguments of the render methods
    are therefore informational only.
    """

    name: Final[str] = "postgresql"
    capabilities: Final[DialectCapabilities] = DialectCapabilities(
        declarative_partitions=True,
        transactional_ddl=True,
        supports_key_partitioning=False,
        supports_subpartitions=False,
    )

    def quote_identifier(self, identifier: str) -> str:
        """
        Quote an identifier, folding it to lower case the way PostgreSQL folds unquoted names.

        A name already wrapped in double quotes keeps its case.
        """
        if len(identifier) > 1 and identifier[0] == identifier[-1] == '"':
            return identifier
        escaped = identifier.strip("`").lower().replace('"', '""')
        return f'"{escaped}"'

    def format_table(self, table_name: str, schema: str | None = None) -> str:
        return qualify(self, table_name, schema)

    def _child(self, table: str, suffix: str, schema: str | None) -> str:
        if schema is None and "." in table:
            schema, table = table.split(".", 1)
        child = child_table_name(table.strip('"'), suffix.strip("`"))
        if table.startswith('"'):
            child = f'"{child}"'
        return qualify(self, child, schema)

    def _partition_of(self, table: str, suffix: str, schema: str | None) -> StatementBuilder:
        return StatementBuilder(
            "CREATE TABLE",
            self._child(table, suffix, schema),
            "PARTITION OF",
            self.format_table(table, schema),
        )

    def _period_statements(
        self, table: str, periods: Iterable[tuple[str, CalendarPeriod]], schema: str | None
    ) -> List[str]:
        return [
            self._partition_of(table, suffix, schema)
            .add(
                "FOR VALUES FROM",
                f"('{format_date(period.start)}')",
                "TO",
                f"('{format_date(period.end)}')",
            )
            .build()
            for suffix, period in periods
        ]

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
        statements: List[str] = []
        lower = MINVALUE
        for partition in partitions:
            upper = render_bound(partition.value)
            statements.append(
                self._partition_of(table, partition.name, schema)
                .add("FOR VALUES FROM", f"({lower})", "TO", f"({upper})")
                .build()
            )
            lower = upper
        if include_future_partition and not partitions[-1].is_future:
            statements.append(
                self._partition_of(table, FUTURE_PARTITION, schema)
                .add("FOR VALUES FROM", f"({lower})", "TO", f"({MAXVALUE})")
                .build()
            )
        return statements

    def render_list_partitions(
        self,
        table: str,
        column: str,
        partitions: Sequence[PartitionDefinition],
        *,
        schema: str | None = None,
    ) -> List[str]:
        validate_definitions(partitions, kind="LIST")
        return [
            self._partition_of(table, partition.name, schema)
            .add(f"FOR VALUES IN ({join_list(render_literal(v) for v in partition.value)})")
            .build()
            for partition in partitions
        ]

    def render_hash_partitions(
        self, table: str, column: str, partitions_number: int, *, schema: str | None = None
    ) -> List[str]:
        validate_partition_count(partitions_number)
        return [
            self._partition_of(table, f"p{remainder}", schema)
            .add(f"FOR VALUES WITH (MODULUS {partitions_number}, REMAINDER {remainder})")
            .build()
            for remainder in range(partitions_number)
        ]

    def render_key_partitions(
        self, table: str, partitions_number: int, *, schema: str | None = None
    ) -> List[str]:
        raise UnsupportedPartitioning(
            "KEY partitioning is MySQL-only; use HASH partitioning on PostgreSQL."
        )

    # ------------------------------------------------------------------ #
    # Calendar buckets
    # ------------------------------------------------------------------ #
    def render_month_partitions(
        self, table: str, column: str, *, schema: str | None = None
    ) -> List[str]:
        raise UnsupportedPartitioning(
            "Month-of-year buckets need a year range on PostgreSQL; "
            "use partition_by_years_and_months instead."
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
        periods = ((str(period.year), period) for period in iter_years(start_year, end_year))
        return self._period_statements(table, periods, schema)

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
        periods = (
            (f"{month_name(period.month)}{period.year}", period)
            for period in iter_months(start_year, end_year)
        )
        return self._period_statements(table, periods, schema)

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
        strategy = partition_type.upper()
        if strategy not in PARTITION_TYPES:
            raise ValidationError(
                {"partition_type": [f"Expected one of {', '.join(PARTITION_TYPES)}, got {partition_type!r}."]}
            )
        quoted = self.quote_identifier(column)
        column_def = StatementBuilder(quoted, column_type, "" if nullable else "NOT NULL").build()
        statement = (
            StatementBuilder("CREATE TABLE", self.format_table(table, schema))
            .group([column_def])
            .add("PARTITION BY", strategy)
            .group([quoted])
        )
        return [statement.build()]

    def render_auto_increment(
        self, table: str, field: str, column_type: str, *, schema: str | None = None
    ) -> List[str]:
        sequence = self._child(table, f"{field}_seq", schema)
        parent = self.format_table(table, schema)
        column = self.quote_identifier(field)
        sequence_literal = render_literal(sequence)
        return [
            f"CREATE SEQUENCE IF NOT EXISTS {sequence}",
            f"SELECT SETVAL({sequence_literal}, COALESCE((SELECT MAX({column}) FROM {parent}), 0) + 1, false)",
            f"ALTER TABLE {parent} ALTER COLUMN {column} SET DEFAULT nextval({sequence_literal}::regclass)",
            f"ALTER SEQUENCE {sequence} OWNED BY {parent}.{column}",
        ]

    def render_maintenance(
        self, table: str, verb: str, partitions: Sequence[str], *, schema: str | None = None
    ) -> str:
        template = _MAINTENANCE_TEMPLATES.get(verb)
        if template is None:
            raise UnsupportedPartitioning(f"{verb} PARTITION has no PostgreSQL equivalent.")
        validate_partition_names(partitions)
        children = [self.format_table(partition, schema) for partition in partitions]
        return StatementBuilder(template, join_list(children)).build()

    def partition_listing_sql(self) -> str:
        return _LISTING_SQL
