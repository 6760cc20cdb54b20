"""
Partition manager issuing compiled partition DDL through a database adapter.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Sequence

from .adapters.base import DatabaseAdapter
from .capabilities import CapabilityCache, CapabilityDetector
from .dialects import Dialect, dialect_for_server
from .dialects.base import ANALYZE, CHECK, DROP, OPTIMIZE, REBUILD, REPAIR, TRUNCATE
from .schema.partition import PartitionDefinition
from .security.redaction import abbreviate_sql, describe_partitions
from .utils import get_logger
from .validation import validate_year_range


class PartitionManager:
    """
    Public entry point for partitioning a table.

    Creation operations assert server support first and render through the dialect
    strategy the capability detector selected. Maintenance passthroughs skip detection
    because they act on partitions that already exist.

    Multi-statement operations (PostgreSQL) are applied one statement at a time: if
    statement K fails, statements before K stay applied. Pass ``atomic=True`` to run the
    whole sequence in one transaction on dialects with transactional DDL.
    """

    def __init__(
        self,
        adapter: DatabaseAdapter,
        *,
        cache: CapabilityCache | None = None,
        atomic: bool = False,
    ) -> None:
        self.adapter = adapter
        self.detector = CapabilityDetector(adapter, cache)
        self.atomic = atomic
        self.logger = get_logger("manager")

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #
    def have_partitioning(self) -> bool:
        return self.detector.have_partitioning()

    def version(self) -> str:
        return self.adapter.server_version()

    def get_partition_names(self, db: str, table: str) -> List[Dict[str, Any]]:
        """
        List partitions of ``db.table`` (``db`` is the schema name on PostgreSQL).
        """
        dialect = self._supported_dialect()
        return self.adapter.query(dialect.partition_listing_sql(), (db, table))

    # ------------------------------------------------------------------ #
    # Discrete strategies
    # ------------------------------------------------------------------ #
    def partition_by_range(
        self,
        table: str,
        column: str,
        partitions: Sequence[PartitionDefinition],
        include_future_partition: bool = True,
        schema: str | None = None,
    ) -> None:
        dialect = self._supported_dialect()
        statements = dialect.render_range_partitions(
            table,
            column,
            partitions,
            include_future_partition=include_future_partition,
            schema=schema,
        )
        self._apply(dialect, statements, operation="partition_by_range")

    def partition_by_list(
        self,
        table: str,
        column: str,
        partitions: Sequence[PartitionDefinition],
        schema: str | None = None,
    ) -> None:
        dialect = self._supported_dialect()
        statements = dialect.render_list_partitions(table, column, partitions, schema=schema)
        self._apply(dialect, statements, operation="partition_by_list")

    def partition_by_hash(
        self, table: str, hash_column: str, partitions_number: int, schema: str | None = None
    ) -> None:
        dialect = self._supported_dialect()
        statements = dialect.render_hash_partitions(
            table, hash_column, partitions_number, schema=schema
        )
        self._apply(dialect, statements, operation="partition_by_hash")

    def partition_by_key(
        self, table: str, partitions_number: int, schema: str | None = None
    ) -> None:
        dialect = self._supported_dialect()
        statements = dialect.render_key_partitions(table, partitions_number, schema=schema)
        self._apply(dialect, statements, operation="partition_by_key")

    # ------------------------------------------------------------------ #
    # Calendar buckets
    # ------------------------------------------------------------------ #
    def partition_by_months(self, table: str, column: str, schema: str | None = None) -> None:
        dialect = self._supported_dialect()
        statements = dialect.render_month_partitions(table, column, schema=schema)
        self._apply(dialect, statements, operation="partition_by_months")

    def partition_by_years(
        self,
        table: str,
        column: str,
        start_year: int,
        end_year: int | None = None,
        schema: str | None = None,
        timestamp: bool = False,
    ) -> None:
        start_year, end_year = validate_year_range(start_year, end_year)
        dialect = self._supported_dialect()
        statements = dialect.render_year_partitions(
            table, column, start_year, end_year, schema=schema, timestamp=timestamp
        )
        self._apply(dialect, statements, operation="partition_by_years")

    def partition_by_years_and_months(
        self,
        table: str,
        column: str,
        start_year: int,
        end_year: int | None = None,
        include_future_partition: bool = True,
        schema: str | None = None,
        timestamp: bool = False,
    ) -> None:
        start_year, end_year = validate_year_range(start_year, end_year)
        dialect = self._supported_dialect()
        statements = dialect.render_year_month_partitions(
            table,
            column,
            start_year,
            end_year,
            include_future_partition=include_future_partition,
            schema=schema,
            timestamp=timestamp,
        )
        self._apply(dialect, statements, operation="partition_by_years_and_months")

    # ------------------------------------------------------------------ #
    # Table helpers
    # ------------------------------------------------------------------ #
    def create_partitioned_table(
        self,
        table: str,
        column: str,
        column_type: str,
        partition_type: str = "RANGE",
        nullable: bool = False,
        schema: str | None = None,
    ) -> None:
        dialect = self._supported_dialect()
        statements = dialect.render_partitioned_table(
            table, column, column_type, partition_type, nullable=nullable, schema=schema
        )
        if not statements:
            self.logger.info(
                "%s creates partitions on existing tables; skipping CREATE for %s",
                dialect.name,
                table,
            )
            return
        self._apply(dialect, statements, operation="create_partitioned_table")

    def force_auto_increment(
        self,
        table: str,
        field: str = "id",
        column_type: str = "INTEGER",
        schema: str | None = None,
    ) -> None:
        dialect = self.adapter.dialect
        statements = dialect.render_auto_increment(table, field, column_type, schema=schema)
        self._apply(dialect, statements, operation="force_auto_increment")

    # ------------------------------------------------------------------ #
    # Maintenance passthroughs
    # ------------------------------------------------------------------ #
    def truncate_partition_data(
        self, table: str, partitions: Sequence[str], schema: str | None = None
    ) -> None:
        """
        Delete the rows of the given partitions without touching the rest of the table.
        """
        self._maintenance(table, TRUNCATE, partitions, schema)

    def delete_partition(
        self, table: str, partitions: Sequence[str], schema: str | None = None
    ) -> None:
        self.logger.warning(
            "DROP PARTITION generated for %s (%s); partition data is removed with it.",
            table,
            describe_partitions(partitions),
        )
        self._maintenance(table, DROP, partitions, schema)

    def rebuild_partitions(
        self, table: str, partitions: Sequence[str], schema: str | None = None
    ) -> None:
        """
        Rebuild partitions, equivalent to dropping and reinserting their rows (defragments).
        """
        self._maintenance(table, REBUILD, partitions, schema)

    def optimize_partitions(
        self, table: str, partitions: Sequence[str], schema: str | None = None
    ) -> List[Dict[str, Any]]:
        """
        Reclaim unused space after large deletes or heavy updates of variable-length rows.
        """
        return self._maintenance(table, OPTIMIZE, partitions, schema, returns_rows=True)

    def analyze_partitions(
        self, table: str, partitions: Sequence[str], schema: str | None = None
    ) -> List[Dict[str, Any]]:
        return self._maintenance(table, ANALYZE, partitions, schema, returns_rows=True)

    def repair_partitions(
        self, table: str, partitions: Sequence[str], schema: str | None = None
    ) -> List[Dict[str, Any]]:
        return self._maintenance(table, REPAIR, partitions, schema, returns_rows=True)

    def check_partitions(
        self, table: str, partitions: Sequence[str], schema: str | None = None
    ) -> List[Dict[str, Any]]:
        return self._maintenance(table, CHECK, partitions, schema, returns_rows=True)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #
    def _supported_dialect(self) -> Dialect:
        state = self.detector.assert_support()
        return dialect_for_server(state.dialect)

    def _maintenance(
        self,
        table: str,
        verb: str,
        partitions: Sequence[str],
        schema: str | None,
        *,
        returns_rows: bool = False,
    ):
        dialect = self.adapter.dialect
        sql = dialect.render_maintenance(table, verb, partitions, schema=schema)
        self.logger.info("%s PARTITION on %s: %s", verb, table, describe_partitions(partitions))
        if not returns_rows:
            self._apply(dialect, [sql], operation=verb.lower())
            return None
        try:
            rows = self.adapter.query(sql)
        except Exception:
            if dialect.capabilities.transactional_ddl:
                self._rollback_quietly()
            raise
        if dialect.capabilities.transactional_ddl:
            self.adapter.commit()
        return rows

    def _apply(self, dialect: Dialect, statements: Sequence[str], *, operation: str) -> None:
        transactional = dialect.capabilities.transactional_ddl
        if self.atomic and not transactional:
            self.logger.debug("%s DDL commits implicitly; atomic=True has no effect.", dialect.name)
        if self.atomic and transactional:
            with self._transaction():
                for sql in statements:
                    self.adapter.execute(sql)
            self.logger.info("%s applied %d statement(s) atomically", operation, len(statements))
            return

        for index, sql in enumerate(statements):
            try:
                self.adapter.execute(sql)
            except Exception:
                self.logger.error(
                    "%s failed on statement %d/%d (%d already applied): %s",
                    operation,
                    index + 1,
                    len(statements),
                    index,
                    abbreviate_sql(sql),
                )
                if transactional:
                    self._rollback_quietly()
                raise
            if transactional:
                self.adapter.commit()
        self.logger.info("%s applied %d statement(s)", operation, len(statements))

    def _rollback_quietly(self) -> None:
        # The statement error is what the caller needs to see.
        try:
            self.adapter.rollback()
        except Exception:
            self.logger.exception("Rollback failed after statement error")

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        self.adapter.begin()
        try:
            yield
        except Exception:
            self._rollback_quietly()
            raise
        else:
            self.adapter.commit()
