"""
Partition definitions and DDL statement building.
"""

from .builder import StatementBuilder, call, join_list
from .partition import (
    MAXVALUE,
    PartitionDefinition,
    PartitionKind,
    SqlExpression,
    build_year_partitions,
    range_expression,
    render_bound,
    render_literal,
)

__all__ = [
    "MAXVALUE",
    "PartitionDefinition",
    "PartitionKind",
    "SqlExpression",
    "StatementBuilder",
    "build_year_partitions",
    "call",
    "join_list",
    "range_expression",
    "render_bound",
    "render_literal",
]
