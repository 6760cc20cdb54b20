"""
Partition definitions consumed by the dialect renderers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, List, Sequence, Tuple

from ..utils.naming import HASH_ORDERED_MONTHS
from ..validation import validate_partition_definition
from .builder import StatementBuilder, call, join_list


class PartitionKind(str, Enum):
    RANGE = "RANGE"
    LIST = "LIST"


class SqlExpression(str):
    """
    Marks a string as raw SQL so it is rendered without quoting.
    """

    def __repr__(self) -> str:
        return f"SqlExpression({str.__repr__(self)})"


MAXVALUE = SqlExpression("MAXVALUE")


def render_literal(value: Any) -> str:
    """
    Render a list value or bound as SQL: numbers and expressions verbatim, text quoted.
    """
    if isinstance(value, SqlExpression):
        return str(value)
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if value is None:
        return "NULL"
    if isinstance(value, datetime):
        value = value.strftime("%Y-%m-%d %H:%M:%S")
    elif isinstance(value, date):
        value = value.isoformat()
    escaped = str(value).replace("'", "''")
    return f"'{escaped}'"


def render_bound(value: Any) -> str:
    """
    Render a RANGE upper bound. Plain strings are taken as SQL expressions such as
    ``TO_DAYS('2024-01-01')``; dates are quoted.
    """
    if isinstance(value, str):
        return str(value)
    return render_literal(value)


@dataclass(frozen=True)
class PartitionDefinition:
    """
    One ``PARTITION ... VALUES ...`` clause.

    ``value`` holds the RANGE upper bound or the ordered LIST values. ``subpartitions``
    optionally names nested ``SUBPARTITION`` entries.
    """

    name: str
    kind: PartitionKind
    value: Any
    subpartitions: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        kind = PartitionKind(self.kind)
        object.__setattr__(self, "kind", kind)
        if kind is PartitionKind.LIST and not isinstance(self.value, (str, bytes)):
            try:
                object.__setattr__(self, "value", tuple(self.value))
            except TypeError:
                pass
        validate_partition_definition(self.name, kind.value, self.value)
        object.__setattr__(self, "subpartitions", tuple(self.subpartitions))

    @classmethod
    def less_than(cls, name: str, value: Any, subpartitions: Sequence[str] = ()) -> "PartitionDefinition":
        return cls(name, PartitionKind.RANGE, value, tuple(subpartitions))

    @classmethod
    def values_in(cls, name: str, values: Sequence[Any]) -> "PartitionDefinition":
        return cls(name, PartitionKind.LIST, tuple(values))

    @property
    def is_future(self) -> bool:
        return self.kind is PartitionKind.RANGE and self.value == MAXVALUE

    def values_clause(self) -> str:
        if self.kind is PartitionKind.RANGE:
            return f"VALUES LESS THAN ({render_bound(self.value)})"
        return f"VALUES IN ({join_list(render_literal(item) for item in self.value)})"

    def to_sql(self) -> str:
        builder = StatementBuilder("PARTITION", self.name, self.values_clause())
        if self.subpartitions:
            builder.group(f"SUBPARTITION {name}" for name in self.subpartitions)
        return builder.build()


def build_year_partitions(
    start_year: int,
    end_year: int,
    *,
    timestamp: bool = False,
    with_month_subpartitions: bool = False,
) -> List[PartitionDefinition]:
    """
    One RANGE partition ``year{Y}`` per year, bounded by the start of the next year.

    With ``timestamp`` the bound is ``UNIX_TIMESTAMP('{Y+1}-01-01 00:00:00')`` instead of
    ``Y+1``. Month subpartitions are suffixed with the year so their names stay unique
    across the whole table.
    """
    partitions: List[PartitionDefinition] = []
    for year in range(start_year, end_year + 1):
        if timestamp:
            bound: Any = SqlExpression(call("UNIX_TIMESTAMP", f"'{year + 1}-01-01 00:00:00'"))
        else:
            bound = year + 1
        subpartitions: Tuple[str, ...] = ()
        if with_month_subpartitions:
            subpartitions = tuple(f"{month}{year}" for month in HASH_ORDERED_MONTHS)
        partitions.append(PartitionDefinition.less_than(f"year{year}", bound, subpartitions))
    return partitions


def range_expression(column: str, *, timestamp: bool = False) -> str:
    return call("UNIX_TIMESTAMP", column) if timestamp else call("YEAR", column)
