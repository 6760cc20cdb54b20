from datetime import date

import pytest

from partitionkit.schema import (
    MAXVALUE,
    PartitionDefinition,
    PartitionKind,
    SqlExpression,
    build_year_partitions,
    range_expression,
)
from partitionkit.validation import ValidationError


def test_range_definition_renders_less_than():
    partition = PartitionDefinition("p0", PartitionKind.RANGE, 10)
    assert partition.to_sql() == "PARTITION p0 VALUES LESS THAN (10)"


def test_kind_accepts_plain_strings():
    partition = PartitionDefinition("p0", "LIST", [1, 2])
    assert partition.kind is PartitionKind.LIST
    assert partition.value == (1, 2)


def test_list_definition_quotes_text_and_keeps_expressions():
    partition = PartitionDefinition.values_in(
        "mixed", [1, "O'Brien", SqlExpression("NULL"), date(2024, 1, 1)]
    )
    assert partition.to_sql() == (
        "PARTITION mixed VALUES IN (1, 'O''Brien', NULL, '2024-01-01')"
    )


def test_range_definition_keeps_expression_bounds():
    partition = PartitionDefinition.less_than("p0", "TO_DAYS('2024-01-01')")
    assert partition.to_sql() == "PARTITION p0 VALUES LESS THAN (TO_DAYS('2024-01-01'))"
    assert PartitionDefinition.less_than("rest", MAXVALUE).is_future


def test_subpartitions_render_nested_clause():
    partition = PartitionDefinition.less_than("p0", 10, ["s0", "s1"])
    assert partition.to_sql() == "PARTITION p0 VALUES LESS THAN (10) (SUBPARTITION s0, SUBPARTITION s1)"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"name": "p0", "kind": PartitionKind.RANGE, "value": None},
        {"name": "p0", "kind": PartitionKind.RANGE, "value": ""},
        {"name": "p0", "kind": PartitionKind.LIST, "value": []},
        {"name": "p0", "kind": PartitionKind.LIST, "value": "FR"},
        {"name": "", "kind": PartitionKind.RANGE, "value": 1},
        {"name": "bad name", "kind": PartitionKind.RANGE, "value": 1},
    ],
)
def test_invalid_definitions_raise(kwargs):
    with pytest.raises(ValidationError):
        PartitionDefinition(**kwargs)


def test_backtick_quoted_names_are_valid():
    assert PartitionDefinition.less_than("`dec`", 13).to_sql() == "PARTITION `dec` VALUES LESS THAN (13)"


@pytest.mark.parametrize("start_year, end_year", [(2021, 2021), (2021, 2022), (1999, 2030)])
def test_year_partition_count_and_bounds(start_year, end_year):
    partitions = build_year_partitions(start_year, end_year)
    assert len(partitions) == end_year - start_year + 1
    bounds = [partition.value for partition in partitions]
    assert bounds == sorted(set(bounds))
    assert partitions[0].name == f"year{start_year}"
    assert partitions[-1].value == end_year + 1


def test_year_partitions_with_month_subpartitions_are_year_suffixed():
    [partition] = build_year_partitions(2023, 2023, with_month_subpartitions=True)
    assert partition.subpartitions[0] == "dec2023"
    assert partition.subpartitions[1] == "jan2023"
    assert len(partition.subpartitions) == 12


def test_range_expression():
    assert range_expression("created_at") == "YEAR(created_at)"
    assert range_expression("created_at", timestamp=True) == "UNIX_TIMESTAMP(created_at)"
