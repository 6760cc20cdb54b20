"""
Validation pipeline run before any partition DDL is rendered.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Sequence, Tuple

from ..utils.calendar import current_year
from ..utils.naming import IDENTIFIER_RE, is_valid_identifier
from .errors import InvalidRange, ValidationError
from .validators import MinValueValidator, NotEmptyValidator, RegexValidator, Validator

_not_empty = NotEmptyValidator()
_positive = MinValueValidator(1, message="Ensure at least one partition is requested.")
_identifier = RegexValidator(IDENTIFIER_RE, message="Not a valid partition identifier.")


def validate_partition_definition(name: str, kind: str, value: Any) -> None:
    errors: Dict[str, List[str]] = {}

    _run(errors, "name", name, [_not_empty])
    if "name" not in errors:
        _run(errors, "name", name, [_identifier])

    _run(errors, "value", value, [_not_empty])
    if "value" not in errors and kind == "LIST":
        if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
            _add_error(errors, "value", "LIST partitions need a sequence of values.")

    if errors:
        raise ValidationError(errors)


def validate_definitions(partitions: Sequence[Any], *, kind: str) -> None:
    errors: Dict[str, List[str]] = {}
    _run(errors, "partitions", partitions, [_not_empty])
    for index, partition in enumerate(partitions or ()):
        if getattr(partition, "kind", None) != kind:
            _add_error(
                errors,
                "partitions",
                f"Partition #{index} ({getattr(partition, 'name', partition)!r}) is not a {kind} partition.",
            )
    if not errors and kind == "RANGE":
        _check_range_bounds(errors, [partition.value for partition in partitions])
    if errors:
        raise ValidationError(errors)


def _check_range_bounds(errors: Dict[str, List[str]], bounds: Sequence[Any]) -> None:
    for index, bound in enumerate(bounds):
        if bound == "MAXVALUE" and index != len(bounds) - 1:
            _add_error(errors, "partitions", "MAXVALUE is only allowed on the last partition.")
    numeric = [
        bound for bound in bounds if isinstance(bound, (int, float)) and not isinstance(bound, bool)
    ]
    # Only all-numeric bound lists (optionally ending in MAXVALUE) are checked.
    if len(numeric) == len(bounds) or (len(numeric) == len(bounds) - 1 and bounds[-1] == "MAXVALUE"):
        for previous, current in zip(numeric, numeric[1:]):
            if current <= previous:
                _add_error(
                    errors,
                    "partitions",
                    f"Range bounds must be strictly increasing ({previous} then {current}).",
                )
                break


def validate_partition_count(count: int) -> None:
    errors: Dict[str, List[str]] = {}
    if not isinstance(count, int):
        _add_error(errors, "partitions_number", "Partition count must be an integer.")
    else:
        _run(errors, "partitions_number", count, [_positive])
    if errors:
        raise ValidationError(errors)


def validate_partition_names(partitions: Sequence[str]) -> None:
    errors: Dict[str, List[str]] = {}
    _run(errors, "partitions", partitions, [_not_empty])
    for name in partitions or ():
        if not isinstance(name, str) or not is_valid_identifier(name):
            _add_error(errors, "partitions", f"{name!r} is not a valid partition identifier.")
    if errors:
        raise ValidationError(errors)


def validate_year_range(start_year: int, end_year: int | None) -> Tuple[int, int]:
    """
    Resolve ``end_year`` (defaulting to the current year) and reject inverted ranges.
    """
    resolved_end = end_year if end_year is not None else current_year()
    if start_year > resolved_end:
        raise InvalidRange(start_year, resolved_end)
    return start_year, resolved_end


def _run(
    errors: Dict[str, List[str]],
    field: str,
    value: Any,
    validators: Iterable[Validator | Callable[[Any], None]],
) -> None:
    for validator in validators:
        try:
            validator(value)
        except ValueError as exc:
            _add_error(errors, field, str(exc))


def _add_error(errors: Dict[str, List[str]], field: str, message: str) -> None:
    errors.setdefault(field, []).append(message)
