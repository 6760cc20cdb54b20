"""
Validation utilities exposed at the package level.
"""

from .errors import InvalidRange, ValidationError
from .pipeline import (
    validate_definitions,
    validate_partition_count,
    validate_partition_definition,
    validate_partition_names,
    validate_year_range,
)
from .validators import MinValueValidator, NotEmptyValidator, RegexValidator

__all__ = [
    "InvalidRange",
    "ValidationError",
    "validate_definitions",
    "validate_partition_count",
    "validate_partition_definition",
    "validate_partition_names",
    "validate_year_range",
    "MinValueValidator",
    "NotEmptyValidator",
    "RegexValidator",
]
