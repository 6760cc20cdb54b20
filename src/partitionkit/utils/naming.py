"""
Naming utilities for partitions and partition child tables.
"""

import re

# Ordered by HASH(MONTH(col)) bucket: MONTH() % 12 puts December in bucket 0.
HASH_ORDERED_MONTHS = ("dec", "jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov")

CALENDAR_MONTHS = HASH_ORDERED_MONTHS[1:] + HASH_ORDERED_MONTHS[:1]

FUTURE_PARTITION = "future"

IDENTIFIER_RE = re.compile(r"^(?:[A-Za-z_][A-Za-z0-9_$]*|`(?:[^`]|``)+`)$")


def month_name(month: int) -> str:
    """
    Return the three letter partition name for a calendar month (1-12).
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}.")
    return CALENDAR_MONTHS[month - 1]


def is_valid_identifier(name: str) -> bool:
    return bool(IDENTIFIER_RE.match(name))


def child_table_name(table: str, suffix: str) -> str:
    return f"{table}_{suffix}"
