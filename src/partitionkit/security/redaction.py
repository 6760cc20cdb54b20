"""Redaction helpers for logged statement parameters."""

from __future__ import annotations

from typing import Any, Iterable, Sequence

REDACTED_VALUE = "***"

_SENSITIVE_TOKENS = (
    "password",
    "passwd",
    "secret",
    "token",
    "apikey",
    "api_key",
    "private_key",
    "bearer",
    "authorization",
)


def is_sensitive_value(value: str) -> bool:
    normalized = value.lower()
    return any(token in normalized for token in _SENSITIVE_TOKENS)


def redact_value(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        redacted = [redact_value(item) for item in value]
        return tuple(redacted) if isinstance(value, tuple) else redacted
    if isinstance(value, bytes):
        decoded = value.decode("utf-8", errors="ignore")
        if decoded and is_sensitive_value(decoded):
            return REDACTED_VALUE
        return value
    if isinstance(value, str) and is_sensitive_value(value):
        return REDACTED_VALUE
    return value


def redact_params(params: Iterable[Any] | None) -> list[Any]:
    if not params:
        return []
    return [redact_value(value) for value in params]


def abbreviate_sql(sql: str, max_length: int = 120) -> str:
    """
    Collapse whitespace and shorten long DDL for log messages.
    """
    normalized = " ".join(sql.strip().split())
    if len(normalized) <= max_length:
        return normalized
    return normalized[: max_length - 3] + "..."


def describe_partitions(partitions: Sequence[str]) -> str:
    return ", ".join(partitions) if partitions else "<none>"
