"""
Slow statement threshold configuration.
"""

from __future__ import annotations

import os

SLOW_QUERY_ENV_VAR = "PARTITIONKIT_SLOW_QUERY_MS"


class SlowQueryConfigurationError(ValueError):
    """Raised when the slow statement threshold cannot be parsed."""


def resolve_slow_query_ms(*, default: int, override: int | None = None) -> int:
    """
    Pick the slow statement threshold in milliseconds.

    An explicit ``override`` wins, then ``PARTITIONKIT_SLOW_QUERY_MS``, then ``default``.
    """
    if override is not None:
        if override < 0:
            raise SlowQueryConfigurationError("slow_query_ms must be zero or positive.")
        return override

    raw = os.getenv(SLOW_QUERY_ENV_VAR)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError as exc:
        raise SlowQueryConfigurationError(
            f"Invalid integer value for {SLOW_QUERY_ENV_VAR}: {raw!r}"
        ) from exc
    if value < 0:
        raise SlowQueryConfigurationError(f"{SLOW_QUERY_ENV_VAR} must be zero or positive.")
    return value
