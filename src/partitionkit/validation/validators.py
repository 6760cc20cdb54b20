"""
Built-in validator helpers.
"""

from __future__ import annotations

import re
from typing import Any, Protocol, Sized


class Validator(Protocol):
    def __call__(self, value: Any) -> None: ...


class MinValueValidator:
    def __init__(self, minimum: float, message: str | None = None) -> None:
        self.minimum = minimum
        self.message = message or f"Ensure value is greater than or equal to {minimum}."

    def __call__(self, value: Any) -> None:
        if value is None:
            return
        if isinstance(value, bool) or value < self.minimum:
            raise ValueError(self.message)


class NotEmptyValidator:
    def __init__(self, message: str | None = None) -> None:
        self.message = message or "This value cannot be empty."

    def __call__(self, value: Any) -> None:
        if value is None:
            raise ValueError(self.message)
        if isinstance(value, str):
            if not value.strip():
                raise ValueError(self.message)
            return
        if isinstance(value, Sized) and len(value) == 0:
            raise ValueError(self.message)


class RegexValidator:
    def __init__(self, pattern: str | re.Pattern[str], message: str | None = None) -> None:
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern
        self.message = message or "Value does not match required pattern."

    def __call__(self, value: Any) -> None:
        if value is None:
            return
        if not isinstance(value, str) or not self.pattern.match(value):
            raise ValueError(self.message)
