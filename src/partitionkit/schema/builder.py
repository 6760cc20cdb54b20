"""
Statement builder assembling DDL from ordered clause fragments.
"""

from __future__ import annotations

from typing import Iterable, List


def call(function: str, *arguments: str) -> str:
    """
    Render ``FUNCTION(arg1, arg2)`` with no whitespace before the parenthesis.
    """
    return f"{function}({', '.join(arguments)})"


def join_list(items: Iterable[str], separator: str = ", ") -> str:
    """
    Join clause items, rejecting blanks so a separator can never trail the list.
    """
    pieces: List[str] = []
    for item in items:
        text = str(item).strip()
        if not text:
            raise ValueError("Clause list items cannot be blank.")
        pieces.append(text)
    if not pieces:
        raise ValueError("Clause list cannot be empty.")
    return separator.join(pieces)


class StatementBuilder:
    """
    Ordered list of clause fragments joined with single spaces.

    Parenthesised lists go through :meth:`group`, which joins its items instead of
    appending separators one by one.
    """

    def __init__(self, *fragments: str) -> None:
        self._fragments: List[str] = []
        self.add(*fragments)

    def add(self, *fragments: str) -> "StatementBuilder":
        for fragment in fragments:
            text = str(fragment).strip()
            if text:
                self._fragments.append(text)
        return self

    def group(self, items: Iterable[str], *, separator: str = ", ") -> "StatementBuilder":
        self._fragments.append(f"({join_list(items, separator)})")
        return self

    def build(self) -> str:
        if not self._fragments:
            raise ValueError("Cannot build an empty statement.")
        return " ".join(self._fragments)

    def __str__(self) -> str:
        return self.build()
