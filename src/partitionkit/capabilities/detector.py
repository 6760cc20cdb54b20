"""
Server capability detection for partitioning support.
"""

from __future__ import annotations

import re
from dataclasses import replace
from typing import TYPE_CHECKING, Tuple

from ..utils import get_logger
from .cache import CapabilityCache, CapabilityState, ServerDialect
from .errors import UnsupportedPartitioning

if TYPE_CHECKING:
    from ..adapters.base import DatabaseAdapter

_VERSION_RE = re.compile(r"(\d+(?:\.\d+)*)")

MYSQL_NATIVE_VERSION = (8,)
MYSQL_PLUGIN_VERSION = (5, 6)
MYSQL_LEGACY_VERSION = (5, 1)


def parse_version(raw: str) -> Tuple[int, ...]:
    """
    Extract the leading dotted version number, e.g. ``"5.7.41-log"`` -> ``(5, 7, 41)``.

    Returns an empty tuple when no digits are present.
    """
    match = _VERSION_RE.search(raw or "")
    if not match:
        return ()
    return tuple(int(part) for part in match.group(1).split("."))


def classify_version(version: Tuple[int, ...]) -> ServerDialect:
    if not version:
        return ServerDialect.MYSQL_UNSUPPORTED
    if version >= MYSQL_NATIVE_VERSION:
        return ServerDialect.MYSQL_NATIVE
    if version >= MYSQL_PLUGIN_VERSION:
        return ServerDialect.MYSQL_PLUGIN
    if version >= MYSQL_LEGACY_VERSION:
        return ServerDialect.MYSQL_LEGACY
    return ServerDialect.MYSQL_UNSUPPORTED


class CapabilityDetector:
    """
    Decides whether the connected server can partition tables and which rules apply.

    Detection runs at most once per :class:`CapabilityCache`; PostgreSQL is always
    supported and never queried.
    """

    def __init__(self, adapter: "DatabaseAdapter", cache: CapabilityCache | None = None) -> None:
        self.adapter = adapter
        self.cache = cache or CapabilityCache()
        self.logger = get_logger("capabilities.detector")

    def state(self) -> CapabilityState:
        return self.cache.get(self._detect)

    def have_partitioning(self) -> bool:
        return self.state().supported

    def dialect(self) -> ServerDialect | None:
        return self.state().dialect

    def assert_support(self) -> CapabilityState:
        state = self.state()
        if not state.supported:
            raise UnsupportedPartitioning(
                f"Partitioning is unsupported on your server version ({state.version or 'unknown'})."
            )
        return state

    def reset(self) -> None:
        self.cache.reset()

    def _detect(self) -> CapabilityState:
        if self.adapter.driver_name() == "postgresql":
            state = CapabilityState(
                supported=True, checked=True, dialect=ServerDialect.POSTGRES_DECLARATIVE
            )
            self.logger.info("PostgreSQL detected; declarative partitioning available.")
            return state

        raw_version = self.adapter.server_version()
        dialect = classify_version(parse_version(raw_version))
        state = CapabilityState(supported=False, checked=True, dialect=dialect, version=raw_version)

        if dialect is ServerDialect.MYSQL_NATIVE:
            state = replace(state, supported=True)
        elif dialect is ServerDialect.MYSQL_PLUGIN:
            state = replace(state, supported=self._has_partition_plugin())
        elif dialect is ServerDialect.MYSQL_LEGACY:
            state = replace(state, supported=self._has_partitioning_variable())

        self.logger.info(
            "MySQL %s detected (%s); partitioning supported=%s",
            raw_version,
            dialect.value,
            state.supported,
        )
        return state

    def _has_partition_plugin(self) -> bool:
        # see https://dev.mysql.com/doc/refman/5.6/en/partitioning.html
        for row in self.adapter.query("SHOW PLUGINS"):
            if row.get("Name") == "partition":
                return True
        return False

    def _has_partitioning_variable(self) -> bool:
        return bool(self.adapter.query("SHOW VARIABLES LIKE 'have_partitioning'"))
