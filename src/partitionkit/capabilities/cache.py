"""Memoized server capability state."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from threading import RLock
from typing import Callable, Optional


class ServerDialect(str, Enum):
    MYSQL_UNSUPPORTED = "mysql_unsupported"
    MYSQL_LEGACY = "mysql_legacy"
    MYSQL_PLUGIN = "mysql_plugin"
    MYSQL_NATIVE = "mysql_native"
    POSTGRES_DECLARATIVE = "postgres_declarative"

    @property
    def declarative(self) -> bool:
        return self is ServerDialect.POSTGRES_DECLARATIVE


@dataclass(frozen=True)
class CapabilityState:
    supported: bool = False
    checked: bool = False
    dialect: Optional[ServerDialect] = None
    version: Optional[str] = None


UNCHECKED = CapabilityState()


class CapabilityCache:
    """
    Holds the detection result for one adapter/session until :meth:`reset`.
    """

    def __init__(self) -> None:
        self._state: CapabilityState = UNCHECKED
        self._lock = RLock()

    def get(self, compute: Callable[[], CapabilityState]) -> CapabilityState:
        state = self._state
        if state.checked:
            return state
        with self._lock:
            if not self._state.checked:
                self._state = compute()
            return self._state

    def peek(self) -> CapabilityState:
        with self._lock:
            return self._state

    def reset(self) -> None:
        with self._lock:
            self._state = UNCHECKED
