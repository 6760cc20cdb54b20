"""Security helpers for partitionkit."""

from .dsns import DSNConfig, DSNError, parse_dsn
from .redaction import redact_params

__all__ = ["DSNConfig", "DSNError", "parse_dsn", "redact_params"]
