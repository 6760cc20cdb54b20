"""DSN parsing and redaction utilities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlparse

_DRIVER_FAMILIES = {
    "mysql": "mysql",
    "mysql+pymysql": "mysql",
    "mysql+mysqldb": "mysql",
    "mariadb": "mysql",
    "postgres": "postgresql",
    "postgresql": "postgresql",
    "postgresql+psycopg": "postgresql",
    "pgsql": "postgresql",
}


class DSNError(ValueError):
    """Raised when a DSN cannot be parsed or names an unknown driver."""


@dataclass
class DSNConfig:
    driver: str
    username: Optional[str]
    password: Optional[str]
    host: Optional[str]
    port: Optional[int]
    database: Optional[str]
    path: str
    query: dict[str, str]

    @property
    def family(self) -> str:
        """
        Normalized backend family (``mysql`` or ``postgresql``) for the DSN scheme.
        """
        try:
            return _DRIVER_FAMILIES[self.driver.lower()]
        except KeyError:
            raise DSNError(f"Unsupported DSN scheme {self.driver!r}") from None

    def redacted(self) -> str:
        """
        Return the DSN with credentials redacted but structure preserved.
        """

        netloc = ""
        if self.username:
            netloc += self.username
            if self.password:
                netloc += ":***"
            netloc += "@"
        if self.host:
            netloc += self.host
        if self.port:
            netloc += f":{self.port}"

        query_string = urlencode(self.query) if self.query else ""

        result = f"{self.driver}://"
        if netloc:
            result += netloc
        result += self.path or ""
        if query_string:
            result += f"?{query_string}"
        return result


def parse_dsn(dsn: str) -> DSNConfig:
    parsed = urlparse(dsn)
    if not parsed.scheme:
        raise DSNError("DSN must include a scheme such as mysql:// or postgresql://")
    query = {k: v[0] for k, v in parse_qs(parsed.query).items()}
    try:
        port = parsed.port
    except ValueError as exc:
        raise DSNError(f"Invalid port in DSN: {exc}") from exc
    return DSNConfig(
        driver=parsed.scheme,
        username=parsed.username,
        password=parsed.password,
        host=parsed.hostname,
        port=port,
        database=parsed.path.lstrip("/") or None,
        path=parsed.path or "",
        query=query,
    )
