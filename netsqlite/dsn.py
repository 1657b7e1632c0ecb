"""Parsing of ``netsqlite://host:port/token?database=name`` strings."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import parse_qsl, unquote, urlsplit

DRIVER_NAME = "netsqlite"


class DSNError(ValueError):
    """Raised when a DSN string cannot be parsed."""


@dataclass(frozen=True)
class Config:
    """Connection settings taken from a DSN."""

    addr: str
    db_name: str
    token: str
    use_tls: bool = False
    raw_query: str = ""


def _first(query: str, key: str) -> str:
    for name, value in parse_qsl(query, keep_blank_values=True):
        if name == key:
            return value
    return ""


def parse_dsn(dsn: str) -> Config:
    """Parse ``netsqlite://host:port/token?database=name[&tls=true]``."""
    try:
        parts = urlsplit(dsn)
        parts.port
    except ValueError as exc:
        raise DSNError(f"invalid DSN format: {exc}") from exc

    if parts.scheme != DRIVER_NAME:
        raise DSNError(
            f"invalid scheme: expected '{DRIVER_NAME}', got '{parts.scheme}'"
        )

    if parts.username:
        raise DSNError(
            "invalid DSN format: found username in URL authority section. "
            "The correct format is: netsqlite://host:port/token?database=dbname"
        )

    addr = parts.netloc.rpartition("@")[2]
    if not addr or ":" not in addr:
        raise DSNError(
            "gRPC server address (host:port) missing or invalid in DSN host part"
        )

    token = unquote(parts.path).removeprefix("/")
    if not token:
        raise DSNError("authentication token missing in DSN path")

    db_name = _first(parts.query, "database")
    if not db_name:
        raise DSNError("database name missing in DSN (use ?database=name)")

    return Config(
        addr=addr,
        db_name=db_name,
        token=token,
        use_tls=_first(parts.query, "tls") == "true",
        raw_query=parts.query,
    )