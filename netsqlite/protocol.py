"""Messages exchanged with the server and their JSON wire encoding."""

from __future__ import annotations

import base64
import json
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, Callable, List, Optional, Type, TypeVar

SERVICE_NAME = "netsqlite.v1.NetsqliteService"
PING_METHOD = f"/{SERVICE_NAME}/Ping"
EXEC_METHOD = f"/{SERVICE_NAME}/Exec"
QUERY_METHOD = f"/{SERVICE_NAME}/Query"

M = TypeVar("M")


def to_value(value: Any) -> Any:
    """Convert ``value`` into a form that can travel in a message.

    Bytes become base64 text, tuples become lists and mappings must have
    string keys; any other type raises ``TypeError``.
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, Mapping):
        converted = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"invalid key type: {type(key).__name__}")
            converted[key] = to_value(item)
        return converted
    if isinstance(value, (list, tuple)):
        return [to_value(item) for item in value]
    raise TypeError(f"invalid type: {type(value).__name__}")


@dataclass
class PingRequest:
    database_name: str = ""


@dataclass
class PingResponse:
    message: str = ""


@dataclass
class ExecRequest:
    database_name: str = ""
    sql: str = ""
    args: List[Any] = field(default_factory=list)


@dataclass
class ExecResponse:
    rows_affected: int = 0
    last_insert_id: int = 0


@dataclass
class QueryRequest:
    database_name: str = ""
    sql: str = ""
    args: List[Any] = field(default_factory=list)


@dataclass
class QueryResponse:
    """One streamed query message: the column names or a single row."""

    columns: Optional[List[str]] = None
    row: Optional[List[Any]] = None

    def __post_init__(self) -> None:
        if self.columns is not None and self.row is not None:
            raise ValueError("QueryResponse holds either columns or a row, not both")


def encode(message: Any) -> bytes:
    """Serialise a message to bytes, leaving out fields that are unset."""
    if not is_dataclass(message) or isinstance(message, type):
        raise TypeError(f"not a message: {type(message).__name__}")
    payload = {
        f.name: getattr(message, f.name)
        for f in fields(message)
        if getattr(message, f.name) is not None
    }
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode(
        "utf-8"
    )


def decoder(message_class: Type[M]) -> Callable[[bytes], M]:
    """Return a function that turns bytes back into ``message_class``."""
    names = {f.name for f in fields(message_class)}

    def decode(data: bytes) -> M:
        try:
            payload = json.loads(data)
        except ValueError as exc:
            raise ValueError(f"malformed {message_class.__name__}: {exc}") from exc
        if not isinstance(payload, dict):
            raise ValueError(f"malformed {message_class.__name__}: not an object")
        return message_class(**{k: v for k, v in payload.items() if k in names})

    return decode