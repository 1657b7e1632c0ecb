"""Client connections that run SQL on a netsqlite server."""

from __future__ import annotations

import collections
import logging
from typing import Any, List, Optional, Sequence, Tuple

import grpc

from netsqlite.dsn import Config, DSNError, parse_dsn
from netsqlite.protocol import (
    EXEC_METHOD,
    PING_METHOD,
    QUERY_METHOD,
    ExecRequest,
    ExecResponse,
    PingRequest,
    PingResponse,
    QueryRequest,
    QueryResponse,
    decoder,
    encode,
    to_value,
)
from netsqlite.result import ExecResult
from netsqlite.rows import Rows
from netsqlite.status import Code, StatusError

CONNECT_PING_TIMEOUT = 10.0

log = logging.getLogger(__name__)


def _rpc_status(exc: grpc.RpcError) -> Tuple[Any, str]:
    """Return the status code and details carried by a failed call."""
    code_getter = getattr(exc, "code", None)
    grpc_code = code_getter() if callable(code_getter) else None
    details_getter = getattr(exc, "details", None)
    details = details_getter() if callable(details_getter) else None
    if not details:
        details = str(exc)
    name = grpc_code.name if grpc_code is not None else "UNKNOWN"
    try:
        code = Code[name]
    except KeyError:
        code = grpc_code
    return code, details


class _CallDetails(
    collections.namedtuple(
        "_CallDetails",
        ("method", "timeout", "metadata", "credentials", "wait_for_ready", "compression"),
    ),
    grpc.ClientCallDetails,
):
    pass


class _TokenInterceptor(
    grpc.UnaryUnaryClientInterceptor, grpc.UnaryStreamClientInterceptor
):
    """Adds the authentication token to the metadata of every call."""

    def __init__(self, token: str) -> None:
        self._metadata = (("authorization", f"Bearer {token}"),)

    def _with_token(self, details: grpc.ClientCallDetails) -> _CallDetails:
        metadata = list(details.metadata or ()) + list(self._metadata)
        return _CallDetails(
            details.method,
            details.timeout,
            metadata,
            details.credentials,
            getattr(details, "wait_for_ready", None),
            getattr(details, "compression", None),
        )

    def intercept_unary_unary(self, continuation, client_call_details, request):
        return continuation(self._with_token(client_call_details), request)

    def intercept_unary_stream(self, continuation, client_call_details, request):
        return continuation(self._with_token(client_call_details), request)


def _proto_args(args: Sequence[Any]) -> List[Any]:
    converted = []
    for index, arg in enumerate(args):
        try:
            converted.append(to_value(arg))
        except TypeError as exc:
            raise TypeError(
                f"netsqlite: unsupported arg type {type(arg).__name__} "
                f"at index {index}: {exc}"
            ) from exc
    return converted


class Connection:
    """An open connection to one database on a netsqlite server."""

    def __init__(self, channel: grpc.Channel, db_name: str) -> None:
        self._channel: Optional[grpc.Channel] = channel
        self.db_name = db_name
        self._closed = False
        self._ping = channel.unary_unary(
            PING_METHOD,
            request_serializer=encode,
            response_deserializer=decoder(PingResponse),
        )
        self._exec = channel.unary_unary(
            EXEC_METHOD,
            request_serializer=encode,
            response_deserializer=decoder(ExecResponse),
        )
        self._query = channel.unary_stream(
            QUERY_METHOD,
            request_serializer=encode,
            response_deserializer=decoder(QueryResponse),
        )

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed or self._channel is None:
            raise ConnectionError("netsqlite: connection is closed")

    def ping(self, timeout: Optional[float] = None) -> str:
        """Ask the server whether the database answers; returns its reply."""
        self._check_open()
        log.debug("Driver: executing ping")
        try:
            response = self._ping(PingRequest(database_name=self.db_name), timeout=timeout)
        except grpc.RpcError as exc:
            _, details = _rpc_status(exc)
            log.debug("Driver: ping failed: %s", details)
            raise ConnectionError(f"netsqlite: ping failed: {details}") from exc
        return response.message

    def execute(self, query: str, *args: Any) -> ExecResult:
        """Run a statement that returns no rows."""
        self._check_open()
        log.debug("Driver: execute: %s", query)
        request = ExecRequest(
            database_name=self.db_name, sql=query, args=_proto_args(args)
        )
        try:
            response = self._exec(request)
        except grpc.RpcError as exc:
            code, details = _rpc_status(exc)
            raise StatusError(code, f"netsqlite: gRPC Exec failed: {details}") from exc
        return ExecResult(response.rows_affected, response.last_insert_id)

    def query(self, query: str, *args: Any) -> Rows:
        """Run a query and return its rows."""
        self._check_open()
        log.debug("Driver: query: %s", query)
        request = QueryRequest(
            database_name=self.db_name, sql=query, args=_proto_args(args)
        )
        try:
            stream = self._query(request)
        except grpc.RpcError as exc:
            code, details = _rpc_status(exc)
            raise StatusError(code, f"netsqlite: gRPC Query failed: {details}") from exc

        try:
            first = next(stream)
        except StopIteration:
            return Rows(None, [])
        except grpc.RpcError as exc:
            code, details = _rpc_status(exc)
            raise StatusError(
                code, f"netsqlite: failed receiving columns: {details}"
            ) from exc

        if first.columns is None:
            stop = getattr(stream, "cancel", None)
            if callable(stop):
                stop()
            raise ValueError("netsqlite: protocol error - expected Columns first")
        return Rows(stream, first.columns)

    def close(self) -> None:
        """Close the underlying channel; later calls raise ConnectionError."""
        if self._closed:
            return
        self._closed = True
        log.debug("Driver: closing connection.")
        channel, self._channel = self._channel, None
        if channel is not None:
            channel.close()

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


def _target(addr: str) -> str:
    return f"localhost{addr}" if addr.startswith(":") else addr


class Connector:
    """Opens connections described by a parsed DSN."""

    def __init__(self, config: Config) -> None:
        self.config = config

    def connect(self, timeout: float = CONNECT_PING_TIMEOUT) -> Connection:
        """Open a channel to the server and verify it with a ping."""
        if self.config.use_tls:
            raise ValueError(
                "netsqlite: TLS requested in DSN but client TLS is not supported"
            )
        channel = grpc.intercept_channel(
            grpc.insecure_channel(_target(self.config.addr)),
            _TokenInterceptor(self.config.token),
        )
        connection = Connection(channel, self.config.db_name)
        try:
            connection.ping(timeout)
        except ConnectionError as exc:
            connection.close()
            raise ConnectionError(
                "netsqlite: initial gRPC ping failed "
                f"(check server logs for auth/db errors): {exc}"
            ) from exc
        return connection


def connect(dsn: str) -> Connection:
    """Parse ``dsn`` and open a connection to the server it names."""
    try:
        config = parse_dsn(dsn)
    except DSNError as exc:
        raise DSNError(f"netsqlite: parsing DSN failed: {exc}") from exc
    return Connector(config).connect()