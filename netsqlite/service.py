"""The RPC service that runs SQL against databases in a data directory."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Mapping
from typing import Any, Iterable, Iterator

import grpc

from netsqlite.manager import DBManager
from netsqlite.protocol import (
    SERVICE_NAME,
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
from netsqlite.status import Code, StatusError

log = logging.getLogger(__name__)


def _unary(method):
    def call(request, context):
        try:
            return method(request, context)
        except StatusError as exc:
            context.abort(exc.code.grpc_status, exc.message)

    return call


def _stream(method):
    def call(request, context):
        try:
            yield from method(request, context)
        except StatusError as exc:
            context.abort(exc.code.grpc_status, exc.message)

    return call


class NetsqliteService:
    """Handles Ping, Exec and Query calls for named databases."""

    def __init__(self, tokens: Iterable[str], datadir: str) -> None:
        if isinstance(tokens, Mapping):
            tokens = (t for t, ok in tokens.items() if ok)
        self.valid_tokens = frozenset(tokens)
        self.manager = DBManager(datadir)

    def ping(self, request: PingRequest, context: Any) -> PingResponse:
        log.info("Received Ping request")
        pool = self.manager.acquire_pool(request.database_name)
        with pool.acquire(context.time_remaining()) as db:
            try:
                db.execute("SELECT 1").fetchone()
            except sqlite3.Error as exc:
                log.error("Actual DB Ping failed for %s: %s", request.database_name, exc)
                raise StatusError(
                    Code.INTERNAL, f"database ping failed for {request.database_name}: {exc}"
                ) from exc
        return PingResponse(message=f"PONG for db {request.database_name}")

    def exec(self, request: ExecRequest, context: Any) -> ExecResponse:
        pool = self.manager.acquire_pool(request.database_name)
        with pool.acquire(context.time_remaining()) as db:
            try:
                cursor = db.execute(request.sql, request.args)
            except sqlite3.Error as exc:
                raise StatusError(Code.INTERNAL, f"SQL execution failed: {exc}") from exc
            rows_affected = max(cursor.rowcount, 0)
            last_insert_id = cursor.lastrowid or 0
            cursor.close()
        log.info(
            "Exec successful for DB: db=%s ra=%d last_insert=%d",
            request.database_name, rows_affected, last_insert_id,
        )
        return ExecResponse(rows_affected=rows_affected, last_insert_id=last_insert_id)

    def query(self, request: QueryRequest, context: Any) -> Iterator[QueryResponse]:
        """Stream the column names, then one message per row."""
        name = request.database_name
        pool = self.manager.acquire_pool(name)
        with pool.acquire(context.time_remaining()) as db:
            try:
                cursor = db.execute(request.sql, request.args)
            except sqlite3.Error as exc:
                log.error("Query failed for DB '%s': %s", name, exc)
                raise StatusError(Code.INTERNAL, f"SQL query failed: {exc}") from exc
            try:
                columns = [d[0] for d in cursor.description or ()]
                yield QueryResponse(columns=columns)
                log.info("Sent columns for query on DB '%s': %s", name, columns)
                while True:
                    try:
                        row = cursor.fetchone()
                    except sqlite3.Error as exc:
                        raise StatusError(Code.INTERNAL, f"row iteration error: {exc}") from exc
                    if row is None:
                        break
                    try:
                        values = [to_value(v) for v in row]
                    except TypeError as exc:
                        raise StatusError(Code.INTERNAL, f"failed to convert value: {exc}") from exc
                    yield QueryResponse(row=values)
                    if not context.is_active():
                        log.info("Client disconnected during query stream for DB '%s'", name)
                        raise StatusError(Code.CANCELLED, "client disconnected")
            finally:
                cursor.close()
        log.info("Finished streaming query results for DB '%s'", name)

    def handler(self) -> grpc.GenericRpcHandler:
        """A gRPC handler serving this service's methods."""
        unary = grpc.unary_unary_rpc_method_handler
        return grpc.method_handlers_generic_handler(
            SERVICE_NAME,
            {
                "Ping": unary(_unary(self.ping), decoder(PingRequest), encode),
                "Exec": unary(_unary(self.exec), decoder(ExecRequest), encode),
                "Query": grpc.unary_stream_rpc_method_handler(
                    _stream(self.query), decoder(QueryRequest), encode
                ),
            },
        )