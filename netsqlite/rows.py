"""Iteration over the rows streamed back for a query."""

from __future__ import annotations

import logging
from typing import Any, Iterator, Optional, Sequence, Tuple

import grpc

from netsqlite.protocol import QueryResponse
from netsqlite.status import Code, StatusError

log = logging.getLogger(__name__)


class Rows:
    """Query result rows, read lazily from the response stream as tuples."""

    def __init__(self, stream: Optional[Iterator[QueryResponse]], columns: Sequence[str]) -> None:
        self._stream = stream
        self.columns = list(columns)
        self.closed = stream is None

    def close(self) -> None:
        """Stop reading; rows not yet received are abandoned."""
        if not self.closed:
            self._finish(cancel=True)

    def _finish(self, cancel: bool = False) -> None:
        self.closed = True
        stream, self._stream = self._stream, None
        if cancel and callable(getattr(stream, "cancel", None)):
            stream.cancel()

    def __iter__(self) -> "Rows":
        return self

    def __next__(self) -> Tuple[Any, ...]:
        if self.closed or self._stream is None:
            raise StopIteration
        try:
            response = next(self._stream)
        except StopIteration:
            self._finish()
            raise StopIteration from None
        except grpc.RpcError as exc:
            self._finish()
            status = exc.code() if callable(getattr(exc, "code", None)) else None
            code = Code.from_grpc(status) if isinstance(status, grpc.StatusCode) else Code.UNKNOWN
            if code is Code.CANCELLED:
                raise ConnectionError("netsqlite: query stream was cancelled") from exc
            details = exc.details() if callable(getattr(exc, "details", None)) else None
            raise StatusError(
                code, f"netsqlite: receiving row data failed: {details or exc}"
            ) from exc

        if response.row is None:
            self._finish(cancel=True)
            raise ValueError("netsqlite: protocol error - expected Row data")
        if len(response.row) != len(self.columns):
            self._finish(cancel=True)
            raise ValueError(
                f"netsqlite: column count mismatch (expected {len(self.columns)}, "
                f"got {len(response.row)})"
            )
        return tuple(response.row)

    def __enter__(self) -> "Rows":
        return self

    def __exit__(self, *exc) -> None:
        self.close()