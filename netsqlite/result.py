"""The outcome of a statement that returns no rows."""

from __future__ import annotations

UNAVAILABLE = -1


class ExecResult:
    """Rows affected and last insert id; -1 means the server could not report it."""

    def __init__(self, rows_affected: int, last_insert_id: int) -> None:
        self._rows_affected = rows_affected
        self._last_insert_id = last_insert_id

    def last_insert_id(self) -> int:
        if self._last_insert_id == UNAVAILABLE:
            raise ValueError("netsqlite: LastInsertId not available or not supported")
        return self._last_insert_id

    def rows_affected(self) -> int:
        if self._rows_affected == UNAVAILABLE:
            raise ValueError("netsqlite: RowsAffected not available")
        return self._rows_affected

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ExecResult):
            return NotImplemented
        return vars(self) == vars(other)