"""A bounded resource pool and the SQLite connections it hands out."""

from __future__ import annotations

import logging
import sqlite3
import threading
import time
from typing import Callable, Generic, List, Optional, TypeVar

T = TypeVar("T")

MAX_POOL_SIZE = 5
BUSY_TIMEOUT_SECONDS = 5.0

log = logging.getLogger(__name__)


class _Lease(Generic[T]):
    """A borrowed value; returned to the pool on ``release`` or on leaving a with block."""

    def __init__(self, pool: "Pool[T]", value: T) -> None:
        self._pool = pool
        self.value = value
        self._done = False

    def release(self) -> None:
        if not self._done:
            self._done = True
            self._pool._give_back(self.value)

    def __enter__(self) -> T:
        return self.value

    def __exit__(self, *exc) -> None:
        self.release()


class Pool(Generic[T]):
    """A thread-safe pool holding at most ``max_size`` values."""

    def __init__(
        self, constructor: Callable[[], T], destructor: Callable[[T], None], max_size: int
    ) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self._constructor = constructor
        self._destructor = destructor
        self.max_size = max_size
        self.size = 0
        self._idle: List[T] = []
        self._closed = False
        self._cond = threading.Condition()

    def acquire(self, timeout: Optional[float] = None) -> _Lease[T]:
        """Borrow a value, waiting up to ``timeout`` seconds when the pool is full."""
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            while True:
                if self._closed:
                    raise RuntimeError("pool is closed")
                if self._idle:
                    return _Lease(self, self._idle.pop())
                if self.size < self.max_size:
                    self.size += 1
                    break
                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    raise TimeoutError("timed out waiting for a pooled resource")
                self._cond.wait(remaining)
        try:
            return _Lease(self, self._constructor())
        except BaseException:
            with self._cond:
                self.size -= 1
                self._cond.notify()
            raise

    def close(self) -> None:
        """Close the pool; idle values are destroyed now, borrowed ones on release."""
        with self._cond:
            self._closed = True
            idle, self._idle = self._idle, []
            self.size -= len(idle)
            self._cond.notify_all()
        for value in idle:
            self._destroy(value)

    def _give_back(self, value: T) -> None:
        with self._cond:
            if not self._closed:
                self._idle.append(value)
                self._cond.notify()
                return
            self.size -= 1
        self._destroy(value)

    def _destroy(self, value: T) -> None:
        try:
            self._destructor(value)
        except Exception:
            log.exception("Failed to close db")


def create_or_open(path: str) -> sqlite3.Connection:
    """Open (creating if needed) a SQLite database in WAL mode."""
    db = sqlite3.connect(
        path, timeout=BUSY_TIMEOUT_SECONDS, check_same_thread=False, isolation_level=None
    )
    try:
        db.execute("PRAGMA journal_mode=WAL;")
        (journal_mode,) = db.execute("PRAGMA journal_mode;").fetchone()
        log.info("Database journal mode: mode=%s database=%s", journal_mode, path)
        db.execute("CREATE TABLE IF NOT EXISTS _test_wal (id INTEGER PRIMARY KEY);")
    except sqlite3.Error:
        log.exception("Failed to prepare database %s", path)
        db.close()
        raise
    log.info("Created database successfully: database=%s", path)
    return db


def new_pool(db_path: str) -> Pool[sqlite3.Connection]:
    """Create a pool of connections to the database at ``db_path``."""
    log.info("Creating new pool: database=%s", db_path)
    return Pool(lambda: create_or_open(db_path), sqlite3.Connection.close, MAX_POOL_SIZE)