"""One connection pool per database file in a data directory."""

from __future__ import annotations

import logging
import os
import sqlite3
import threading
from typing import Dict

from netsqlite.pool import Pool, new_pool
from netsqlite.status import Code, StatusError

log = logging.getLogger(__name__)


class DBManager:
    """Opens and caches connection pools for databases under ``datadir``."""

    def __init__(self, datadir: str) -> None:
        os.makedirs(datadir, exist_ok=True)
        self.datadir = datadir
        self._pools: Dict[str, Pool[sqlite3.Connection]] = {}
        self._lock = threading.Lock()

    def acquire_pool(self, db_name: str) -> Pool[sqlite3.Connection]:
        """Return the pool for ``db_name``, creating it on first use."""
        if not db_name:
            raise StatusError(Code.INVALID_ARGUMENT, "database_name is required")
        db_path = os.path.normpath(os.path.join(self.datadir, db_name))
        with self._lock:
            if db_path not in self._pools:
                try:
                    self._pools[db_path] = new_pool(db_path)
                except Exception:
                    log.exception("Fatal pool creation")
                    raise StatusError(Code.INTERNAL, "failed to created a pool") from None
            return self._pools[db_path]

    def close(self) -> None:
        """Close every pool the manager has opened."""
        with self._lock:
            pools, self._pools = list(self._pools.values()), {}
        for pool in pools:
            pool.close()