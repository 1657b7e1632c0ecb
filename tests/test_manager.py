import os
from concurrent.futures import ThreadPoolExecutor

import pytest

from netsqlite.manager import DBManager
from netsqlite.status import Code, StatusError


def test_acquire_pool_and_ping(tmp_path):
    os.chmod(tmp_path, 0o755)
    manager = DBManager(str(tmp_path))

    pool = manager.acquire_pool("wowdb.db")
    assert pool is not None

    lease = pool.acquire()
    db = lease.value
    assert db.execute("SELECT 1").fetchone() == (1,)
    lease.release()

    pool.close()
    assert pool.closed


def test_manager_creates_data_directory(tmp_path):
    datadir = tmp_path / "nested" / "data"
    DBManager(str(datadir))
    assert datadir.is_dir()


def test_database_file_lives_in_data_directory(tmp_path):
    manager = DBManager(str(tmp_path))
    with manager.acquire_pool("wowdb.db").acquire():
        pass
    assert (tmp_path / "wowdb.db").exists()
    manager.close()


def test_same_name_returns_same_pool(tmp_path):
    manager = DBManager(str(tmp_path))
    assert manager.acquire_pool("a.db") is manager.acquire_pool("a.db")
    assert manager.acquire_pool("a.db") is not manager.acquire_pool("b.db")


def test_concurrent_acquire_returns_one_pool(tmp_path):
    manager = DBManager(str(tmp_path))
    with ThreadPoolExecutor(max_workers=8) as executor:
        pools = list(executor.map(manager.acquire_pool, ["shared.db"] * 32))
    assert all(pool is pools[0] for pool in pools)


def test_empty_name_is_invalid_argument(tmp_path):
    manager = DBManager(str(tmp_path))
    with pytest.raises(StatusError) as info:
        manager.acquire_pool("")
    assert info.value.code is Code.INVALID_ARGUMENT
    assert info.value.message == "database_name is required"


def test_data_written_through_one_lease_is_seen_by_another(tmp_path):
    manager = DBManager(str(tmp_path))
    pool = manager.acquire_pool("data.db")
    first = pool.acquire()
    second = pool.acquire()
    first.value.execute("CREATE TABLE t (name TEXT)")
    first.value.execute("INSERT INTO t VALUES (?)", ("John Doe",))
    assert second.value.execute("SELECT name FROM t").fetchall() == [("John Doe",)]
    first.release()
    second.release()
    manager.close()


def test_close_closes_all_pools(tmp_path):
    with DBManager(str(tmp_path)) as manager:
        pools = [manager.acquire_pool(name) for name in ("a.db", "b.db")]
    assert all(pool.closed for pool in pools)
    assert manager.acquire_pool("a.db") is not pools[0]