import pytest

from netsqlite.result import ExecResult


def test_values_are_returned():
    result = ExecResult(3, 7)
    assert result.rows_affected() == 3
    assert result.last_insert_id() == 7


def test_zero_is_a_valid_value():
    result = ExecResult(0, 0)
    assert result.rows_affected() == 0
    assert result.last_insert_id() == 0


def test_unavailable_last_insert_id_raises():
    result = ExecResult(1, -1)
    assert result.rows_affected() == 1
    with pytest.raises(ValueError, match="netsqlite: LastInsertId not available or not supported"):
        result.last_insert_id()


def test_unavailable_rows_affected_raises():
    result = ExecResult(-1, 5)
    assert result.last_insert_id() == 5
    with pytest.raises(ValueError, match="netsqlite: RowsAffected not available"):
        result.rows_affected()


def test_equality_and_hash():
    assert ExecResult(2, 9) == ExecResult(2, 9)
    assert ExecResult(2, 9) != ExecResult(9, 2)
    assert len({ExecResult(2, 9), ExecResult(2, 9)}) == 1


def test_repr_round_trips_values():
    text = repr(ExecResult(4, 11))
    assert "rows_affected=4" in text
    assert "last_insert_id=11" in text